"""
Bounded-concurrency share row builder.

One task per share builds its display row, resolving the EOS path when asked.
A ThreadPoolExecutor sized to the concurrency ceiling is the admission gate;
rows are collected in completion order and only handed back once every task
has finished.
"""
import time
from concurrent.futures import ThreadPoolExecutor, as_completed, TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
from typing import Optional, Protocol

from boxcop.errors import MalformedInputError, MetadataLookupExhausted, ResolveTimeout
from boxcop.logging_conf import logger
from boxcop.metadata import NOT_RESOLVED
from boxcop.models import Share

SHARE_COLUMNS = ["ID", "FILEID", "OWNER", "TYPE", "SHARE_WITH", "PERMISSION", "URL", "PATH"]


class PathResolver(Protocol):
    def resolve_path(self, prefix: str, item_source: str, deadline: Optional[float] = None) -> str: ...


@dataclass
class ShareRow:
    """Display row of one share. degraded is set when its path could not be resolved."""
    share: Share
    cells: list[str]
    degraded: bool = False


@dataclass
class ResolveResult:
    columns: list[str]
    rows: list[ShareRow] = field(default_factory=list)
    duration: float = 0.0

    @property
    def degraded(self) -> list[ShareRow]:
        return [row for row in self.rows if row.degraded]


def build_row(share: Share, resolver: Optional[PathResolver] = None, deadline: Optional[float] = None) -> ShareRow:
    """Build the display row of a share, resolving its path when a resolver is given."""
    cells = [
        str(share.id),
        share.file_id,
        share.uid_owner,
        share.human_type,
        share.human_share_with,
        share.human_perm,
        share.public_link,
    ]
    if resolver is None:
        return ShareRow(share, cells)

    try:
        path = resolver.resolve_path(share.prefix, share.item_source, deadline=deadline)
    except (MetadataLookupExhausted, MalformedInputError) as e:
        logger.warning(f"Share {share.id}: {e}")
        return ShareRow(share, cells + [NOT_RESOLVED], degraded=True)
    return ShareRow(share, cells + [path], degraded=path == NOT_RESOLVED)


def resolve_all(
    shares: list[Share],
    print_paths: bool,
    concurrency: int,
    resolver: Optional[PathResolver] = None,
    timeout: Optional[float] = None,
) -> ResolveResult:
    """
    Build display rows for shares with at most `concurrency` tasks in flight.

    Without print_paths the PATH column is dropped, nothing is resolved and a
    single worker is used. Rows come back in completion order. If `timeout`
    seconds pass before every row is in, pending tasks are cancelled, running
    lookups stop at the same deadline and ResolveTimeout is raised.
    """
    if concurrency < 1:
        raise MalformedInputError(f"concurrency must be at least 1, got {concurrency}")
    if print_paths and resolver is None:
        raise ValueError("a resolver is required to print paths")

    start = time.time()
    columns = list(SHARE_COLUMNS)
    if not print_paths:
        concurrency = 1
        columns = columns[:-1]
        resolver = None

    result = ResolveResult(columns=columns)
    if not shares:
        return result

    logger.info(f"Building {len(shares)} share rows with {concurrency} workers (paths: {print_paths})")
    deadline = None if timeout is None else time.monotonic() + timeout
    executor = ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="resolve")
    try:
        futures = {executor.submit(build_row, share, resolver, deadline): share for share in shares}
        try:
            for future in as_completed(futures, timeout=timeout):
                result.rows.append(future.result())
        except (FuturesTimeout, ResolveTimeout):
            cancelled = sum(1 for f in futures if f.cancel())
            pending = len(futures) - len(result.rows)
            raise ResolveTimeout(
                f"path resolution did not finish within {timeout}s: "
                f"{pending} of {len(futures)} shares pending, {cancelled} cancelled"
            ) from None
    finally:
        # running lookups are bounded by the deadline, so waiting for them is short
        executor.shutdown(wait=True, cancel_futures=True)

    result.duration = time.time() - start
    if result.degraded:
        logger.warning(f"{len(result.degraded)} of {len(result.rows)} share paths could not be resolved")
    logger.info(f"Built {len(result.rows)} share rows in {result.duration:.1f}s")
    return result
