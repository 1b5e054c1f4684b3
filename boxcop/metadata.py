"""Resolve EOS paths of shared files through the MGM fileinfo endpoint."""
import time
from typing import Callable, Optional

import httpx

from boxcop import settings
from boxcop.errors import MalformedInputError, MetadataLookupExhausted, ResolveTimeout
from boxcop.logging_conf import logger
from boxcop.models import external_prefix

NOT_RESOLVED = "-"

# fuse formatted fileinfo answers "EOS_PATH:/eos/...", only the path is kept
RESPONSE_PREFIX_LEN = len("EOS_PATH:")


def parse_inode(item_source: str) -> int:
    """Parse an item source as an unsigned 64 bit inode."""
    try:
        inode = int(item_source.strip(), 10)
    except (AttributeError, ValueError):
        raise MalformedInputError(f"file identifier {item_source!r} is not a number") from None
    if inode < 0 or inode >= 2 ** 64:
        raise MalformedInputError(f"file identifier {item_source!r} is out of range")
    return inode


def fileinfo_url(prefix: str, inode: int) -> str:
    host = external_prefix(f"{prefix}.{settings.METADATA_DOMAIN}")
    return (
        f"http://{host}:{settings.METADATA_PORT}/proc/user/"
        f"?mgm.cmd=fileinfo&mgm.path=inode:{inode}&mgm.file.info.option=--path&mgm.format=fuse"
    )


class MetadataResolver:
    """HTTP client for EOS fileinfo lookups, safe to share between worker threads."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        max_retries: Optional[int] = None,
        backoff: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        concurrency: Optional[int] = None,
    ):
        # one pooled connection per worker, so no worker waits on the pool
        self.limits = httpx.Limits(
            max_connections=concurrency or settings.DEFAULT_CONCURRENCY,
            max_keepalive_connections=concurrency or settings.DEFAULT_CONCURRENCY,
        )
        self._client = client or httpx.Client(timeout=settings.METADATA_TIMEOUT, limits=self.limits)
        self.max_retries = settings.METADATA_MAX_RETRIES if max_retries is None else max_retries
        self.backoff = settings.METADATA_RETRY_BACKOFF if backoff is None else backoff
        self._sleep = sleep

    def close(self):
        """Close HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def resolve_path(self, prefix: str, item_source: str, deadline: Optional[float] = None) -> str:
        """
        Return the EOS path of item_source inside the prefix partition.

        Non-200 answers are retried with exponential backoff up to max_retries
        times, then MetadataLookupExhausted is raised. Network errors and empty
        answers give NOT_RESOLVED.

        `deadline` is a time.monotonic() instant. Requests and backoff sleeps
        never run past it, and ResolveTimeout is raised once it has passed.
        """
        url = fileinfo_url(prefix, parse_inode(item_source))

        attempts = self.max_retries + 1
        for attempt in range(attempts):
            timeout = remaining(deadline, url)
            try:
                if timeout is None:
                    response = self._client.get(url)
                else:
                    response = self._client.get(url, timeout=min(timeout, settings.METADATA_TIMEOUT))
            except httpx.TransportError as e:
                remaining(deadline, url)
                logger.warning(f"Metadata lookup failed for {url}: {e}")
                return NOT_RESOLVED

            if response.status_code == 200:
                path = response.text.strip()[RESPONSE_PREFIX_LEN:]
                return path or NOT_RESOLVED

            if attempt < attempts - 1:
                wait_time = self.backoff * 2 ** attempt
                logger.debug(f"Metadata lookup got {response.status_code} for {url}. Retrying in {wait_time}s...")
                timeout = remaining(deadline, url)
                self._sleep(wait_time if timeout is None else min(wait_time, timeout))

        logger.error(f"Metadata lookup failed for {url} after {attempts} attempts (status {response.status_code})")
        raise MetadataLookupExhausted(url, attempts, response.status_code)


def remaining(deadline: Optional[float], url: str) -> Optional[float]:
    """Seconds left before deadline, None without one. Raises ResolveTimeout once it has passed."""
    if deadline is None:
        return None
    left = deadline - time.monotonic()
    if left <= 0:
        raise ResolveTimeout(f"metadata lookup deadline passed: {url}")
    return left
