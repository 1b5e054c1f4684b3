"""EOS project namespace listing and the per-partition cache built on it."""
import subprocess
import threading
from typing import Callable, Optional

from boxcop import settings
from boxcop.errors import NamespaceListingError
from boxcop.logging_conf import logger


def partition_dir(letter: str) -> str:
    return f"{settings.PROJECT_ROOT}/{letter}"


def list_partition(letter: str) -> list[str]:
    """Return the entry names under /eos/project/<letter> as listed by the eos CLI."""
    mgm = settings.EOS_PROJECT_MGM.format(letter=letter)
    cmd = [settings.EOS_BINARY, mgm, "ls", partition_dir(letter)]
    logger.debug(f"Listing partition {letter}: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise NamespaceListingError(f"{settings.EOS_BINARY} not found, cannot list {partition_dir(letter)}") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise NamespaceListingError(f"listing {partition_dir(letter)} on {mgm} failed ({e.returncode}): {stderr}") from e
    return [line.strip() for line in result.stdout.split("\n") if line.strip()]


class PartitionCache:
    """
    Memoized partition listings for one reconciliation run.

    The first lookup of a letter lists that partition once; from then on its
    name set is treated as complete. Nothing is ever invalidated, so build a
    fresh cache for every run.
    """

    def __init__(self, lister: Optional[Callable[[str], list[str]]] = None):
        self._lister = lister or list_partition
        self._names: dict[str, frozenset[str]] = {}
        self._lock = threading.Lock()

    def listed(self, letter: str) -> bool:
        return letter in self._names

    def names(self, letter: str) -> frozenset[str]:
        """Entries present in the partition, listing it on first access."""
        with self._lock:
            if letter not in self._names:
                entries = frozenset(name for name in self._lister(letter) if name)
                self._names[letter] = entries
                logger.info(f"Partition {letter}: {len(entries)} entries cached")
            return self._names[letter]

    def contains(self, letter: str, name: str) -> bool:
        return name in self.names(letter)
