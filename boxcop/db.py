"""Record store gateway for shares and project spaces (PostgreSQL)."""
import time
from typing import Iterator, Optional
from contextlib import contextmanager
import psycopg2
from psycopg2 import OperationalError, InterfaceError

from boxcop import settings
from boxcop.errors import StoreError
from boxcop.logging_conf import logger
from boxcop.models import ProjectSpace, Share

SHARE_COLUMNS = """
    id,
    coalesce(uid_owner, '') AS uid_owner,
    coalesce(share_with, '') AS share_with,
    coalesce(fileid_prefix, '') AS fileid_prefix,
    coalesce(item_source, '') AS item_source,
    stime,
    permissions,
    share_type,
    coalesce(token, '') AS token
"""


def is_connection_error(exc: Exception) -> bool:
    """Check if exception indicates a connection problem."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    error_msg = str(exc).lower()
    indicators = ['connection', 'server closed', 'network', 'timeout', 'could not connect',
                  'connection refused', 'no route to host', 'connection reset', 'broken pipe']
    return any(ind in error_msg for ind in indicators)


class Database:
    """PostgreSQL connection holding the oc_share and cernbox_project_mapping tables."""

    def __init__(self, dsn: Optional[str] = None):
        self._dsn = dsn or settings.PG_DSN
        self._conn: Optional[psycopg2.extensions.connection] = None
        self._connect()

    def _connect(self):
        if not self._dsn:
            raise StoreError("no database configured, set PG_DSN")
        delay = settings.DB_RECONNECT_DELAY
        for attempt in range(1, settings.DB_CONNECT_ATTEMPTS + 1):
            try:
                self._conn = psycopg2.connect(dsn=self._dsn, connect_timeout=settings.DB_CONNECT_TIMEOUT)
                logger.info("PostgreSQL connection established")
                return
            except psycopg2.Error as e:
                if attempt == settings.DB_CONNECT_ATTEMPTS:
                    raise StoreError(f"cannot connect to PostgreSQL after {attempt} attempts: {e}") from e
                logger.warning(f"Failed to connect to PostgreSQL: {e}. Retrying in {delay}s...")
                time.sleep(delay)
                delay = min(delay * 2, settings.DB_MAX_RECONNECT_DELAY)

    @contextmanager
    def get_cursor(self, commit: bool = False):
        """Yield a cursor, translating driver errors into StoreError."""
        if self._conn is None:
            raise StoreError("database connection is closed")
        cur = self._conn.cursor()
        try:
            yield cur
            if commit:
                self._conn.commit()
        except psycopg2.Error as e:
            self._conn.rollback()
            if is_connection_error(e):
                raise StoreError(f"lost connection to PostgreSQL: {e}") from e
            raise StoreError(str(e).strip()) from e
        except Exception:
            self._conn.rollback()
            raise
        finally:
            cur.close()

    # ========================================
    # Shares
    # ========================================

    def _get_shares(self, where: str = "", params: tuple = ()) -> list[Share]:
        query = f"SELECT {SHARE_COLUMNS} FROM oc_share {where}"
        with self.get_cursor() as cur:
            cur.execute(query, params)
            return [Share.from_row(row) for row in cur.fetchall()]

    def get_shares_by_id(self, share_id) -> list[Share]:
        return self._get_shares("WHERE id = %s", (share_id,))

    def get_shares_by_owner(self, owner: str) -> list[Share]:
        return self._get_shares("WHERE uid_owner = %s", (owner,))

    def get_shares_by_share_with(self, share_with: str) -> list[Share]:
        return self._get_shares("WHERE share_with = %s", (share_with,))

    def get_shares_by_token(self, token: str) -> list[Share]:
        return self._get_shares("WHERE token = %s", (token,))

    def get_all_shares(self) -> list[Share]:
        return self._get_shares()

    def update_share_owner(self, share_id: int, new_owner: str):
        """Rewrite the owner of a single share. Nothing else on the row changes."""
        with self.get_cursor(commit=True) as cur:
            cur.execute("UPDATE oc_share SET uid_owner = %s WHERE id = %s", (new_owner, share_id))
            if cur.rowcount != 1:
                raise StoreError(f"expected to update one share with id={share_id}, updated {cur.rowcount}")
        logger.info(f"Share {share_id} now owned by {new_owner}")

    # ========================================
    # Project spaces
    # ========================================

    def iter_projects(self) -> Iterator[ProjectSpace]:
        """Stream every registered project."""
        with self.get_cursor() as cur:
            cur.execute("SELECT project_name, eos_relative_path, project_owner FROM cernbox_project_mapping")
            for name, rel, owner in cur:
                yield ProjectSpace(name=name, rel=rel, owner=owner)

    def insert_project(self, project: ProjectSpace):
        with self.get_cursor(commit=True) as cur:
            cur.execute(
                "INSERT INTO cernbox_project_mapping (project_name, eos_relative_path, project_owner) VALUES (%s, %s, %s)",
                (project.name, project.rel, project.owner),
            )
        logger.info(f"Project {project.name} added at {project.rel} owned by {project.owner}")

    def delete_project(self, name: str):
        with self.get_cursor(commit=True) as cur:
            cur.execute("DELETE FROM cernbox_project_mapping WHERE project_name = %s", (name,))
        logger.info(f"Project {name} deleted")

    def update_project_owner(self, name: str, owner: str):
        with self.get_cursor(commit=True) as cur:
            cur.execute("UPDATE cernbox_project_mapping SET project_owner = %s WHERE project_name = %s", (owner, name))
        logger.info(f"Project {name} now owned by {owner}")

    def close(self):
        if self._conn:
            try:
                self._conn.close()
                logger.info("PostgreSQL connection closed")
            except psycopg2.Error as e:
                logger.warning(f"Error closing connection: {e}")
            finally:
                self._conn = None
