"""Share and project space records."""
import posixpath
from dataclasses import dataclass

from boxcop import settings
from boxcop.errors import MalformedInputError, MalformedProjectPathError

USER_SHARE = 0
EGROUP_SHARE = 1
PUBLIC_LINK = 3

READ_ONLY = 1


def external_prefix(prefix: str) -> str:
    """Rewrite the internal namespace token to the user facing one (newproject-c -> eosproject-c)."""
    return prefix.replace("new", "eos")


@dataclass
class Share:
    """One row of oc_share."""
    id: int
    uid_owner: str
    prefix: str
    item_source: str
    share_with: str = ""
    permissions: int = READ_ONLY
    share_type: int = USER_SHARE
    token: str = ""
    stime: int = 0

    @classmethod
    def from_row(cls, row: tuple) -> "Share":
        """Build from (id, uid_owner, share_with, prefix, item_source, stime, permissions, share_type, token)."""
        id_, uid_owner, share_with, prefix, item_source, stime, permissions, share_type, token = row
        return cls(
            id=int(id_),
            uid_owner=uid_owner or "",
            prefix=prefix or "",
            item_source=item_source or "",
            share_with=share_with or "",
            permissions=int(permissions),
            share_type=int(share_type),
            token=token or "",
            stime=int(stime or 0),
        )

    @property
    def file_id(self) -> str:
        return external_prefix(f"{self.prefix}:{self.item_source}")

    @property
    def public_link(self) -> str:
        if self.share_type != PUBLIC_LINK:
            return "-"
        return f"{settings.PUBLIC_LINK_BASE_URL}/{self.token}"

    @property
    def human_share_with(self) -> str:
        if self.share_type == PUBLIC_LINK:
            return "-"
        return self.share_with

    @property
    def human_perm(self) -> str:
        return "read-only" if self.permissions == READ_ONLY else "read-write"

    @property
    def human_type(self) -> str:
        return {
            USER_SHARE: "user-share",
            EGROUP_SHARE: "egroup-share",
            PUBLIC_LINK: "public-link",
        }.get(self.share_type, "unknown")

    @property
    def is_project_share(self) -> bool:
        return "project" in self.prefix


@dataclass
class ProjectSpace:
    """One row of cernbox_project_mapping."""
    name: str
    rel: str
    owner: str


def project_rel_path(name_or_path: str) -> str:
    """
    Derive the relative path of a project from its name or any of its paths.

    cernbox, c/cernbox/, /eos/project/cernbox/ and /eos/project/c/cernbox/
    all give c/cernbox.
    """
    base = posixpath.basename(name_or_path.strip().rstrip("/"))
    if not base:
        raise MalformedInputError(f"cannot derive a project name from {name_or_path!r}")
    return f"{base[0].lower()}/{base}"


def parse_share_id(share_id: str) -> int:
    """Parse a share id given on the command line."""
    share_id = share_id.strip()
    if not share_id.isdigit():
        raise MalformedInputError(f"share id {share_id!r} is not a number")
    return int(share_id)


def split_relative_path(rel: str) -> tuple[str, str]:
    """Split <letter>/<name> into (letter, name), rejecting anything else."""
    parts = rel.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedProjectPathError(rel)
    return parts[0], parts[1]
