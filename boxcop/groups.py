"""Group membership lookup through the host's identity service (sssd/LDAP)."""
import subprocess

from boxcop import settings
from boxcop.errors import GroupLookupError
from boxcop.logging_conf import logger


def admin_group(project_name: str) -> str:
    """Name of the e-group whose members may manage shares of a project."""
    return f"{settings.PROJECT_ADMIN_GROUP_PREFIX}-{project_name}-admins"


def groups_of(account: str) -> set[str]:
    """Return the groups `account` belongs to; unknown accounts have none."""
    try:
        result = subprocess.run(["id", "-Gn", "--", account], capture_output=True, text=True)
    except OSError as e:
        raise GroupLookupError(f"cannot look up groups of {account}: {e}") from e

    if result.returncode != 0:
        if "no such user" in result.stderr.lower():
            logger.info(f"Account {account} is unknown, it has no groups")
            return set()
        raise GroupLookupError(f"cannot look up groups of {account}: {result.stderr.strip()}")
    return set(result.stdout.split())
