"""Ownership transfer of shares living inside project spaces."""
from dataclasses import replace
from typing import Callable, Optional

from boxcop.errors import (
    AuthorizationDenied,
    MalformedInputError,
    NotFoundError,
    NotProjectShareError,
    TransferAborted,
)
from boxcop.groups import admin_group, groups_of
from boxcop.logging_conf import logger
from boxcop.models import Share, parse_share_id
from boxcop.projects import get_project


def find_share(store, share_id: str) -> Share:
    """Return the single share with id `share_id`."""
    share_id = parse_share_id(share_id)
    shares = store.get_shares_by_id(share_id)
    if len(shares) != 1:
        raise NotFoundError(f"share {share_id} does not exist")
    return shares[0]


def transfer_share(
    store,
    share_id: str,
    new_owner: str,
    project_ref: str,
    confirmed: bool = False,
    confirm: Optional[Callable[[str], bool]] = None,
    lookup_groups: Optional[Callable[[str], set[str]]] = None,
) -> Share:
    """
    Hand a project share over to `new_owner`.

    The share must exist and live in a project, the project must exist and the
    new owner must be in its admin e-group, because only admins can manage
    shares on project spaces. Unless `confirmed`, `confirm` is asked before the
    owner is rewritten. Returns the updated share.
    """
    new_owner = new_owner.strip()
    if not new_owner:
        raise MalformedInputError("new owner is empty")

    share = find_share(store, share_id)

    if not share.is_project_share:
        raise NotProjectShareError(
            "the share does not point to a file/folder inside an EOS project, "
            "only shares on projects can be transferred"
        )

    project = get_project(store, project_ref)

    group = admin_group(project.name)
    if group not in (lookup_groups or groups_of)(new_owner):
        raise AuthorizationDenied(
            f"{new_owner} does not belong to the admin group {group!r}. "
            "Only admins can manage shares, ask the user to join the admin group"
        )

    if not confirmed:
        message = f"Are you sure to transfer ownership from {share.uid_owner!r} to {new_owner!r}?"
        if confirm is None or not confirm(message):
            raise TransferAborted("aborted")

    store.update_share_owner(share.id, new_owner)
    logger.info(f"Share {share.id} on project {project.name} transferred from {share.uid_owner} to {new_owner}")
    return replace(share, uid_owner=new_owner)
