"""Project space operations and the filters used to reconcile them against EOS."""
import posixpath
from typing import Callable, Optional

from boxcop import settings
from boxcop.errors import MalformedInputError, NotFoundError
from boxcop.logging_conf import logger
from boxcop.models import ProjectSpace, project_rel_path, split_relative_path
from boxcop.namespace import PartitionCache

ProjectFilter = Callable[[ProjectSpace], bool]

NOT_FOUND = "NOT_FOUND"


def match_all(project: ProjectSpace) -> bool:
    return True


def by_owner(owner: str) -> ProjectFilter:
    """Keep projects owned by `owner`; an empty owner keeps everything."""
    owner = owner.strip()
    if not owner:
        return match_all
    return lambda project: project.owner == owner


class OrphanFilter:
    """Keep projects registered in the database but missing from the EOS namespace."""

    def __init__(self, cache: PartitionCache):
        self.cache = cache

    def __call__(self, project: ProjectSpace) -> bool:
        letter, name = split_relative_path(project.rel)
        return not self.cache.contains(letter, name)


def get_projects(store, predicate: ProjectFilter = match_all) -> list[ProjectSpace]:
    """Stream project records from the store and keep the ones matching predicate."""
    return [project for project in store.iter_projects() if predicate(project)]


def get_project(store, name_or_path: str) -> ProjectSpace:
    """
    Find a project by name or path.

    Besides <letter>/<name>, the bare basename is tried too: historical
    projects like "cernbox" live directly under /eos/project.
    """
    rel = project_rel_path(name_or_path)
    base = posixpath.basename(name_or_path.strip().rstrip("/"))
    for project in store.iter_projects():
        if project.rel in (rel, base):
            return project
    raise NotFoundError(f"the project {name_or_path!r} does not exist")


def get_project_owner(store, name_or_path: str) -> str:
    return get_project(store, name_or_path).owner


def add_project(store, name: str, owner: str) -> ProjectSpace:
    name, owner = name.strip(), owner.strip()
    if not name or not owner:
        raise MalformedInputError("project name or owner is empty")
    project = ProjectSpace(name=name, rel=project_rel_path(name), owner=owner)
    store.insert_project(project)
    return project


def delete_project(store, name_or_path: str) -> ProjectSpace:
    project = get_project(store, name_or_path)
    if not project.name:
        raise MalformedInputError(f"project name is empty: {project}")
    store.delete_project(project.name)
    return project


def update_service_account(store, name_or_path: str, owner: str) -> ProjectSpace:
    owner = owner.strip()
    if not owner:
        raise MalformedInputError("service account is empty")
    project = get_project(store, name_or_path)
    store.update_project_owner(project.name, owner)
    logger.info(f"Project {project.name}: service account {project.owner} -> {owner}")
    project.owner = owner
    return project


def project_path(project: ProjectSpace, cache: Optional[PartitionCache] = None) -> str:
    """Absolute EOS path of the project, or NOT_FOUND when its directory is missing."""
    cache = cache or PartitionCache()
    try:
        letter, name = split_relative_path(project.rel)
    except MalformedInputError:
        logger.warning(f"Project {project.name} has malformed relative path {project.rel!r}")
        return NOT_FOUND
    if not cache.contains(letter, name):
        return NOT_FOUND
    return posixpath.join(settings.PROJECT_ROOT, project.rel)
