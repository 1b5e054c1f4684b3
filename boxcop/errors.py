"""Exceptions raised by boxcop operations."""


class BoxcopError(Exception):
    """Base class for every error a command reports to the operator."""


class NotFoundError(BoxcopError):
    """No share or project matches the given identifier."""


class MalformedInputError(BoxcopError):
    """A required field is empty or an identifier does not parse."""


class MalformedProjectPathError(MalformedInputError):
    """A project relative path is not of the form <letter>/<name>."""

    def __init__(self, rel: str):
        super().__init__(f"malformed project relative path {rel!r}, expected <letter>/<name>")
        self.rel = rel


class AuthorizationDenied(BoxcopError):
    """The account lacks the group membership an operation requires."""


class NotProjectShareError(BoxcopError):
    """The share does not live under a project namespace."""


class TransferAborted(BoxcopError):
    """The operator declined the confirmation prompt."""


class MetadataLookupExhausted(BoxcopError):
    """The metadata endpoint kept failing after every retry."""

    def __init__(self, url: str, attempts: int, status_code: int):
        super().__init__(f"metadata lookup failed {attempts} times (last status {status_code}): {url}")
        self.url = url
        self.attempts = attempts
        self.status_code = status_code


class NamespaceListingError(BoxcopError):
    """Listing a namespace partition failed."""


class GroupLookupError(BoxcopError):
    """Group membership could not be determined."""


class ResolveTimeout(BoxcopError):
    """A path resolution batch did not finish before its deadline."""


class StoreError(BoxcopError):
    """The record store could not be reached or rejected a statement."""
