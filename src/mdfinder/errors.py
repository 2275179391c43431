"""Exceptions raised by mdfinder and caught at the CLI boundary."""


class MdfError(Exception):
    """Base class for user-facing mdfinder failures."""


class RepoError(MdfError):
    """Repo registry or clone failure."""


class SnippetNameError(MdfError):
    """A snippet name that cannot be mapped to ``folder/name.ext``."""
