from __future__ import annotations


class ArtifactOutputsError(Exception):
    """Base class for failures that end an invocation."""


class InputError(ArtifactOutputsError):
    pass


class ResolutionError(ArtifactOutputsError):
    """The platform answered, but not with a usable run or artifact list."""


class NotFoundError(ArtifactOutputsError):
    """A well-formed listing did not contain the requested name."""


class DownloadError(ArtifactOutputsError):
    pass


class ParseError(ArtifactOutputsError):
    pass
