"""Exceptions for patch packaging operations."""


class PatchError(Exception):
    """Base exception for all patch packaging operations."""


class ArtifactStagingError(PatchError):
    """Raised when a build artifact cannot be located or extracted.

    Fatal for the artifact step of one project only.
    """


class OutputCollisionError(PatchError):
    """Raised when a project's output directory for this run already exists."""


class OutputAssemblyError(PatchError):
    """Raised when files or the manifest cannot be written to the output directory."""


class ScriptGenerationError(PatchError):
    """Raised when the apply script cannot be written next to a manifest."""
