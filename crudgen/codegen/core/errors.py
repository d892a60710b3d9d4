"""
Exception hierarchy for entity code generation.

Every error the generator raises derives from GeneratorError so callers can
catch one type and still inspect which stage failed.
"""

from typing import Optional


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        artifact: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.artifact = artifact

    def describe(self) -> str:
        """Return the message with the artifact/field that triggered it."""
        location = []
        if self.artifact:
            location.append(f"artifact={self.artifact}")
        if self.field:
            location.append(f"field={self.field}")
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"


class ValidationError(GeneratorError):
    """Raised when an entity description is malformed."""


class ConfigurationError(GeneratorError):
    """Raised when the project context or a configuration file is unusable."""


class TemplateError(GeneratorError):
    """Raised when a type has no mapping or a template cannot be rendered."""


class GenerationCancelled(GeneratorError):
    """Raised when the caller cancels a generation run."""


class ArtifactWriteError(OSError):
    """Raised by the materialization step when artifacts cannot be written."""


class RollbackIncompleteError(ArtifactWriteError):
    """Raised when a failed write could not be fully undone.

    Backups of the files that were not restored are left in ``staging_dir``.
    """

    def __init__(self, message: str, staging_dir):
        super().__init__(message)
        self.staging_dir = staging_dir
