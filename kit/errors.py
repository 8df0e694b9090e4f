"""Exception types raised by kit.

Every failure a caller is expected to handle derives from ``KitError`` and
carries a message that names the corrective command.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class KitError(Exception):
    """Base class for expected kit failures."""


class InvalidSlug(KitError, ValueError):
    """A feature slug failed the format or length rules."""

    def __init__(self, slug: str, reason: str):
        self.slug = slug
        self.reason = reason
        super().__init__(f"invalid slug '{slug}': {reason}")


class AlreadyExists(KitError):
    """A feature with the requested slug is already present."""

    def __init__(self, slug: str, path: Path | str):
        self.slug = slug
        self.path = Path(path)
        super().__init__(f"feature '{slug}' already exists at {self.path}")


class NotFound(KitError, LookupError):
    """A feature reference matched no known feature."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(
            f"feature '{ref}' not found. Run 'kit spec {ref}' to create it"
        )


class IOFailure(KitError, OSError):
    """A filesystem read or write failed."""

    def __init__(self, path: Path | str, cause: Optional[BaseException] = None):
        self.path = Path(path)
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"filesystem operation failed for {self.path}{detail}")


class ConfigError(KitError):
    """The project configuration is missing or unreadable."""


class PrerequisiteMissing(KitError):
    """A document required before this step does not exist yet."""

    def __init__(self, document: str, command: str):
        self.document = document
        self.command = command
        super().__init__(f"{document} not found. Run '{command}' first or use --force")


class TasksIncomplete(KitError):
    """A feature cannot be completed while checkboxes remain open."""

    def __init__(self, incomplete: int, total: int, path: Path | str):
        self.incomplete = incomplete
        self.total = total
        self.path = Path(path)
        super().__init__(
            f"{incomplete}/{total} tasks incomplete in {self.path}. "
            "Complete all tasks or use --force to override"
        )


class GitError(KitError):
    """A git command failed."""
