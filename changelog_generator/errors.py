"""
Errors raised while building a changelog.

Every error that is caused by a particular commit carries the commit's raw
text, so the offending commit can be found without re-running anything.
"""

from typing import Optional


class ChangelogError(RuntimeError):
    """Base class for all changelog generator errors."""

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw

    def with_commit(self, raw: str) -> "ChangelogError":
        """Return a copy of this error that points at the given commit."""
        return type(self)(self.message, raw)

    def __str__(self) -> str:
        if self.raw is None:
            return self.message
        return f"{self.message} in changelog message in commit:\n>>> {self.raw}"


class SchemaError(ChangelogError):
    """Malformed changelog metadata block (unknown or missing key, bad shape)."""


class AttributionError(ChangelogError):
    """Change cannot be attributed to a project or a section."""


class ExtractionError(ChangelogError):
    """Title or description cannot be taken from the commit message."""


class ConfigError(ChangelogError):
    """Invalid configuration file or command line option."""


class GitError(ChangelogError):
    """The commit history could not be read."""
