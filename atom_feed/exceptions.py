"""Exceptions raised by atom_feed."""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from .validation import ValidationResult


class AtomError(Exception):
    """Base class for every error raised by this package."""


class FeedParseError(AtomError):
    """Raised when bytes cannot be decoded into a Feed or Entry."""


class FeedRenderError(AtomError):
    """Raised when a Feed or Entry cannot be rendered into XML."""


class ValidationError(AtomError):
    """Raised by ValidationResult.raise_for_issues() when issues were found."""

    def __init__(self, result: "ValidationResult") -> None:
        super().__init__(result.render())
        self.result = result

    @property
    def issues(self) -> Tuple[str, ...]:
        return self.result.issues

    def __str__(self) -> str:
        return self.result.render()
