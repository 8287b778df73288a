"""Exception types raised by the analysis pipeline."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple


class MorphodistError(RuntimeError):
    """Base class for pipeline failures that abort a run."""


class InputMissingError(MorphodistError):
    """Raised when a required input file or store table is absent."""

    def __init__(self, message: str, missing: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.missing = list(missing) if missing is not None else []


class JoinMismatchError(MorphodistError):
    """Raised when a join that feeds later stages produces zero rows."""

    def __init__(self, message: str, stage: str = ""):
        super().__init__(message)
        self.stage = stage


class InsufficientDataError(MorphodistError):
    """Raised when a sampling group holds fewer rows than the requested draw."""

    def __init__(self, group: Tuple[Any, ...], available: int, requested: int):
        self.group = tuple(group)
        self.available = int(available)
        self.requested = int(requested)
        super().__init__(
            f"Group {self.group} has {self.available} image(s); "
            f"{self.requested} requested per group"
        )


class ExportError(MorphodistError):
    """Raised when statistics or histograms cannot be written to disk."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
