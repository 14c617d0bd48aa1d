"""
Error taxonomy for aoc-runner.

Recoverable errors (script load/execution, transport for a single handle) are
collected into the run report. ClassificationError is fatal: it means the
remote page layout changed and nothing inferred from it can be trusted.
"""

from __future__ import annotations
from typing import Any


class AocError(Exception):
    """Base class for all aoc-runner errors."""


class TransportError(AocError):
    """Network or HTTP failure talking to the puzzle service."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ClassificationError(AocError):
    """The submission response did not have the expected structure."""


class ScriptLoadError(AocError):
    """A solution module failed to import."""

    def __init__(self, path: str, details: str):
        super().__init__(f"Failed to import {path}")
        self.path = path
        self.details = details


class ScriptExecutionError(AocError):
    """A registered solution raised while running."""

    def __init__(self, identifier: str, details: str):
        super().__init__(f"{identifier}: Failed to run solution")
        self.identifier = identifier
        self.details = details


class StateInvariantViolation(AocError):
    """A too high/too low response came back for a non-integer answer."""


class RegistryFrozenError(AocError):
    """Registration attempted after the load phase ended."""


class AlreadySolvedError(AocError):
    """A part is already solved and cannot be overwritten."""


class UntrustedDirectoryError(AocError):
    """Solutions were requested from a directory that is not trusted."""


class MissingTokenError(AocError):
    """No session token is configured."""


class RunFailedError(AocError):
    """Every selected solution failed."""

    def __init__(self, message: str, report: Any):
        super().__init__(message)
        self.report = report
