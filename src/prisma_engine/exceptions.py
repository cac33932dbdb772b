"""Exceptions raised while talking to the query engine.

Every error carries the ``operation`` label it was raised under so that
failures from different engine commands stay distinguishable in logs.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base exception for query engine commands."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class PlatformDetectionError(EngineError):
    """Raised when the host platform cannot be mapped to an engine binary"""  # noqa: D415


class StagingError(EngineError):
    """Raised when the request payload cannot be written to a temp file"""  # noqa: D415


class EngineReportedError(EngineError):
    """Raised when the engine exits non-zero.

    The message is the engine's stderr (or stdout when stderr is empty)
    prefixed with the operation label.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message, operation=operation)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class EngineOutputTooLargeError(EngineError):
    """Raised when captured engine output exceeds the configured ceiling"""  # noqa: D415


class EngineLaunchError(EngineError):
    """Raised when the engine process cannot be started for a non-transient reason"""  # noqa: D415


class DecodeError(EngineError):
    """Raised when the engine exits cleanly but its stdout has the wrong shape."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        engine_path: str | None = None,
        stdout: str = "",
    ) -> None:
        super().__init__(message, operation=operation)
        self.engine_path = engine_path
        self.stdout = stdout


class TransientError(EngineError):
    """Base for failures that are worth another attempt"""  # noqa: D415


class TransientReadinessError(TransientError):
    """Raised when the engine prints its "please wait" banner instead of output"""  # noqa: D415


class TransientBusyError(TransientError):
    """Raised when the engine executable is busy (ETXTBSY) at launch"""  # noqa: D415


class RetriesExhaustedError(EngineError):
    """Raised when the engine never became ready within the retry budget."""

    def __init__(
        self, message: str, *, operation: str | None = None, attempts: int = 0
    ) -> None:
        super().__init__(message, operation=operation)
        self.attempts = attempts
