"""Bounded retries for transient engine failures.

Two hazards are absorbed, each with its own backoff, out of one shared budget:

- the engine printing its "please wait" banner instead of a response
- the executable being busy (ETXTBSY) while another process replaces it

A budget of ``n`` allows ``n`` retries, so at most ``n + 1`` attempts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import dataclasses
import logging
from typing import TYPE_CHECKING, TypeVar

from prisma_engine.constants import READINESS_MARKER
from prisma_engine.exceptions import (
    RetriesExhaustedError,
    TransientBusyError,
    TransientError,
    TransientReadinessError,
)
from prisma_engine.telemetry import TelemetryContext

if TYPE_CHECKING:
    from prisma_engine.config import FrozenConfig
    from prisma_engine.invoker import EngineOutput
    from prisma_engine.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclasses.dataclass(frozen=True, slots=True)
class RetryRule:
    """Which transient error to retry and how long to wait first.

    When the budget runs out, ``wrap_on_exhaustion`` turns the last error into
    a ``RetriesExhaustedError``; otherwise the last error is re-raised as is.
    """

    name: str
    error_type: type[TransientError]
    delay: float
    wrap_on_exhaustion: bool = False


def default_rules(config: FrozenConfig) -> tuple[RetryRule, ...]:
    return (
        RetryRule(
            "readiness",
            TransientReadinessError,
            config.readiness_delay,
            wrap_on_exhaustion=True,
        ),
        RetryRule("busy", TransientBusyError, config.busy_delay),
    )


def check_readiness(output: EngineOutput, operation: str) -> EngineOutput:
    """Raise ``TransientReadinessError`` if the engine is still warming up."""
    if READINESS_MARKER in output.stdout:
        raise TransientReadinessError(
            f"{operation} engine is not ready yet: {output.stdout[:200]}",
            operation=operation,
        )
    return output


class RetryPolicy:
    """Runs an attempt until it succeeds, fails for good, or the budget is spent."""

    def __init__(
        self,
        rules: tuple[RetryRule, ...],
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.rules = rules
        self._telemetry = telemetry or TelemetryContext()

    @classmethod
    def from_config(
        cls,
        config: FrozenConfig,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> RetryPolicy:
        return cls(default_rules(config), telemetry=telemetry)

    def rule_for(self, error: BaseException) -> RetryRule | None:
        return next((r for r in self.rules if isinstance(error, r.error_type)), None)

    async def run(
        self,
        attempt: Callable[[], Awaitable[T]],
        *,
        retries: int,
        operation: str,
    ) -> T:
        """Await ``attempt()`` with up to ``retries`` re-attempts.

        Errors that no rule covers propagate on the first occurrence.
        """
        if retries < 0:
            raise ValueError(f"retries must be >= 0, got {retries}")

        remaining = retries
        attempts = 0
        while True:
            attempts += 1
            try:
                return await attempt()
            except TransientError as e:
                rule = self.rule_for(e)
                if rule is None:
                    raise
                if remaining == 0:
                    if rule.wrap_on_exhaustion:
                        raise RetriesExhaustedError(
                            f"{operation} gave up after {attempts} attempts: {e}",
                            operation=operation,
                            attempts=attempts,
                        ) from e
                    raise
                remaining -= 1
                log.debug(
                    "Retrying %s after %s in %.1fs (%d retries left)",
                    operation,
                    rule.name,
                    rule.delay,
                    remaining,
                )
                self._telemetry.count("engine.retry", rule=rule.name)
                await asyncio.sleep(rule.delay)
