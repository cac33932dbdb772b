"""Configuration scoping for entry-time overrides.

A scope only affects ``resolve_config()`` calls made inside it. Clients that
already hold a ``FrozenConfig`` do not see ambient changes.
"""

from collections.abc import Generator
from contextlib import contextmanager
import contextvars
from typing import Any

from .types import ResolvedConfig

_ambient_resolved_config: contextvars.ContextVar[ResolvedConfig] = (
    contextvars.ContextVar("prisma_engine_resolved_config")
)


def get_ambient_resolved_config() -> ResolvedConfig | None:
    """Return the configuration set by an enclosing scope, if any."""
    try:
        return _ambient_resolved_config.get()
    except LookupError:
        return None


@contextmanager
def config_scope(config: ResolvedConfig) -> Generator[None]:
    """Temporarily use a different resolved configuration.

    Async-safe: the scope is carried by a context variable, so concurrent
    tasks keep their own view.

    Example:
        fast = resolve_config().with_overrides(readiness_delay=0.1)

        with config_scope(fast):
            dmmf = await get_dmmf(schema)
    """
    token = _ambient_resolved_config.set(config)
    try:
        yield
    finally:
        _ambient_resolved_config.reset(token)


@contextmanager
def config_override(**overrides: Any) -> Generator[None]:
    """Convenience context manager for programmatic config overrides.

    Example:
        with config_override(retry=0):
            config = resolve_config()  # config.retry == 0
    """
    base_config = get_ambient_resolved_config()
    if base_config is None:
        # Import here to avoid circular dependency at module level
        from .api import resolve_config

        base_config = resolve_config()

    with config_scope(base_config.with_overrides(**overrides)):
        yield
