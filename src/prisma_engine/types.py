"""Request-side types shared by the engine commands."""

from __future__ import annotations

import dataclasses
from enum import Enum


class Operation(str, Enum):
    """Engine commands, with the labels their errors are prefixed with."""

    GET_DMMF = "get_dmmf"
    GET_CONFIG = "get_config"
    DMMF_TO_DML = "dmmf_to_dml"

    @property
    def label(self) -> str:
        """Prefix for engine-reported failures."""
        return _ERROR_LABELS[self]

    @property
    def staging_label(self) -> str:
        """Prefix for failures while staging the request payload."""
        return _STAGING_LABELS[self]

    @property
    def emits_json(self) -> bool:
        """Whether stdout is a JSON document rather than schema text."""
        return self is not Operation.DMMF_TO_DML


_ERROR_LABELS = {
    Operation.GET_DMMF: "Schema parsing",
    Operation.GET_CONFIG: "Get config",
    Operation.DMMF_TO_DML: "DMMF To DML",
}

_STAGING_LABELS = {
    Operation.GET_DMMF: "Get DMMF",
    Operation.GET_CONFIG: "Get config",
    Operation.DMMF_TO_DML: "DMMF To DML",
}


@dataclasses.dataclass(frozen=True, slots=True)
class EngineRequest:
    """What the caller asked for; lives for one operation call.

    ``datamodel_path`` records where the schema text came from. The engine
    is never given it, but it is kept for error reporting by callers.
    """

    datamodel: str
    cwd: str | None = None
    prisma_path: str | None = None
    datamodel_path: str | None = None
    retry: int | None = None
