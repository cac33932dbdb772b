"""Turning engine stdout into typed results.

A decode failure after a clean exit means the engine printed something
unexpected, not that it reported an error, so it is raised as ``DecodeError``
carrying the engine path and the raw output.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from prisma_engine.exceptions import DecodeError
from prisma_engine.models import ConfigMetaFormat, DMMFDocument

M = TypeVar("M", bound=BaseModel)


def decode_json(
    stdout: str, model: type[M], *, engine_path: str, operation: str
) -> M:
    """Validate ``stdout`` as JSON for ``model``.

    Raises:
        DecodeError: If stdout is not JSON or does not match ``model``.
    """
    try:
        return model.model_validate_json(stdout)
    except ValidationError as e:
        raise DecodeError(
            f"{operation} problem while parsing the query engine response at {engine_path}. "
            f"{stdout}\n{e}",
            operation=operation,
            engine_path=engine_path,
            stdout=stdout,
        ) from e


def decode_dmmf(stdout: str, *, engine_path: str, operation: str) -> DMMFDocument:
    return decode_json(stdout, DMMFDocument, engine_path=engine_path, operation=operation)


def decode_config(
    stdout: str, *, engine_path: str, operation: str
) -> ConfigMetaFormat:
    return decode_json(
        stdout, ConfigMetaFormat, engine_path=engine_path, operation=operation
    )
