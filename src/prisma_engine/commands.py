"""The query engine commands: DMMF, config and DMMF-to-DML.

Each call is independent: it resolves the engine path, stages its payload in
its own temp file, runs the engine under the retry policy and decodes the
result. Many calls can run concurrently under ``asyncio.gather``.

Example:
    ```python
    from prisma_engine import get_dmmf

    dmmf = await get_dmmf(Path("schema.prisma").read_text())
    print([model.name for model in dmmf.datamodel.models])
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import json
import logging
from typing import Any

from pydantic import ValidationError

from prisma_engine.config import FrozenConfig, resolve_config
from prisma_engine.decoder import decode_config, decode_dmmf
from prisma_engine.exceptions import EngineError
from prisma_engine.invoker import EngineOutput, build_invocation, run_engine
from prisma_engine.models import ConfigMetaFormat, DMMFDocument, WholeDMMF
from prisma_engine.platforms import get_engine_path, get_platform
from prisma_engine.retry import RetryPolicy, check_readiness
from prisma_engine.staging import staged_input
from prisma_engine.telemetry import TelemetryContext, TelemetryContextProtocol
from prisma_engine.types import EngineRequest, Operation

log = logging.getLogger(__name__)


class EngineClient:
    """Runs engine commands with one frozen configuration.

    The client holds no per-call state; a single instance can serve
    concurrent calls.
    """

    def __init__(
        self,
        config: FrozenConfig,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.config = config
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()
        self._retry_policy = RetryPolicy.from_config(config, telemetry=self._telemetry)

    async def resolve_engine_path(self, override: str | None = None) -> str:
        """Explicit override, then configured path, then the platform binary."""
        if override:
            return override
        if self.config.query_engine_path:
            return self.config.query_engine_path
        # Platform detection may shell out to openssl
        platform = await asyncio.to_thread(get_platform)
        path = get_engine_path(platform, self.config.engine_dir)
        log.debug("Using %s query engine at %s", platform, path)
        return path

    async def get_dmmf(
        self,
        datamodel: str,
        *,
        cwd: str | None = None,
        prisma_path: str | None = None,
        datamodel_path: str | None = None,
        retry: int | None = None,
    ) -> DMMFDocument:
        """Parse ``datamodel`` into the engine's document model.

        Raises:
            StagingError: The schema could not be written to a temp file.
            EngineReportedError: The engine rejected the schema.
            RetriesExhaustedError: The engine never became ready.
            DecodeError: The engine printed something that is not a DMMF.
        """
        request = EngineRequest(datamodel, cwd, prisma_path, datamodel_path, retry)
        engine_path = await self.resolve_engine_path(request.prisma_path)
        stdout = await self._execute(Operation.GET_DMMF, request, engine_path)
        return decode_dmmf(
            stdout, engine_path=engine_path, operation=Operation.GET_DMMF.label
        )

    async def get_config(
        self,
        datamodel: str,
        *,
        cwd: str | None = None,
        prisma_path: str | None = None,
        datamodel_path: str | None = None,
        retry: int | None = None,
    ) -> ConfigMetaFormat:
        """Extract datasources and generators from ``datamodel``."""
        request = EngineRequest(datamodel, cwd, prisma_path, datamodel_path, retry)
        engine_path = await self.resolve_engine_path(request.prisma_path)
        stdout = await self._execute(Operation.GET_CONFIG, request, engine_path)
        return decode_config(
            stdout, engine_path=engine_path, operation=Operation.GET_CONFIG.label
        )

    async def dmmf_to_dml(
        self,
        input: WholeDMMF | Mapping[str, Any],  # noqa: A002
        prisma_path: str | None = None,
        *,
        cwd: str | None = None,
        retry: int | None = None,
    ) -> str:
        """Render a datamodel and its configuration back into schema text.

        ``input`` may be a ``WholeDMMF`` or a plain ``{"dmmf", "config"}``
        mapping, which is validated first.

        Raises:
            EngineError: ``input`` does not have the ``WholeDMMF`` shape.
        """
        label = Operation.DMMF_TO_DML.label
        try:
            whole = (
                input if isinstance(input, WholeDMMF) else WholeDMMF.model_validate(input)
            )
        except ValidationError as e:
            raise EngineError(f"{label} {e}", operation=label) from e
        request = EngineRequest(
            json.dumps(whole.to_engine_dict()), cwd, prisma_path, None, retry
        )
        engine_path = await self.resolve_engine_path(request.prisma_path)
        return await self._execute(Operation.DMMF_TO_DML, request, engine_path)

    async def _execute(
        self, operation: Operation, request: EngineRequest, engine_path: str
    ) -> str:
        retries = self.config.retry if request.retry is None else request.retry
        if retries < 0:
            raise ValueError(f"retry must be >= 0, got {retries}")

        async def attempt() -> EngineOutput:
            with staged_input(request.datamodel, operation.staging_label) as staged:
                invocation = build_invocation(
                    operation, engine_path, staged, cwd=request.cwd, config=self.config
                )
                with self._telemetry("engine.invoke", operation=operation.value):
                    output = await run_engine(invocation, operation)
            # Schema text is returned verbatim and may quote the marker
            if not operation.emits_json:
                return output
            return check_readiness(output, operation.label)

        with self._telemetry(f"engine.{operation.value}"):
            try:
                output = await self._retry_policy.run(
                    attempt, retries=retries, operation=operation.label
                )
            except EngineError:
                raise
            except Exception as e:
                raise EngineError(
                    f"{operation.label} {e}", operation=operation.label
                ) from e
        return output.stdout


def create_client(
    config: FrozenConfig | None = None,
    *,
    telemetry: TelemetryContextProtocol | None = None,
) -> EngineClient:
    """Build a client, resolving ambient configuration when none is given."""
    return EngineClient(config or resolve_config().to_frozen(), telemetry=telemetry)


async def get_dmmf(
    datamodel: str,
    *,
    cwd: str | None = None,
    prisma_path: str | None = None,
    datamodel_path: str | None = None,
    retry: int | None = None,
    config: FrozenConfig | None = None,
) -> DMMFDocument:
    """Module-level shortcut for ``EngineClient.get_dmmf``."""
    return await create_client(config).get_dmmf(
        datamodel,
        cwd=cwd,
        prisma_path=prisma_path,
        datamodel_path=datamodel_path,
        retry=retry,
    )


async def get_config(
    datamodel: str,
    *,
    cwd: str | None = None,
    prisma_path: str | None = None,
    datamodel_path: str | None = None,
    retry: int | None = None,
    config: FrozenConfig | None = None,
) -> ConfigMetaFormat:
    """Module-level shortcut for ``EngineClient.get_config``."""
    return await create_client(config).get_config(
        datamodel,
        cwd=cwd,
        prisma_path=prisma_path,
        datamodel_path=datamodel_path,
        retry=retry,
    )


async def dmmf_to_dml(
    input: WholeDMMF | Mapping[str, Any],  # noqa: A002
    prisma_path: str | None = None,
    *,
    cwd: str | None = None,
    retry: int | None = None,
    config: FrozenConfig | None = None,
) -> str:
    """Module-level shortcut for ``EngineClient.dmmf_to_dml``."""
    return await create_client(config).dmmf_to_dml(
        input, prisma_path, cwd=cwd, retry=retry
    )
