"""Registry service -- routes wire requests to an endorsement registry.

:class:`RegistryService` is the entry point for driving a registry over
a transport.  It turns each :class:`OperationRequest` into one registry
call and every outcome, including failures, into an
:class:`OperationResponse`.

Usage
-----
::

    from endorsement_registry import EndorsementRegistry, RegistryConfig
    from endorsement_registry.service import RegistryService

    registry = EndorsementRegistry(
        RegistryConfig(registry_id=Identity("0xreg"), creator=Identity("0xowner")),
    )
    service = RegistryService(registry)

    response = await service.process(request)
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from endorsement_registry.core.config import ServiceConfig
from endorsement_registry.core.errors import (
    EndorsementRegistryError,
    MalformedMessage,
    TransportError,
    UnknownOperation,
)
from endorsement_registry.core.types import Notification, Operation
from endorsement_registry.registry.registry import EndorsementRegistry
from endorsement_registry.wire.messages import (
    OperationRequest,
    OperationResponse,
    error_payload,
    parse_request,
    serialize_response,
)
from endorsement_registry.wire.ndjson import NDJSONReader, NDJSONWriter

logger = logging.getLogger(__name__)


class RegistryService:
    """Processes operation requests against a single registry.

    Parameters
    ----------
    registry:
        The registry every request is applied to.
    config:
        Transport limits.  Defaults to :class:`ServiceConfig` defaults.
    """

    def __init__(
        self,
        registry: EndorsementRegistry,
        config: ServiceConfig | None = None,
    ) -> None:
        self._registry = registry
        self._config = config or ServiceConfig()

    @property
    def registry(self) -> EndorsementRegistry:
        return self._registry

    @property
    def config(self) -> ServiceConfig:
        return self._config

    # ------------------------------------------------------------------
    # Core dispatch
    # ------------------------------------------------------------------

    async def process(self, request: OperationRequest) -> OperationResponse:
        """Apply *request* to the registry.

        Registry errors become ``"rejected"`` responses carrying the
        error payload and the subject's unchanged state; anything else
        becomes an ``"error"`` response with code ``ER-E000``.
        """
        try:
            notification = await self._dispatch(request)
        except EndorsementRegistryError as exc:
            return OperationResponse(
                request_id=request.request_id,
                status="rejected",
                state=self._registry.get_endorsement_status(request.subject),
                error=error_payload(exc),
            )
        except Exception as exc:
            logger.exception(
                "Unexpected failure processing %s (%s)",
                request.operation, request.request_id,
            )
            wrapped = EndorsementRegistryError(
                f"Internal error: {type(exc).__name__}: {exc}",
                details={"exception_type": type(exc).__name__},
            )
            return OperationResponse(
                request_id=request.request_id,
                status="error",
                error=error_payload(wrapped),
            )

        return OperationResponse(
            request_id=request.request_id,
            status="success",
            state=self._registry.get_endorsement_status(request.subject),
            notification=notification,
        )

    async def _dispatch(self, request: OperationRequest) -> Notification | None:
        registry = self._registry
        op = request.operation
        if op is Operation.GET_ENDORSEMENT_STATUS:
            return None
        caller = request.caller
        if caller is None:
            raise MalformedMessage(
                f"'{op}' requires a caller",
                details={"request_id": request.request_id},
            )
        if op is Operation.REQUEST_ENDORSEMENT:
            return await registry.request_endorsement(
                caller, request.subject, request.comment,
            )
        if op is Operation.REMOVE_ENDORSEMENT:
            return await registry.remove_endorsement(
                caller, request.subject, request.comment,
            )
        if op is Operation.ENDORSE:
            return await registry.endorse(caller, request.comment)
        if op is Operation.REVOKE_ENDORSEMENT:
            return await registry.revoke_endorsement(caller, request.comment)
        raise UnknownOperation(
            f"Unknown operation: {op!r}",
            details={"operation": str(op), "request_id": request.request_id},
        )

    async def handle_message(self, message: str | bytes | dict[str, Any]) -> dict[str, Any]:
        """Parse, process and serialise one wire message.

        Messages that cannot be parsed yield an ``"error"`` response
        echoing the ``request_id`` when one could be read.
        """
        try:
            request = parse_request(message)
        except TransportError as exc:
            logger.debug("Rejected malformed message: %s", exc.message)
            request_id = exc.details.get("request_id")
            return serialize_response(
                OperationResponse(
                    request_id=str(request_id) if request_id else "",
                    status="error",
                    error=error_payload(exc),
                ),
            )
        return serialize_response(await self.process(request))

    # ------------------------------------------------------------------
    # NDJSON loop
    # ------------------------------------------------------------------

    async def serve(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> int:
        """Answer NDJSON requests from *reader* on *writer*.

        Runs until the stream ends or the peer stays silent for
        ``partial_timeout_seconds``.  Returns the number of messages
        answered.
        """
        ndjson_reader = NDJSONReader(
            reader,
            max_message_size=self._config.max_message_size_bytes,
            partial_timeout=self._config.partial_timeout_seconds,
        )
        ndjson_writer = NDJSONWriter(writer)
        handled = 0
        while True:
            try:
                message = await ndjson_reader.read_message()
            except EOFError:
                break
            except TimeoutError:
                logger.warning(
                    "Registry service for %s: peer idle for %.1fs, closing",
                    self._registry.identity, self._config.partial_timeout_seconds,
                )
                break
            except TransportError as exc:
                response = OperationResponse(
                    request_id="",
                    status="error",
                    error=error_payload(exc),
                )
                await ndjson_writer.write_message(serialize_response(response))
                handled += 1
                continue
            await ndjson_writer.write_message(await self.handle_message(message))
            handled += 1
        logger.info("Registry service for %s stopped after %d messages",
                    self._registry.identity, handled)
        return handled
