"""
EndpointKit: Response Dispatcher
==================================

What:  Turns a handler's return value into exactly one Starlette response,
       according to the endpoint's declared ResponseKind.
Why:   Handlers return plain values (a dict, a file path, a generator) and
       stay free of transport details; the dispatcher owns the wire format.
How:   JSON → JSONResponse, FILE → TrackedFileResponse, STREAM →
       StreamingResponse fed by a pass-through relay. The ResponseEnvelope
       computed before the handler ran supplies status and headers, which
       Starlette always sends before the first body byte.

Failure handling:
    Type mismatch (FILE without a str, STREAM without a readable stream) and
    unknown kinds raise ConfigurationError before anything is written.

    Transport failures depend on whether headers were already committed:
        FILE, not yet started   → FileTransferError (boundary writes a 500)
        FILE, already started   → logged only; the connection is gone
        STREAM source fails     → logged, StreamRelayError raised; the server
                                  aborts the connection, no second response

    Both FILE paths invoke the endpoint's file_sent hook exactly once.

Backpressure:
    StreamingResponse awaits each send() before pulling the next chunk from
    the relay, and the relay pulls from the source only on demand, so a slow
    client slows the source instead of filling memory.
"""

import inspect
import io
import logging
from collections.abc import Iterator
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Optional

import aiofiles
from fastapi.encoders import jsonable_encoder
from starlette.concurrency import iterate_in_threadpool
from starlette.responses import FileResponse, JSONResponse, Response, StreamingResponse
from starlette.types import Message, Receive, Scope, Send

from endpointkit.config import settings
from endpointkit.exceptions import ConfigurationError, FileTransferError, StreamRelayError
from endpointkit.schemas.pipeline import ResponseEnvelope, ResponseKind

logger = logging.getLogger(__name__)

FileSentHook = Callable[[str], Awaitable[None]]


async def _no_op_hook(file: str) -> None:
    return None


def is_readable_stream(value: Any) -> bool:
    """
    Whether `value` can be relayed as a STREAM response.

    Accepted: async iterables (async generators, aiofiles handles), open
    readable file objects, and iterators such as generators. Strings, bytes
    and containers like lists or dicts are values, not streams.
    """
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return False
    if isinstance(value, io.IOBase):
        return not value.closed and value.readable()
    return hasattr(value, "__aiter__") or isinstance(value, Iterator)


async def stream_file(path: str, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
    """
    Async generator over a file's bytes, read with aiofiles.

    Return it from a STREAM endpoint to relay a file chunk by chunk without
    blocking the event loop.
    """
    size = chunk_size or settings.stream_chunk_size
    async with aiofiles.open(path, "rb") as f:
        while True:
            chunk = await f.read(size)
            if not chunk:
                break
            yield chunk


class TrackedFileResponse(FileResponse):
    """
    FileResponse that reports completion to a post-send hook.

    The hook runs once, after the transfer ends, whether it succeeded or not.
    """

    def __init__(
        self,
        path: str,
        on_sent: FileSentHook,
        status_code: int = 200,
        headers: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(path, status_code=status_code, headers=headers)
        self.file = path
        self.on_sent = on_sent

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        started = False

        async def tracked_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await super().__call__(scope, receive, tracked_send)
        except Exception as e:
            if not started:
                raise FileTransferError(self.file, context={"reason": str(e)}) from e
            # Headers are on the wire; a structured error is no longer possible
            logger.error("Error sending file %s: %s", self.file, e)
        finally:
            await self._notify()

    async def _notify(self) -> None:
        try:
            await self.on_sent(self.file)
        except Exception:
            logger.exception("file_sent hook failed for %s", self.file)


class ResponseDispatcher:
    """
    Maps (result, ResponseKind, ResponseEnvelope) to a single Response.

    One instance can be shared by every endpoint; it holds no per-request
    state.
    """

    def __init__(self, chunk_size: Optional[int] = None):
        self.chunk_size = chunk_size or settings.stream_chunk_size

    def dispatch(
        self,
        result: Any,
        kind: ResponseKind,
        envelope: ResponseEnvelope,
        on_file_sent: Optional[FileSentHook] = None,
    ) -> Response:
        if kind == ResponseKind.JSON:
            return self.send_json(result, envelope)
        if kind == ResponseKind.FILE:
            return self.send_file(result, envelope, on_file_sent or _no_op_hook)
        if kind == ResponseKind.STREAM:
            return self.send_stream(result, envelope)
        raise ConfigurationError(f"{kind} is not implemented", context={"kind": repr(kind)})

    def send_json(self, result: Any, envelope: ResponseEnvelope) -> Response:
        return JSONResponse(
            content=jsonable_encoder(result),
            status_code=envelope.status,
            headers=envelope.headers,
        )

    def send_file(
        self, result: Any, envelope: ResponseEnvelope, on_sent: FileSentHook
    ) -> Response:
        if not isinstance(result, str):
            raise ConfigurationError(
                "Expected data to be a string",
                context={"kind": ResponseKind.FILE.value, "got": type(result).__name__},
            )
        return TrackedFileResponse(
            result,
            on_sent=on_sent,
            status_code=envelope.status,
            headers=envelope.headers,
        )

    def send_stream(self, result: Any, envelope: ResponseEnvelope) -> Response:
        if not is_readable_stream(result):
            raise ConfigurationError(
                "Expected data to be a readable stream",
                context={"kind": ResponseKind.STREAM.value, "got": type(result).__name__},
            )
        has_content_type = any(k.lower() == "content-type" for k in envelope.headers)
        return StreamingResponse(
            self.relay(result),
            status_code=envelope.status,
            headers=envelope.headers,
            media_type=None if has_content_type else "application/octet-stream",
        )

    async def relay(self, source: Any) -> AsyncIterator[Any]:
        """
        Pass-through stage between the source stream and the response.

        Failures of the source are logged here, where the cause is still
        known, and re-raised as StreamRelayError.
        """
        try:
            async for chunk in self._iterate(source):
                yield chunk
        except Exception as e:
            logger.error("Error writing response stream: %s", e, exc_info=True)
            raise StreamRelayError(context={"reason": str(e)}) from e
        finally:
            await _close(source)

    def _iterate(self, source: Any) -> AsyncIterator[Any]:
        if hasattr(source, "__aiter__"):
            return source.__aiter__()
        if isinstance(source, io.IOBase):
            return iterate_in_threadpool(_read_chunks(source, self.chunk_size))
        return iterate_in_threadpool(source)


def _read_chunks(f: io.IOBase, chunk_size: int) -> Iterator[Any]:
    while True:
        chunk = f.read(chunk_size)
        if not chunk:
            return
        yield chunk


async def _close(source: Any) -> None:
    aclose = getattr(source, "aclose", None)
    if aclose is not None:
        await aclose()
        return
    close = getattr(source, "close", None)
    if callable(close):
        result = close()
        if inspect.isawaitable(result):
            await result
