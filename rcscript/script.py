"""Running a script against the server and calling its API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .datatype import (
    Alarm,
    ApiResult,
    BlockUpdate,
    Event,
    ExecuteCommandResult,
    InterfaceChange,
    LogLevel,
    ScriptInitialize,
    ScriptRun,
    ScriptRunContent,
    ScriptRunSubscription,
    empty_response,
    encode_event_response,
    encode_request,
    error_response,
    execute_command_request,
    log_request,
    parse_server_message,
    query_gametime_request,
    read_interface_request,
    script_run_response,
    subscribe_request,
    write_interface_request,
)
from .errors import (
    InitializeFailed,
    InvalidServerMessage,
    SerializeFailed,
    UnexpectedApiResult,
    UnexpectedDisconnect,
    WebsocketError,
    error_code_of,
)

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "ws://localhost:37265/"

InitCallback = Callable[["Context"], Awaitable[None]]
ExecuteCallback = Callable[["Context", list], Awaitable[int]]

_QUERY_ESCAPED = frozenset(b' "#<>')


def url_encode_query(s: str) -> str:
    """Percent-encode control characters, non-ASCII bytes, space, '"', '#', '<' and '>'."""
    return "".join(
        f"%{byte:02X}" if byte < 0x20 or byte >= 0x7F or byte in _QUERY_ESCAPED else chr(byte)
        for byte in s.encode("utf-8")
    )


class Script:
    """A script: its name, description, server and event callbacks."""

    def __init__(
        self,
        name: str = "example",
        description: str = "",
        server: str = DEFAULT_SERVER,
    ) -> None:
        self.name = str(name)
        self.description = str(description)
        self.server = str(server)
        self.init_callback: Optional[InitCallback] = None
        self.execute_callback: Optional[ExecuteCallback] = None

    def on_init(self, callback: InitCallback) -> Script:
        """Set the coroutine function called once when the server initialises the script."""
        self.init_callback = callback
        return self

    def on_execute(self, callback: ExecuteCallback) -> Script:
        """Set the coroutine function called whenever the script is run."""
        self.execute_callback = callback
        return self

    def url(self) -> str:
        """The URL used to connect, carrying the name and description."""
        return (
            f"{self.server}?name={url_encode_query(self.name)}"
            f"&description={url_encode_query(self.description)}"
        )

    async def run(self) -> None:
        """Connect to the server and handle events until it closes the connection."""
        logger.info("Connecting to server")
        try:
            async with websockets.connect(self.url()) as connection:
                await Context(self, connection)._main_loop()
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise WebsocketError() from exc


def _decode(value: Any, decoder: Callable[[Any], Any]) -> Any:
    try:
        return decoder(value)
    except (KeyError, TypeError, ValueError) as exc:
        raise SerializeFailed() from exc


def _interface_value(data: Any) -> str:
    value = data["value"]
    if not isinstance(value, str):
        raise TypeError("value must be a string")
    return value


def _gametime(data: Any) -> int:
    gametime = data["gametime"]
    if isinstance(gametime, bool) or not isinstance(gametime, int):
        raise TypeError("gametime must be an integer")
    return gametime


class Context:
    """A live connection to the server, handed to the script's callbacks."""

    def __init__(self, script: Script, connection: Any) -> None:
        self._script = script
        self._connection = connection
        self._init_callback = script.init_callback
        self._recv_lock = asyncio.Lock()
        self._send_lock = asyncio.Lock()

    async def _main_loop(self) -> None:
        logger.info("Connected")
        while (event := await self._next_event()) is not None:
            await self._handle_event(event)

    async def _next_event(self) -> Event | None:
        message = await self._next_event_or_api_result()
        if isinstance(message, ApiResult):
            logger.error("unexpected api result %r", message)
            raise UnexpectedApiResult()
        return message

    async def _next_event_or_api_result(self) -> Event | ApiResult | None:
        text = await self._next_message()
        if text is None:
            return None
        try:
            message = parse_server_message(text)
        except InvalidServerMessage:
            logger.error("unrecognized server message %r", text)
            raise
        logger.debug("server message %r", message)
        return message

    async def _next_message(self) -> str | None:
        async with self._recv_lock:
            try:
                message = await self._connection.recv()
            except ConnectionClosed as exc:
                if exc.rcvd is not None:
                    return None
                raise WebsocketError() from exc
            except (OSError, WebSocketException) as exc:
                raise WebsocketError() from exc
        if isinstance(message, str):
            return message
        logger.error("unrecognized server message %r", message)
        raise InvalidServerMessage()

    async def _handle_event(self, event: Event) -> None:
        if isinstance(event, ScriptInitialize):
            logger.info("Initializing")
            await self._on_init()
            logger.info("Running")
        elif isinstance(event, ScriptRun):
            await self._on_execute(event.content)
        elif isinstance(event, (InterfaceChange, BlockUpdate, Alarm)):
            logger.debug("ignoring event %r", event)

    async def _send(self, message: str) -> None:
        async with self._send_lock:
            try:
                await self._connection.send(message)
            except (OSError, WebSocketException) as exc:
                raise WebsocketError() from exc

    async def _send_event_response(self, response: Any) -> None:
        logger.debug("event response %r", response)
        await self._send(encode_event_response(response))

    async def _send_api_request(self, request: dict) -> Any:
        logger.debug("api request %r", request)
        await self._send(encode_request(request))
        while True:
            message = await self._next_event_or_api_result()
            if message is None:
                raise UnexpectedDisconnect()
            if isinstance(message, ApiResult):
                return message.unwrap()
            await self._handle_event(message)

    async def _on_init(self) -> None:
        if self._script.execute_callback is not None:
            await self.subscribe_run()
        callback, self._init_callback = self._init_callback, None
        if callback is not None:
            try:
                await callback(self)
            except Exception as exc:
                await self._send_event_response(error_response(error_code_of(exc)))
                raise InitializeFailed() from exc
        await self._send_event_response(empty_response())

    async def _on_execute(self, content: ScriptRunContent) -> None:
        callback = self._script.execute_callback
        result = 0
        if callback is not None:
            try:
                result = await callback(self, list(content.argument))
            except Exception as exc:
                await self._send_event_response(error_response(error_code_of(exc)))
                return
        await self._send_event_response(script_run_response(result))

    async def subscribe_run(self) -> None:
        """Ask the server to deliver run events to this script."""
        await self._send_api_request(subscribe_request(ScriptRunSubscription()))

    async def read_interface(self, name: str) -> str:
        """Read the current value of an interface."""
        result = await self._send_api_request(read_interface_request(name))
        return _decode(result, _interface_value)

    async def write_interface(self, name: str, value: str) -> None:
        """Write a value to an interface."""
        await self._send_api_request(write_interface_request(name, value))

    async def query_gametime(self) -> int:
        """Return the current game time."""
        result = await self._send_api_request(query_gametime_request())
        return _decode(result, _gametime)

    async def execute_command(self, command: str) -> ExecuteCommandResult:
        """Execute a game command and return its outcome."""
        result = await self._send_api_request(execute_command_request(command))
        return _decode(result, ExecuteCommandResult.from_json)

    async def log(self, message: str, level: LogLevel) -> None:
        """Send a log message at the given level to the server."""
        await self._send_api_request(log_request(message, level))

    async def debug(self, message: str) -> None:
        await self.log(message, LogLevel.DEBUG)

    async def info(self, message: str) -> None:
        await self.log(message, LogLevel.INFO)

    async def warn(self, message: str) -> None:
        await self.log(message, LogLevel.WARN)

    async def error(self, message: str) -> None:
        await self.log(message, LogLevel.ERROR)

    async def fatal(self, message: str) -> None:
        await self.log(message, LogLevel.FATAL)