"""Exceptions raised while talking to the redstone computer server."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .datatype import ErrorCode


class ScriptError(Exception):
    """Base class of every error a script can raise."""

    message = "script error"

    def __init__(self, *args: object) -> None:
        super().__init__(*(args or (self.message,)))


class WebsocketError(ScriptError):
    """The websocket connection failed."""

    message = "unexpected websocket error"


class UnexpectedApiResult(ScriptError):
    """The server sent an API result while no request was pending."""

    message = "unexpected api result from server while no api request was pending"


class InvalidServerMessage(ScriptError):
    """The server sent a message that could not be understood."""

    message = "invalid message from server"


class UnexpectedDisconnect(ScriptError):
    """The server closed the connection while a request was pending."""

    message = "unexpected disconnect from server"


class InitializeFailed(ScriptError):
    """The initialisation callback reported an error."""

    message = "scriptInitialize callback returned Err"


class SerializeFailed(ScriptError):
    """A message could not be encoded as JSON."""

    message = "failed to serialize message"


class ServerErrorCode(ScriptError):
    """An error code, either reported by the server or raised by a callback."""

    message = "error code from server"

    def __init__(self, code: ErrorCode) -> None:
        super().__init__(self.message)
        self.code = code


def error_code_of(exc: BaseException) -> ErrorCode:
    """Return the error code to report to the server for an exception.

    A ``ServerErrorCode`` carries its own code; anything else is an internal error.
    """
    from .datatype import ErrorCode

    if isinstance(exc, ServerErrorCode):
        return ErrorCode(exc.code)
    return ErrorCode.INTERNAL_ERROR