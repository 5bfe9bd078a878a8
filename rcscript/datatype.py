"""Messages and values exchanged with the redstone computer server."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Union

from .errors import InvalidServerMessage, SerializeFailed, ServerErrorCode

_I32 = (-(2**31), 2**31 - 1)
_I64 = (-(2**63), 2**63 - 1)


class LogLevel(enum.Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class BlockUpdateType(enum.Enum):
    NEIGHBOR_UPDATE = "neighborUpdate"
    POST_PLACEMENT = "postPlacement"
    ANY = "any"


class AlarmAt(enum.Enum):
    START = "start"
    END = "end"


class ErrorCode(enum.IntEnum):
    GENERAL_ERROR = -1
    ARGUMENT_INVALID = -2
    NAME_ILLEGAL = -3
    NAME_EXISTS = -4
    NAME_NOT_FOUND = -5
    INTERNAL_ERROR = -6
    CHUNK_UNLOADED = -7

    def __str__(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


def _obj(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _field(data: dict, key: str, what: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r} in {what}") from None


def _int(value: Any, what: str, bounds: tuple[int, int] = _I64) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an integer")
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{what} is out of range")
    return value


def _str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string")
    return value


@dataclass(frozen=True)
class BlockPos:
    """A block position in a dimension."""

    x: int
    y: int
    z: int
    dimension: str

    def to_json(self) -> list:
        return [self.x, self.y, self.z, self.dimension]

    @classmethod
    def from_json(cls, data: Any) -> BlockPos:
        if not isinstance(data, (list, tuple)) or len(data) != 4:
            raise ValueError("block position must be an array of four elements")
        x, y, z, dimension = data
        return cls(
            _int(x, "x", _I32),
            _int(y, "y", _I32),
            _int(z, "z", _I32),
            _str(dimension, "dimension"),
        )


@dataclass(frozen=True)
class ScriptRunSubscription:
    """Subscription to the script being run."""

    def to_json(self) -> dict:
        return {"name": "scriptRun", "param": {}}


@dataclass(frozen=True)
class InterfaceChangeParam:
    name: str

    def to_json(self) -> dict:
        return {"name": self.name}

    @classmethod
    def from_json(cls, data: Any) -> InterfaceChangeParam:
        data = _obj(data, "interface change parameter")
        return cls(_str(_field(data, "name", "interface change parameter"), "name"))


@dataclass(frozen=True)
class BlockUpdateParam:
    pos: BlockPos
    type: BlockUpdateType

    def to_json(self) -> dict:
        return {"pos": self.pos.to_json(), "type": self.type.value}

    @classmethod
    def from_json(cls, data: Any) -> BlockUpdateParam:
        data = _obj(data, "block update parameter")
        pos = BlockPos.from_json(_field(data, "pos", "block update parameter"))
        kind = BlockUpdateType(_field(data, "type", "block update parameter"))
        return cls(pos, kind)


@dataclass(frozen=True)
class AlarmParam:
    gametime: int
    at: AlarmAt

    def to_json(self) -> dict:
        return {"gametime": self.gametime, "at": self.at.value}

    @classmethod
    def from_json(cls, data: Any) -> AlarmParam:
        data = _obj(data, "alarm parameter")
        gametime = _int(_field(data, "gametime", "alarm parameter"), "gametime")
        at = AlarmAt(_field(data, "at", "alarm parameter"))
        return cls(gametime, at)


Subscription = Union[ScriptRunSubscription, InterfaceChangeParam, BlockUpdateParam, AlarmParam]


@dataclass(frozen=True)
class ExecuteCommandResult:
    feedback: str
    error: str
    result: int

    @classmethod
    def from_json(cls, data: Any) -> ExecuteCommandResult:
        data = _obj(data, "command result")
        return cls(
            _str(_field(data, "feedback", "command result"), "feedback"),
            _str(_field(data, "error", "command result"), "error"),
            _int(_field(data, "result", "command result"), "result", _I32),
        )


@dataclass(frozen=True)
class ScriptRunContent:
    argument: list = field(default_factory=list)


@dataclass(frozen=True)
class InterfaceChangeContent:
    previous: str
    current: str


@dataclass(frozen=True)
class ScriptInitialize:
    """The server asks the script to initialise."""


@dataclass(frozen=True)
class ScriptRun:
    content: ScriptRunContent


@dataclass(frozen=True)
class InterfaceChange:
    param: InterfaceChangeParam
    content: InterfaceChangeContent


@dataclass(frozen=True)
class BlockUpdate:
    param: BlockUpdateParam


@dataclass(frozen=True)
class Alarm:
    param: AlarmParam


Event = Union[ScriptInitialize, ScriptRun, InterfaceChange, BlockUpdate, Alarm]


@dataclass(frozen=True)
class ApiResult:
    """The outcome of an API request: a JSON value or an error code."""

    value: Any = None
    code: ErrorCode | None = None

    def unwrap(self) -> Any:
        """Return the value, or raise ``ServerErrorCode`` if the server reported an error."""
        if self.code is not None:
            raise ServerErrorCode(self.code)
        return self.value


_SUBSCRIPTION_NAMES = {
    InterfaceChangeParam: "interfaceChange",
    BlockUpdateParam: "blockUpdate",
    AlarmParam: "alarm",
}


def subscription_to_json(param: Subscription) -> dict:
    """Encode a subscription as its tagged JSON form."""
    if isinstance(param, ScriptRunSubscription):
        return param.to_json()
    name = _SUBSCRIPTION_NAMES.get(type(param))
    if name is None:
        raise TypeError(f"not a subscription: {param!r}")
    return {"name": name, "param": param.to_json()}


def _request(api: str, param: dict) -> dict:
    return {"api": api, "param": param}


def subscribe_request(param: Subscription) -> dict:
    return _request("subscribe", subscription_to_json(param))


def read_interface_request(name: str) -> dict:
    return _request("readInterface", {"name": str(name)})


def write_interface_request(name: str, value: str) -> dict:
    return _request("writeInterface", {"name": str(name), "value": str(value)})


def query_gametime_request() -> dict:
    return _request("queryGametime", {})


def execute_command_request(command: str) -> dict:
    return _request("executeCommand", {"command": str(command)})


def log_request(message: str, level: LogLevel) -> dict:
    return _request("log", {"message": str(message), "level": LogLevel(level).value})


def _dumps(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializeFailed() from exc


def encode_request(request: dict) -> str:
    """Encode an API request as compact JSON text."""
    return _dumps(request)


def _event_from_json(data: Any) -> Event:
    data = _obj(data, "event")
    kind = _str(_field(data, "event", "event"), "event tag")
    if kind == "scriptInitialize":
        return ScriptInitialize()
    if kind == "scriptRun":
        content = _obj(_field(data, "content", "scriptRun event"), "content")
        argument = _field(content, "argument", "scriptRun content")
        if not isinstance(argument, list):
            raise ValueError("argument must be an array")
        return ScriptRun(ScriptRunContent(argument))
    if kind == "interfaceChange":
        param = InterfaceChangeParam.from_json(_field(data, "param", "interfaceChange event"))
        content = _obj(_field(data, "content", "interfaceChange event"), "content")
        return InterfaceChange(
            param,
            InterfaceChangeContent(
                _str(_field(content, "previous", "content"), "previous"),
                _str(_field(content, "current", "content"), "current"),
            ),
        )
    if kind == "blockUpdate":
        return BlockUpdate(BlockUpdateParam.from_json(_field(data, "param", "blockUpdate event")))
    if kind == "alarm":
        return Alarm(AlarmParam.from_json(_field(data, "param", "alarm event")))
    raise ValueError(f"unknown event {kind!r}")


_ERROR_CODES = {code.value for code in ErrorCode}


def _api_result_from_json(data: Any) -> ApiResult:
    data = _obj(data, "api result")
    result = _field(data, "result", "api result")
    if isinstance(result, int) and not isinstance(result, bool) and result in _ERROR_CODES:
        return ApiResult(code=ErrorCode(result))
    return ApiResult(value=result)


def parse_event(text: str) -> Event:
    """Parse an event sent by the server."""
    try:
        return _event_from_json(json.loads(text))
    except (ValueError, TypeError) as exc:
        raise InvalidServerMessage() from exc


def parse_api_result(text: str) -> ApiResult:
    """Parse the server's answer to an API request."""
    try:
        return _api_result_from_json(json.loads(text))
    except (ValueError, TypeError) as exc:
        raise InvalidServerMessage() from exc


def parse_server_message(text: str) -> Event | ApiResult:
    """Parse a server message, which is either an event or an API result."""
    try:
        data = json.loads(text)
    except (ValueError, TypeError) as exc:
        raise InvalidServerMessage() from exc
    for parser in (_event_from_json, _api_result_from_json):
        try:
            return parser(data)
        except (ValueError, TypeError):
            continue
    raise InvalidServerMessage()


def encode_event_response(response: Any) -> str:
    """Encode the reply that finishes an event."""
    return _dumps({"finish": response})


def empty_response() -> dict:
    return {}


def script_run_response(result: int) -> dict:
    return {"result": int(result)}


def error_response(code: ErrorCode) -> int:
    return int(ErrorCode(code))