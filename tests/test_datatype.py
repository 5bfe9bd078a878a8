import json

import pytest

from rcscript.datatype import (
    Alarm,
    AlarmAt,
    AlarmParam,
    ApiResult,
    BlockPos,
    BlockUpdate,
    BlockUpdateParam,
    BlockUpdateType,
    ErrorCode,
    ExecuteCommandResult,
    InterfaceChange,
    InterfaceChangeContent,
    InterfaceChangeParam,
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
    parse_api_result,
    parse_event,
    parse_server_message,
    query_gametime_request,
    read_interface_request,
    script_run_response,
    subscribe_request,
    subscription_to_json,
    write_interface_request,
)
from rcscript.errors import InvalidServerMessage, SerializeFailed, ServerErrorCode


def test_error_code_values_match_wire():
    assert ErrorCode(-1) is ErrorCode.GENERAL_ERROR
    assert ErrorCode(-5) is ErrorCode.NAME_NOT_FOUND
    assert ErrorCode(-7) is ErrorCode.CHUNK_UNLOADED


def test_error_code_display():
    assert str(ErrorCode(-5)) == "NameNotFound"
    assert str(ErrorCode(-6)) == "InternalError"


def test_log_level_round_trip():
    for level in LogLevel:
        assert LogLevel(level.value) is level


def test_block_pos_round_trip():
    pos = BlockPos(1, -2, 3, "overworld")
    assert BlockPos.from_json(pos.to_json()) == pos


@pytest.mark.parametrize("bad", [[1, 2, 3], [1, 2, "z", "w"], "pos", [1, 2, 3, 4], [2**40, 0, 0, "w"]])
def test_block_pos_rejects_bad_input(bad):
    with pytest.raises(ValueError):
        BlockPos.from_json(bad)


def test_param_round_trips():
    iface = InterfaceChangeParam("lamp")
    assert InterfaceChangeParam.from_json(iface.to_json()) == iface
    block = BlockUpdateParam(BlockPos(0, 64, 0, "nether"), BlockUpdateType.POST_PLACEMENT)
    assert BlockUpdateParam.from_json(block.to_json()) == block
    alarm = AlarmParam(1200, AlarmAt.END)
    assert AlarmParam.from_json(alarm.to_json()) == alarm


def test_alarm_param_rejects_unknown_at():
    with pytest.raises(ValueError):
        AlarmParam.from_json({"gametime": 1, "at": "middle"})


def test_script_run_subscription_json():
    assert subscription_to_json(ScriptRunSubscription()) == {"name": "scriptRun", "param": {}}


def test_subscription_wraps_param():
    param = InterfaceChangeParam("door")
    encoded = subscription_to_json(param)
    assert encoded["param"] == param.to_json()
    assert subscription_to_json(AlarmParam(5, AlarmAt.START))["param"] == {"gametime": 5, "at": "start"}


def test_subscription_rejects_other_types():
    with pytest.raises(TypeError):
        subscription_to_json("scriptRun")


def test_subscribe_request_carries_subscription():
    request = subscribe_request(ScriptRunSubscription())
    assert request["param"] == subscription_to_json(ScriptRunSubscription())


def test_read_interface_request_wire():
    decoded = json.loads(encode_request(read_interface_request("lamp")))
    assert decoded == {"api": "readInterface", "param": {"name": "lamp"}}


def test_write_and_command_requests_keep_values():
    assert write_interface_request("lamp", "0101")["param"] == {"name": "lamp", "value": "0101"}
    assert execute_command_request("say hi")["param"] == {"command": "say hi"}
    assert query_gametime_request()["param"] == {}


def test_log_request_uses_level_value():
    request = log_request("hello", LogLevel.WARN)
    assert request["param"]["level"] == LogLevel.WARN.value
    assert request["param"]["message"] == "hello"


def test_encode_request_is_compact():
    text = encode_request(write_interface_request("a", "b"))
    assert " " not in text
    assert json.loads(text) == write_interface_request("a", "b")


def test_encode_request_keeps_unicode():
    text = encode_request(execute_command_request("é"))
    assert "é" in text


def test_encode_request_unserializable():
    with pytest.raises(SerializeFailed):
        encode_request({"api": object()})


def test_parse_script_initialize():
    assert parse_event(json.dumps({"event": "scriptInitialize"})) == ScriptInitialize()


def test_parse_script_run():
    event = parse_event(json.dumps({"event": "scriptRun", "content": {"argument": [1, "x"]}}))
    assert event == ScriptRun(ScriptRunContent([1, "x"]))


def test_parse_interface_change():
    text = json.dumps(
        {
            "event": "interfaceChange",
            "param": {"name": "bus"},
            "content": {"previous": "0", "current": "1"},
        }
    )
    assert parse_event(text) == InterfaceChange(
        InterfaceChangeParam("bus"), InterfaceChangeContent("0", "1")
    )


def test_parse_block_update_and_alarm():
    block = BlockUpdateParam(BlockPos(4, 5, 6, "end"), BlockUpdateType.ANY)
    assert parse_event(json.dumps({"event": "blockUpdate", "param": block.to_json()})) == BlockUpdate(block)
    alarm = AlarmParam(77, AlarmAt.START)
    assert parse_event(json.dumps({"event": "alarm", "param": alarm.to_json()})) == Alarm(alarm)


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        json.dumps({"event": "scriptRun"}),
        json.dumps({"event": "unknown"}),
        json.dumps({"result": {}}),
        json.dumps([1, 2]),
    ],
)
def test_parse_event_rejects(text):
    with pytest.raises(InvalidServerMessage):
        parse_event(text)


def test_parse_api_result_value():
    result = parse_api_result(json.dumps({"result": {"value": "abc"}}))
    assert result.unwrap() == {"value": "abc"}


def test_parse_api_result_error_code():
    result = parse_api_result(json.dumps({"result": -5}))
    assert result.code is ErrorCode.NAME_NOT_FOUND
    with pytest.raises(ServerErrorCode) as info:
        result.unwrap()
    assert info.value.code is ErrorCode.NAME_NOT_FOUND


def test_parse_api_result_missing_field():
    with pytest.raises(InvalidServerMessage):
        parse_api_result(json.dumps({"value": 1}))


def test_api_result_unwrap_plain():
    assert ApiResult(value={"gametime": 10}).unwrap() == {"gametime": 10}


def test_parse_server_message_distinguishes():
    assert parse_server_message(json.dumps({"event": "scriptInitialize"})) == ScriptInitialize()
    assert parse_server_message(json.dumps({"result": {}})) == ApiResult(value={})


def test_parse_server_message_event_takes_precedence():
    text = json.dumps({"event": "scriptInitialize", "result": {}})
    assert parse_server_message(text) == ScriptInitialize()


@pytest.mark.parametrize("text", ["{", json.dumps({"other": 1}), json.dumps("text")])
def test_parse_server_message_rejects(text):
    with pytest.raises(InvalidServerMessage):
        parse_server_message(text)


def test_execute_command_result_from_json():
    result = ExecuteCommandResult.from_json({"feedback": "ok", "error": "", "result": 1})
    assert result == ExecuteCommandResult("ok", "", 1)
    with pytest.raises(ValueError):
        ExecuteCommandResult.from_json({"feedback": "ok", "error": ""})


def test_event_responses_round_trip():
    assert json.loads(encode_event_response(empty_response())) == {"finish": {}}
    assert json.loads(encode_event_response(script_run_response(3)))["finish"] == {"result": 3}
    code = json.loads(encode_event_response(error_response(ErrorCode.NAME_ILLEGAL)))["finish"]
    assert ErrorCode(code) is ErrorCode.NAME_ILLEGAL