import pytest

from mistral_chat.domain.exceptions import ApiError, DecodeError, ValidationError
from mistral_chat.domain.models import ChatMessage, ChatRequest, ChatRole
from mistral_chat.domain.result import ErrorKind, Result
from mistral_chat.providers.registry import resolve_model


def test_message_factories():
    assert ChatMessage.user("hi") == ChatMessage(ChatRole.USER, "hi")
    assert ChatMessage.assistant(None).content == ""
    assert ChatMessage.system("s").role is ChatRole.SYSTEM
    placeholder = ChatMessage.placeholder()
    assert placeholder.role is ChatRole.ASSISTANT and placeholder.content == ""
    assert str(ChatMessage.user("x")) == "[user]: x"


def test_role_from_api():
    assert ChatRole.from_api("Assistant") is ChatRole.ASSISTANT
    assert ChatRole.from_api("tool") is ChatRole.USER
    assert ChatRole.from_api(None) is ChatRole.USER


def test_request_build_clamps_and_serializes():
    req = ChatRequest.build(
        model="mistral-small-latest",
        messages=[ChatMessage.user("hi")],
        temperature=5,
        max_tokens=0,
        top_p=-1,
        stream=True,
        safe_prompt=True,
    )
    assert req.messages == (ChatMessage.user("hi"),)
    assert req.to_payload() == {
        "model": "mistral-small-latest",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 2.0,
        "max_tokens": 1,
        "top_p": 0.0,
        "stream": True,
        "safe_prompt": True,
    }


def test_request_is_immutable_snapshot():
    history = [ChatMessage.user("a")]
    req = ChatRequest.build(model="m", messages=history)
    history.append(ChatMessage.user("b"))
    assert len(req.messages) == 1
    with pytest.raises(AttributeError):
        req.model = "other"
    streamed = req.with_stream(True)
    assert streamed.stream and not req.stream
    assert req.with_stream(False) is req


def test_resolve_model():
    assert resolve_model("mistral-large") == "mistral-large-latest"
    assert resolve_model("Codestral") == "codestral-latest"
    assert resolve_model("my-finetune") == "my-finetune"


def test_result_success_and_failure():
    ok = Result.success(3)
    assert ok.is_success and not ok.is_failure
    assert ok.map(lambda v: v * 2).value == 6
    assert ok.value_or(0) == 3

    err = Result.failure("boom", ErrorKind.TRANSPORT, http_status=500)
    assert err.is_failure
    assert err.value_or(7) == 7
    mapped = err.map(lambda v: v * 2)
    assert mapped.error == "boom" and mapped.http_status == 500

    seen = []
    ok.match(seen.append, seen.append)
    err.match(seen.append, seen.append)
    assert seen == [3, "boom"]


def test_result_success_rejects_none():
    with pytest.raises(ValueError):
        Result.success(None)


def test_result_map_captures_exceptions():
    res = Result.success("x").map(lambda v: int(v))
    assert res.is_failure
    assert isinstance(res.exception, ValueError)


def test_result_from_error_keeps_kind_and_status():
    assert Result.from_error(ValidationError(code="X", message="m")).kind is ErrorKind.VALIDATION
    api = Result.from_error(ApiError(code="API_ERROR", message="bad", http_status=401))
    assert api.kind is ErrorKind.TRANSPORT and api.http_status == 401
    assert Result.from_error(DecodeError(code="D", message="d")).kind is ErrorKind.DECODE
