import json

import httpx
import pytest

from config import LlmRoute
from llm_gateway import LlmGatewayError, RouteGateway, ask, parse_json_object, runnable, strip_code_fences


def _route(**overrides) -> LlmRoute:
    fields = dict(
        name="question-test",
        base_url="http://llm.local",
        endpoint="/v1/chat/completions",
        model="test-model",
        timeout_s=2.0,
        api_key_env="TEST_LLM_KEY",
    )
    fields.update(overrides)
    return LlmRoute(**fields)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_ask_sends_chat_payload(monkeypatch):
    monkeypatch.setenv("TEST_LLM_KEY", "secret")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": '{"question": "Hi"}'}}]})

    content = ask("Welcome the candidate", cfg=_route(), client=_client(handler), system_prompt="Be brief.")
    assert content == '{"question": "Hi"}'
    body = json.loads(seen[0].content)
    assert body["model"] == "test-model"
    assert body["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Welcome the candidate"},
    ]
    assert seen[0].headers["authorization"] == "Bearer secret"
    assert str(seen[0].url) == "http://llm.local/v1/chat/completions"


def test_generate_content_envelope():
    def handler(request):
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "part one "}, {"text": "two"}]}}]})

    gateway = RouteGateway(_route(api_key_env=None), client=_client(handler))
    assert gateway.ask("prompt") == "part one two"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, json={"error": "overloaded"}),
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json={"choices": []}),
    ],
)
def test_bad_responses_raise_gateway_error(response):
    gateway = RouteGateway(_route(), client=_client(lambda request: response))
    with pytest.raises(LlmGatewayError):
        gateway.ask("prompt")


def test_transport_failure_raises_gateway_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(LlmGatewayError):
        RouteGateway(_route(), client=_client(handler)).ask("prompt")


def test_runnable_accepts_plain_text():
    def handler(request):
        body = json.loads(request.content)
        return httpx.Response(200, json={"content": body["messages"][-1]["content"].upper()})

    chain = runnable(_route(), client=_client(handler))
    assert chain.invoke("echo") == "ECHO"


def test_parse_json_object_variants():
    assert parse_json_object('{"a": 1}') == {"a": 1}
    assert parse_json_object('```json\n{"a": 2}\n```') == {"a": 2}
    assert parse_json_object('Reply: {"a": 3} done') == {"a": 3}
    assert parse_json_object("[1, 2]") is None
    assert parse_json_object("no json here") is None


def test_strip_code_fences():
    assert strip_code_fences("```\nplain\n```") == "plain"
    assert strip_code_fences("no fences") == "no fences"
