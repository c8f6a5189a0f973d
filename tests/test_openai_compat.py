import pytest
import requests

from adapters.openai_compat import OpenAICompatGateway
from errors import GatewayError
from messages import Message
from models import LLMModel
from tools.tool_schema import ToolDescriptor


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ""

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}", response=self)


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.requests = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.response


@pytest.fixture
def model(monkeypatch):
    monkeypatch.setenv("TEST_LLM_KEY", "sk-test")
    return LLMModel(name="demo", endpoint="http://localhost:9999/v1/", model="demo-1", api_key_env="TEST_LLM_KEY")


def gateway(model, **kw):
    return OpenAICompatGateway(model, session=FakeSession(**kw))


HISTORY = [Message.system("sys"), Message.user("hi")]
TOOLS = [ToolDescriptor("glob", "find files", {"type": "object"})]


class TestRequest:
    def test_payload_and_headers(self, model):
        gw = gateway(model, response=FakeResponse(body={"choices": [{"message": {"content": "hello"}}]}))
        reply = gw.complete(HISTORY, TOOLS)
        sent = gw.session.requests[0]
        assert sent["url"] == "http://localhost:9999/v1/chat/completions"
        assert sent["headers"]["Authorization"] == "Bearer sk-test"
        assert sent["json"]["model"] == "demo-1"
        assert sent["json"]["messages"] == [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}]
        assert sent["json"]["tools"][0]["function"]["name"] == "glob"
        assert sent["json"]["tool_choice"] == "auto"
        assert reply.role == "assistant" and reply.content == "hello"

    def test_no_tools_no_tool_choice(self, model):
        gw = gateway(model, response=FakeResponse(body={"choices": [{"message": {"content": "x"}}]}))
        gw.complete(HISTORY, [])
        assert "tools" not in gw.session.requests[0]["json"]
        assert "tool_choice" not in gw.session.requests[0]["json"]

    def test_missing_key(self, model, monkeypatch):
        monkeypatch.delenv("TEST_LLM_KEY")
        with pytest.raises(GatewayError, match="TEST_LLM_KEY environment variable is required"):
            gateway(model)

    def test_key_not_required(self):
        local = LLMModel(name="local", endpoint="http://localhost:1234/v1", api_key_reqd=False)
        gw = gateway(local, response=FakeResponse(body={"choices": []}))
        assert "Authorization" not in gw._headers


class TestResponse:
    def test_tool_calls_parsed(self, model):
        body = {"choices": [{"message": {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {"id": "c1", "type": "function", "function": {"name": "glob", "arguments": "{\"pattern\": \"*\"}"}},
                {"id": "c2", "type": "function", "function": {"name": "grep", "arguments": {"pattern": "x"}}},
            ],
        }}]}
        reply = gateway(model, response=FakeResponse(body=body)).complete(HISTORY, TOOLS)
        assert [(tc.id, tc.name) for tc in reply.tool_calls] == [("c1", "glob"), ("c2", "grep")]
        assert reply.tool_calls[1].raw_arguments == '{"pattern": "x"}'

    def test_no_choices_is_none(self, model):
        assert gateway(model, response=FakeResponse(body={"choices": []})).complete(HISTORY, TOOLS) is None

    def test_http_error(self, model):
        gw = gateway(model, response=FakeResponse(status_code=500, text="upstream down"))
        with pytest.raises(GatewayError, match="upstream down") as ei:
            gw.complete(HISTORY, TOOLS)
        assert ei.value.status == 500

    def test_unauthorized_hint(self, model):
        gw = gateway(model, response=FakeResponse(status_code=401, text="bad key"))
        with pytest.raises(GatewayError, match="Check TEST_LLM_KEY"):
            gw.complete(HISTORY, TOOLS)

    def test_transport_error(self, model):
        gw = gateway(model, exc=requests.ConnectionError("refused"))
        with pytest.raises(GatewayError, match="refused"):
            gw.complete(HISTORY, TOOLS)

    def test_non_json_body(self, model):
        gw = gateway(model, response=FakeResponse(text="<html>"))
        with pytest.raises(GatewayError, match="non-JSON"):
            gw.complete(HISTORY, TOOLS)

    def test_error_body(self, model):
        gw = gateway(model, response=FakeResponse(body={"error": {"message": "quota"}}))
        with pytest.raises(GatewayError, match="quota"):
            gw.complete(HISTORY, TOOLS)
