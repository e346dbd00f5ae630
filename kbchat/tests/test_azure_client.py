import httpx
import pytest

from kbchat.domain.exceptions import (
    ApiError,
    AuthError,
    ConfigError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    RemoteCallError,
)
from kbchat.domain.models import ChatMessage, ChatRequest
from kbchat.providers.azure_client import AzureOpenAIClient


class SettingsStub:
    open_ai_service_url = "https://example.openai.azure.com/"
    open_ai_service_key = "secret-key"
    azure_api_version = "2023-03-15-preview"
    azure_deployment_id = None
    http_timeout = 1.0


def _request():
    return ChatRequest(
        provider="azure",
        model="chat",
        messages=[
            ChatMessage(role="system", content="sys"),
            ChatMessage(role="user", content="hi"),
        ],
    )


def _fake_client(monkeypatch, status_code=200, body=None, captured=None, exc=None, text=""):
    class Resp:
        def __init__(self):
            self.status_code = status_code
            self.text = text

        def json(self):
            if isinstance(body, Exception):
                raise body
            return body

    class Client:
        def __init__(self, *a, **kw):
            if captured is not None:
                captured["client_kwargs"] = kw

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, params=None, json=None, headers=None, **_):
            if exc is not None:
                raise exc
            if captured is not None:
                captured.update(url=url, params=params, payload=json, headers=headers)
            return Resp()

    monkeypatch.setattr("httpx.Client", Client)


def test_azure_client_basic(monkeypatch):
    captured = {}
    _fake_client(
        monkeypatch,
        body={
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "ok"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 3, "completion_tokens": 1, "total_tokens": 4},
        },
        captured=captured,
    )
    res = AzureOpenAIClient(SettingsStub()).chat(_request())
    assert res.text == "ok"
    assert res.usage.total_tokens == 4
    assert captured["url"] == "https://example.openai.azure.com/openai/deployments/gpt-4/chat/completions"
    assert captured["params"] == {"api-version": "2023-03-15-preview"}
    assert captured["headers"]["api-key"] == "secret-key"
    assert captured["payload"]["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hi"},
    ]
    assert captured["client_kwargs"]["timeout"] == 1.0


def test_azure_client_deployment_override(monkeypatch):
    class Cfg(SettingsStub):
        azure_deployment_id = "gpt-4-32k"

    captured = {}
    _fake_client(monkeypatch, body={"choices": [{"message": {"content": "ok"}}]}, captured=captured)
    AzureOpenAIClient(Cfg()).chat(_request())
    assert "/deployments/gpt-4-32k/" in captured["url"]


@pytest.mark.parametrize(
    "status, error_cls",
    [(401, AuthError), (403, AuthError), (429, RateLimitError), (500, ApiError), (404, ApiError)],
)
def test_azure_client_http_errors(monkeypatch, status, error_cls):
    _fake_client(monkeypatch, status_code=status, text="nope")
    with pytest.raises(error_cls) as ei:
        AzureOpenAIClient(SettingsStub()).chat(_request())
    assert isinstance(ei.value, RemoteCallError)
    assert ei.value.http_status == status


def test_azure_client_network_error(monkeypatch):
    _fake_client(monkeypatch, exc=httpx.ConnectError("connection refused"))
    with pytest.raises(NetworkError) as ei:
        AzureOpenAIClient(SettingsStub()).chat(_request())
    assert "connection refused" in ei.value.message


def test_azure_client_non_json_body(monkeypatch):
    _fake_client(monkeypatch, body=ValueError("Expecting value"))
    with pytest.raises(MalformedResponseError):
        AzureOpenAIClient(SettingsStub()).chat(_request())


@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"id": "x"},
        [],
        {"choices": [{"message": {"role": "assistant", "content": None}, "finish_reason": "content_filter"}]},
        {"choices": ["oops"]},
        {"choices": [{"message": "text"}]},
        {"choices": [{"message": {"role": "assistant", "content": "ok"}}], "usage": ["x"]},
    ],
)
def test_azure_client_malformed_payload(monkeypatch, body):
    _fake_client(monkeypatch, body=body)
    with pytest.raises(MalformedResponseError):
        AzureOpenAIClient(SettingsStub()).chat(_request())


def test_azure_client_requires_credentials():
    class Cfg(SettingsStub):
        open_ai_service_key = None

    with pytest.raises(ConfigError):
        AzureOpenAIClient(Cfg()).chat(_request())
