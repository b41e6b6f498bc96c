import base64
import json

import lambda_function
from src.companion.handler import CORS_HEADERS, ChatHandler
from src.companion.types import ProxyConfig

from tests.fakes import StubLoader, StubUpstream


class _Ctx:
    aws_request_id = "req-1"


def _install(monkeypatch, config, **kwargs):
    handler = ChatHandler(config, goal_loader=StubLoader(), upstream=StubUpstream(**kwargs))
    monkeypatch.setattr(lambda_function, "_handler", handler)
    return handler


def test_rest_api_post(monkeypatch, config):
    _install(monkeypatch, config, text="hello back")
    out = lambda_function.lambda_handler({"httpMethod": "POST", "body": '{"message":"hi"}'}, _Ctx())
    assert out["statusCode"] == 200
    assert json.loads(out["body"]) == {"response": "hello back"}
    assert out["headers"]["Access-Control-Allow-Origin"] == "*"


def test_http_api_preflight(monkeypatch, config):
    _install(monkeypatch, config)
    out = lambda_function.lambda_handler({"requestContext": {"http": {"method": "OPTIONS"}}}, None)
    assert out["statusCode"] == 200
    assert out["body"] == ""
    for k, v in CORS_HEADERS.items():
        assert out["headers"][k] == v


def test_base64_body(monkeypatch, config):
    _install(monkeypatch, config, text="decoded")
    body = base64.b64encode(b'{"message":"hi"}').decode("ascii")
    out = lambda_function.lambda_handler({"httpMethod": "POST", "body": body, "isBase64Encoded": True}, _Ctx())
    assert json.loads(out["body"]) == {"response": "decoded"}


def test_direct_invoke_uses_event_as_body(monkeypatch, config):
    handler = _install(monkeypatch, config, text="direct")
    out = lambda_function.lambda_handler({"message": "hi", "userId": "u1"}, None)
    assert json.loads(out["body"]) == {"response": "direct"}
    assert handler.goal_loader.calls == ["u1"]


def test_missing_body_is_error_with_cors(monkeypatch, config):
    _install(monkeypatch, config)
    out = lambda_function.lambda_handler({"httpMethod": "POST", "body": None}, _Ctx())
    assert out["statusCode"] == 500
    assert json.loads(out["body"])["error"]
    assert out["headers"]["Access-Control-Allow-Headers"] == CORS_HEADERS["Access-Control-Allow-Headers"]


def test_handler_built_from_environment(monkeypatch, tmp_path):
    monkeypatch.setattr(lambda_function, "_handler", None)
    monkeypatch.setenv("COMPANION_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    out = lambda_function.lambda_handler({"httpMethod": "POST", "body": '{"message":"hi"}'}, _Ctx())
    assert out["statusCode"] == 500
    assert json.loads(out["body"]) == {"error": "Gemini API key not configured"}
    assert isinstance(lambda_function._handler.config, ProxyConfig)


def test_preflight_answers_even_when_settings_are_invalid(monkeypatch, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("on_goal_lookup_failure: ignore\n", encoding="utf-8")
    monkeypatch.setattr(lambda_function, "_handler", None)
    monkeypatch.setenv("COMPANION_CONFIG", str(bad))

    out = lambda_function.lambda_handler({"httpMethod": "OPTIONS"}, None)

    assert out["statusCode"] == 200
    assert out["body"] == ""
    for k, v in CORS_HEADERS.items():
        assert out["headers"][k] == v
    assert lambda_function._handler is None


def test_post_with_invalid_settings_is_error_with_cors(monkeypatch, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("on_goal_lookup_failure: ignore\n", encoding="utf-8")
    monkeypatch.setattr(lambda_function, "_handler", None)
    monkeypatch.setenv("COMPANION_CONFIG", str(bad))

    out = lambda_function.lambda_handler({"httpMethod": "POST", "body": '{"message":"hi"}'}, None)

    assert out["statusCode"] == 500
    assert "on_goal_lookup_failure" in json.loads(out["body"])["error"]
    assert out["headers"]["Access-Control-Allow-Origin"] == "*"
