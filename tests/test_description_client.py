from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Mapping, Sequence

import pytest

from describe.client import (
    EMPTY_DESCRIPTION,
    DescriptionClient,
    DescriptionConfig,
    DescriptionConfigError,
    DescriptionHttpError,
    description_config_from_cfg,
    strip_data_url,
)


class _FakeResp:
    def __init__(self, status_code: int = 200, json_data: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._json_data = json_data
        self.text = text

    def json(self) -> Any:
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class _FakeSession:
    def __init__(self, post_responses: Sequence[Any]) -> None:
        self._post_responses = list(post_responses)
        self.post_calls: list[tuple[str, Mapping[str, Any], Mapping[str, str], float]] = []

    def post(self, url: str, json: Mapping[str, Any], headers: Mapping[str, str], timeout: float):
        self.post_calls.append((url, json, headers, timeout))
        if not self._post_responses:
            raise AssertionError("no more fake POST responses configured")
        resp = self._post_responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def _ok(text: str) -> _FakeResp:
    return _FakeResp(
        status_code=200,
        json_data={"candidates": [{"content": {"parts": [{"text": text}]}}]},
    )


def _client(session: _FakeSession, **kw: Any) -> DescriptionClient:
    cfg = DescriptionConfig(api_key="test-key", base_url="https://api.example/v1beta/", **kw)
    return DescriptionClient(cfg=cfg, session=session)


def test_describe_builds_payload_and_returns_trimmed_text():
    session = _FakeSession([_ok("  A person walks past the gate.\n")])
    client = _client(session, model="gemini-test", timeout_s=3.0)

    out = client.describe("data:image/jpeg;base64,QUJD")

    assert out == "A person walks past the gate."
    url, body, headers, timeout = session.post_calls[0]
    assert url == "https://api.example/v1beta/models/gemini-test:generateContent"
    assert headers == {"x-goog-api-key": "test-key"}
    assert timeout == 3.0
    parts = body["contents"][0]["parts"]
    assert parts[0] == {"inline_data": {"mime_type": "image/jpeg", "data": "QUJD"}}
    assert "security" in parts[1]["text"]


def test_empty_text_maps_to_default():
    session = _FakeSession([_FakeResp(status_code=200, json_data={"candidates": []})])
    assert _client(session).describe("QUJD") == EMPTY_DESCRIPTION


def test_non_2xx_raises_http_error():
    session = _FakeSession([_FakeResp(status_code=429, json_data={}, text="quota")])
    with pytest.raises(DescriptionHttpError, match="429"):
        _client(session).describe("QUJD")


def test_invalid_json_raises_http_error():
    session = _FakeSession([_FakeResp(status_code=200, json_data=ValueError("bad json"))])
    with pytest.raises(DescriptionHttpError, match="invalid JSON"):
        _client(session).describe("QUJD")


def test_transport_error_is_wrapped():
    session = _FakeSession([ConnectionError("network down")])
    with pytest.raises(DescriptionHttpError) as excinfo:
        _client(session).describe("QUJD")
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_missing_api_key(no_api_key):
    session = _FakeSession([])
    client = DescriptionClient(DescriptionConfig(), session=session)
    with pytest.raises(DescriptionConfigError):
        client.describe("QUJD")
    assert session.post_calls == []


def test_api_key_from_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    session = _FakeSession([_ok("ok")])
    DescriptionClient(DescriptionConfig(), session=session).describe("QUJD")
    assert session.post_calls[0][2] == {"x-goog-api-key": "env-key"}


def test_empty_snapshot_rejected():
    with pytest.raises(DescriptionConfigError):
        _client(_FakeSession([])).describe("data:image/jpeg;base64,")


def test_strip_data_url():
    assert strip_data_url("data:image/jpeg;base64,QUJD") == "QUJD"
    assert strip_data_url("QUJD") == "QUJD"


def test_config_from_module():
    mod = SimpleNamespace(DESCRIPTION_MODEL="m", DESCRIPTION_TIMEOUT_S="2.5")
    cfg = description_config_from_cfg(mod)
    assert cfg.model == "m"
    assert cfg.timeout_s == 2.5
    assert cfg.base_url == DescriptionConfig().base_url
