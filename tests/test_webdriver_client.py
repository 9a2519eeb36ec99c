from typing import Any, List, Optional

import pytest
import requests

from appium_lib_ext.webdriver_client import W3C_ELEMENT_KEY, AppiumDriver


class FakeResponse:
    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeHttp:
    """Replays queued responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[tuple] = []

    def request(self, method: str, url: str, json: Optional[dict] = None, timeout: Optional[float] = None):
        self.requests.append((method, url, json, timeout))
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _driver(*responses, platform: str = "android") -> AppiumDriver:
    return AppiumDriver("http://127.0.0.1:4723/", platform=platform, timeout_s=5, http=FakeHttp(*responses))


def _started(*responses, platform: str = "android") -> AppiumDriver:
    driver = _driver(FakeResponse(200, {"value": {"sessionId": "s1", "capabilities": {}}}), *responses,
                     platform=platform)
    assert driver.start_session({"capabilities": {"alwaysMatch": {}}}).ok
    return driver


def test_start_session_posts_capabilities_and_keeps_session_id() -> None:
    driver = _started()
    method, url, payload, timeout = driver.http.requests[0]
    assert (method, url) == ("POST", "http://127.0.0.1:4723/session")
    assert payload == {"capabilities": {"alwaysMatch": {}}}
    assert timeout == 5
    assert driver.session_id == "s1"


def test_start_session_without_session_id_fails() -> None:
    driver = _driver(FakeResponse(200, {"value": {}}))
    result = driver.start_session({})
    assert not result.ok
    assert driver.session_id is None


def test_find_returns_w3c_element_reference() -> None:
    driver = _started(FakeResponse(200, {"value": {W3C_ELEMENT_KEY: "el-9"}}))
    result = driver.find("xpath", "//a")
    assert result.ok
    assert result.value == "el-9"
    assert driver.http.requests[-1][1] == "http://127.0.0.1:4723/session/s1/element"


def test_unknown_command_is_reported_as_unsupported() -> None:
    driver = _started(FakeResponse(404, {"value": {"error": "unknown command", "message": "nope"}}))
    result = driver.is_app_installed("com.app")
    assert result.unsupported
    assert not result.ok


def test_server_error_is_failed_with_detail() -> None:
    driver = _started(FakeResponse(404, {"value": {"error": "no such element", "message": "not found"}}))
    result = driver.find("xpath", "//missing")
    assert result.status == "failed"
    assert result.error == "no such element: not found"


def test_transport_error_is_failed() -> None:
    driver = _driver(requests.ConnectionError("refused"))
    result = driver.status()
    assert result.status == "failed"
    assert "refused" in result.error


def test_set_value_clears_then_types() -> None:
    driver = _started(FakeResponse(200, {"value": None}), FakeResponse(200, {"value": None}))
    assert driver.set_value("el-1", "bob").ok
    urls = [r[1] for r in driver.http.requests[1:]]
    assert urls == [
        "http://127.0.0.1:4723/session/s1/element/el-1/clear",
        "http://127.0.0.1:4723/session/s1/element/el-1/value",
    ]
    assert driver.http.requests[-1][2] == {"text": "bob"}


def test_app_id_payload_depends_on_platform() -> None:
    android = _started(FakeResponse(200, {"value": True}))
    android.activate_app("com.app")
    assert android.http.requests[-1][2] == {"appId": "com.app"}

    ios = _started(FakeResponse(200, {"value": True}), platform="ios")
    ios.activate_app("com.app")
    assert ios.http.requests[-1][2] == {"bundleId": "com.app"}


def test_end_session_releases_session() -> None:
    driver = _started(FakeResponse(200, {"value": None}))
    assert driver.end_session().ok
    assert driver.http.requests[-1][:2] == ("DELETE", "http://127.0.0.1:4723/session/s1")
    assert driver.session_id is None
    assert driver.end_session().ok


def test_session_calls_require_a_session() -> None:
    with pytest.raises(RuntimeError):
        _driver().page_source()
