"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Device Capability Interface Over Appium (W3C WebDriver HTTP)

Every call returns a DriverResult so callers can tell "the server does not
support this" apart from "the call failed".
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"
LEGACY_ELEMENT_KEY = "ELEMENT"

STATUS_OK = "ok"
STATUS_UNSUPPORTED = "unsupported"
STATUS_FAILED = "failed"

_UNSUPPORTED_ERRORS = ("unknown command", "unknown method", "unsupported operation", "not implemented")


@dataclass
class DriverResult:
    status: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def unsupported(self) -> bool:
        return self.status == STATUS_UNSUPPORTED


class DeviceDriver(ABC):
    """Capabilities the capture session needs from a live automation session."""

    @abstractmethod
    def start_session(self, capabilities: Dict[str, Any]) -> DriverResult: ...

    @abstractmethod
    def end_session(self) -> DriverResult: ...

    @abstractmethod
    def page_source(self) -> DriverResult: ...

    @abstractmethod
    def find(self, using: str, value: str) -> DriverResult: ...

    @abstractmethod
    def click(self, element_id: str) -> DriverResult: ...

    @abstractmethod
    def set_value(self, element_id: str, text: str) -> DriverResult: ...

    @abstractmethod
    def get_attribute(self, element_id: str, name: str) -> DriverResult: ...

    @abstractmethod
    def is_displayed(self, element_id: str) -> DriverResult: ...

    @abstractmethod
    def is_app_installed(self, app_id: str) -> DriverResult: ...

    @abstractmethod
    def install_app(self, app_path: str) -> DriverResult: ...

    @abstractmethod
    def activate_app(self, app_id: str) -> DriverResult: ...


class AppiumDriver(DeviceDriver):
    def __init__(self, base_url: str, platform: str = "android", timeout_s: float = 30,
                 http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.platform = platform
        self.timeout_s = timeout_s
        self.http = http or requests.Session()
        self.session_id: Optional[str] = None

    # ---------- transport ----------
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _session_path(self, path: str) -> str:
        if not self.session_id:
            raise RuntimeError("No active Appium session; call start_session() first")
        return f"/session/{self.session_id}{path}"

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> DriverResult:
        try:
            resp = self.http.request(method, self._url(path), json=payload, timeout=self.timeout_s)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            return DriverResult(STATUS_FAILED, error=str(e))

        try:
            body = resp.json()
        except ValueError:
            body = {}
        value = body.get("value") if isinstance(body, dict) else None

        if resp.status_code < 400:
            return DriverResult(STATUS_OK, value=value)

        error = ""
        message = ""
        if isinstance(value, dict):
            error = str(value.get("error") or "")
            message = str(value.get("message") or "")
        detail = f"{error}: {message}".strip(": ") or f"HTTP {resp.status_code}"
        if resp.status_code in (405, 501) or error.lower() in _UNSUPPORTED_ERRORS:
            logger.info(f"{method} {path} unsupported by server: {detail}")
            return DriverResult(STATUS_UNSUPPORTED, error=detail)
        logger.warning(f"{method} {path} -> HTTP {resp.status_code}: {detail}")
        return DriverResult(STATUS_FAILED, error=detail)

    # ---------- server ----------
    def status(self) -> DriverResult:
        return self._request("GET", "/status")

    # ---------- session lifecycle ----------
    def start_session(self, capabilities: Dict[str, Any]) -> DriverResult:
        result = self._request("POST", "/session", capabilities)
        if result.ok:
            value = result.value or {}
            self.session_id = value.get("sessionId") if isinstance(value, dict) else None
            if not self.session_id:
                return DriverResult(STATUS_FAILED, error="Server response did not carry a sessionId")
            logger.info(f"Appium session started: {self.session_id}")
        return result

    def end_session(self) -> DriverResult:
        if not self.session_id:
            return DriverResult(STATUS_OK)
        result = self._request("DELETE", f"/session/{self.session_id}")
        logger.info(f"Appium session {self.session_id} released ({result.status})")
        self.session_id = None
        return result

    # ---------- UI ----------
    def page_source(self) -> DriverResult:
        return self._request("GET", self._session_path("/source"))

    def find(self, using: str, value: str) -> DriverResult:
        result = self._request("POST", self._session_path("/element"), {"using": using, "value": value})
        if not result.ok:
            return result
        ref = result.value if isinstance(result.value, dict) else {}
        element_id = ref.get(W3C_ELEMENT_KEY) or ref.get(LEGACY_ELEMENT_KEY)
        if not element_id:
            return DriverResult(STATUS_FAILED, error=f"No element reference returned for {using}={value}")
        return DriverResult(STATUS_OK, value=element_id)

    def click(self, element_id: str) -> DriverResult:
        return self._request("POST", self._session_path(f"/element/{element_id}/click"), {})

    def set_value(self, element_id: str, text: str) -> DriverResult:
        cleared = self._request("POST", self._session_path(f"/element/{element_id}/clear"), {})
        if not cleared.ok and not cleared.unsupported:
            return cleared
        return self._request("POST", self._session_path(f"/element/{element_id}/value"), {"text": text})

    def get_attribute(self, element_id: str, name: str) -> DriverResult:
        return self._request("GET", self._session_path(f"/element/{element_id}/attribute/{name}"))

    def is_displayed(self, element_id: str) -> DriverResult:
        return self._request("GET", self._session_path(f"/element/{element_id}/displayed"))

    # ---------- app management ----------
    def _app_id_payload(self, app_id: str) -> Dict[str, str]:
        return {"bundleId": app_id} if self.platform == "ios" else {"appId": app_id}

    def is_app_installed(self, app_id: str) -> DriverResult:
        return self._request("POST", self._session_path("/appium/device/app_installed"), self._app_id_payload(app_id))

    def install_app(self, app_path: str) -> DriverResult:
        return self._request("POST", self._session_path("/appium/device/install_app"), {"appPath": app_path})

    def activate_app(self, app_id: str) -> DriverResult:
        return self._request("POST", self._session_path("/appium/device/activate_app"), self._app_id_payload(app_id))
