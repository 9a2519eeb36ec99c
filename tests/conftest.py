from typing import Any, Dict, List, Optional

import pytest

from appium_lib_ext.webdriver_client import STATUS_FAILED, STATUS_OK, DeviceDriver, DriverResult

ANDROID_SOURCE = """<?xml version="1.0" encoding="UTF-8"?>
<hierarchy rotation="0">
  <android.widget.FrameLayout class="android.widget.FrameLayout" bounds="[0,0][1080,1920]" displayed="true">
    <android.widget.EditText class="android.widget.EditText" text="" hint="Login here"
        resource-id="com.app:id/user" clickable="true" displayed="true" bounds="[0,0][100,100]" />
    <android.widget.Button class="android.widget.Button" text="Login"
        resource-id="com.app:id/login_button" clickable="true" displayed="true" bounds="[0,100][100,200]" />
    <android.widget.TextView class="android.widget.TextView" text="Welcome" content-desc="welcome banner"
        displayed="true" bounds="[0,200][100,300]" />
    <android.widget.Button class="android.widget.Button" text="Hidden" displayed="false"
        bounds="[0,0][0,0]" />
  </android.widget.FrameLayout>
</hierarchy>
"""


class FakeDriver(DeviceDriver):
    """In-memory stand-in for a live Appium session."""

    def __init__(self, page_source: str = ANDROID_SOURCE, session_ok: bool = True,
                 installed: bool = True):
        self.source = page_source
        self.session_ok = session_ok
        self.installed = installed
        self.calls: List[tuple] = []
        self.ended = False

    def _ok(self, value: Any = None) -> DriverResult:
        return DriverResult(STATUS_OK, value=value)

    def start_session(self, capabilities: Dict[str, Any]) -> DriverResult:
        self.calls.append(("start_session", capabilities))
        if not self.session_ok:
            return DriverResult(STATUS_FAILED, error="session not created")
        return self._ok({"sessionId": "fake"})

    def end_session(self) -> DriverResult:
        self.ended = True
        return self._ok()

    def page_source(self) -> DriverResult:
        return self._ok(self.source)

    def find(self, using: str, value: str) -> DriverResult:
        self.calls.append(("find", using, value))
        return self._ok("element-1")

    def click(self, element_id: str) -> DriverResult:
        self.calls.append(("click", element_id))
        return self._ok()

    def set_value(self, element_id: str, text: str) -> DriverResult:
        self.calls.append(("set_value", element_id, text))
        return self._ok()

    def get_attribute(self, element_id: str, name: str) -> DriverResult:
        return self._ok(None)

    def is_displayed(self, element_id: str) -> DriverResult:
        return self._ok(True)

    def is_app_installed(self, app_id: str) -> DriverResult:
        self.calls.append(("is_app_installed", app_id))
        return self._ok(self.installed)

    def install_app(self, app_path: str) -> DriverResult:
        self.calls.append(("install_app", app_path))
        return self._ok()

    def activate_app(self, app_id: str) -> DriverResult:
        self.calls.append(("activate_app", app_id))
        return self._ok()

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def android_source() -> str:
    return ANDROID_SOURCE


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def make_driver():
    def _make(page_source: Optional[str] = None, **kwargs) -> FakeDriver:
        return FakeDriver(page_source=page_source or ANDROID_SOURCE, **kwargs)

    return _make
