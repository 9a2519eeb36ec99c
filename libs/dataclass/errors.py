"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Error Taxonomy For Scaffolding / Capture Pipeline
"""
from typing import Optional


class RecorderError(Exception):
    """Base class for every error raised by the recorder pipeline."""


class FatalPrecondition(RecorderError):
    """Aborts the run. Carries the remedy printed to the user."""

    def __init__(self, message: str, remedy: str = ""):
        super().__init__(message)
        self.message = message
        self.remedy = remedy

    def __str__(self) -> str:
        if self.remedy:
            return f"{self.message} (remedy: {self.remedy})"
        return self.message


class MissingTitle(FatalPrecondition):
    def __init__(self, message: str = "Unable to determine the test case title."):
        super().__init__(message, remedy="Add a 'TestCaseTitle: <title>' line at the top of the test case document.")


class MissingCredential(FatalPrecondition):
    def __init__(self, message: str = "No credential configured for the generation service."):
        super().__init__(message, remedy="Set OPENAI_API_KEY (AZURE_OPENAI_API_KEY when AZURE_OPENAI_ENDPOINT is set)"
                                         " in the environment or .env file, or run with --offline.")


class EndpointUnreachable(FatalPrecondition):
    def __init__(self, url: str, detail: str = ""):
        msg = f"Appium endpoint not reachable at {url}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg, remedy="Start the server with 'appium --port 4723' or set APPIUM_URL.")
        self.url = url


class NoDeviceOnline(FatalPrecondition):
    def __init__(self, platform: str, detail: str = ""):
        msg = f"No {platform} device or emulator is online"
        if detail:
            msg = f"{msg}: {detail}"
        if platform == "ios":
            remedy = "Boot a simulator ('xcrun simctl boot <udid>') or set SKIP_DEVICE_PROBE=true for cloud grids."
        else:
            remedy = "Start an emulator or connect a device and check 'adb devices', " \
                     "or set SKIP_DEVICE_PROBE=true for cloud grids."
        super().__init__(msg, remedy=remedy)
        self.platform = platform


class LocatorFileUnreadable(FatalPrecondition):
    def __init__(self, path: str, detail: str = ""):
        msg = f"Locator file {path} exists but cannot be read as a JSON object"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg, remedy="Repair or move the file; it is left untouched so no stored locator is lost.")
        self.path = path


class ContractViolation(RecorderError):
    """Generation service response does not satisfy the six-field contract."""

    def __init__(self, message: str, raw_excerpt: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw_excerpt = raw_excerpt

    def __str__(self) -> str:
        if self.raw_excerpt:
            return f"{self.message}\nRaw response (truncated):\n{self.raw_excerpt}"
        return self.message


class ElementNotFound(RecorderError):
    def __init__(self, target: str):
        super().__init__(f"Element not found for locator key '{target}'")
        self.target = target


class RemoteActionFailure(RecorderError):
    def __init__(self, target: str, detail: str):
        super().__init__(f"Remote action failed for '{target}': {detail}")
        self.target = target
        self.detail = detail
