"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Data Structure For Configuration (Device, Capture, Generation)
"""
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Union

from constant.const_config import (
    DEFAULT_ACTION_PAUSE_MS, DEFAULT_APPIUM_URL, DEFAULT_MODEL, DEFAULT_PLATFORM, DEFAULT_REQUEST_TIMEOUT_S,
    DEFAULT_WAIT_TIMEOUT_MS, LOCATOR_ROOT, PAGE_ROOT, SPEC_ROOT, SUPPORTED_PLATFORMS,
)


@dataclass
class AndroidConfig:
    platform: Literal["android"] = "android"
    deviceName: str = "emulator-5554"
    platformVersion: Optional[str] = None
    automationName: str = "UiAutomator2"
    appPackage: Optional[str] = None
    appActivity: Optional[str] = None
    appWaitActivity: Optional[str] = None
    appPath: Optional[str] = None
    udid: Optional[str] = None
    noReset: bool = True
    autoGrantPermissions: bool = True

    @property
    def app_id(self) -> Optional[str]:
        return self.appPackage


@dataclass
class IosConfig:
    platform: Literal["ios"] = "ios"
    deviceName: str = "iPhone 14"
    platformVersion: Optional[str] = None
    automationName: str = "XCUITest"
    bundleId: Optional[str] = None
    appPath: Optional[str] = None
    udid: Optional[str] = None
    noReset: bool = True

    @property
    def app_id(self) -> Optional[str]:
        return self.bundleId


DeviceConfig = Union[AndroidConfig, IosConfig]


def to_capabilities(device: DeviceConfig) -> Dict[str, Any]:
    """
    Map the device variant onto the W3C capability wire schema. Only vendor
    keys with a value are emitted. The app itself is resolved after the
    session starts, so no 'appium:app' key is sent.
    """
    caps: Dict[str, Any] = {
        "platformName": "Android" if isinstance(device, AndroidConfig) else "iOS",
        "appium:automationName": device.automationName,
        "appium:deviceName": device.deviceName,
        "appium:noReset": device.noReset,
    }
    if device.platformVersion:
        caps["appium:platformVersion"] = device.platformVersion
    if device.udid:
        caps["appium:udid"] = device.udid
    if isinstance(device, AndroidConfig):
        caps["appium:autoGrantPermissions"] = device.autoGrantPermissions
        if device.appPackage:
            caps["appium:appPackage"] = device.appPackage
        if device.appActivity:
            caps["appium:appActivity"] = device.appActivity
        if device.appWaitActivity:
            caps["appium:appWaitActivity"] = device.appWaitActivity
    else:
        if device.bundleId:
            caps["appium:bundleId"] = device.bundleId
    return {"capabilities": {"alwaysMatch": caps, "firstMatch": [{}]}}


@dataclass
class CaptureConfig:
    appiumUrl: str = DEFAULT_APPIUM_URL
    requestTimeoutS: float = DEFAULT_REQUEST_TIMEOUT_S
    waitTimeoutMs: int = DEFAULT_WAIT_TIMEOUT_MS
    pollIntervalMs: int = 500
    actionPauseMs: int = DEFAULT_ACTION_PAUSE_MS
    skipDeviceProbe: bool = False
    saveHierarchySnapshots: bool = True


@dataclass
class GenerationConfig:
    apiKey: Optional[str] = None
    model: str = DEFAULT_MODEL
    azureEndpoint: Optional[str] = None
    azureApiVersion: Optional[str] = None
    temperature: float = 0.2
    maxTokens: int = 16000
    maxExemplars: int = 2
    maxExemplarChars: int = 4000

    @property
    def use_azure(self) -> bool:
        return bool(self.azureEndpoint)


@dataclass
class OutputConfig:
    outputRoot: str = "."
    specRoot: str = SPEC_ROOT
    pageRoot: str = PAGE_ROOT
    locatorRoot: str = LOCATOR_ROOT

    def spec_dir(self) -> str:
        return os.path.join(self.outputRoot, self.specRoot)

    def page_dir(self) -> str:
        return os.path.join(self.outputRoot, self.pageRoot)

    def locator_dir(self) -> str:
        return os.path.join(self.outputRoot, self.locatorRoot)


@dataclass
class LoggingConfig:
    verbosity: Literal["silent", "normal", "verbose"] = "normal"
    saveRunLog: bool = True


@dataclass
class AppConfig:
    device: DeviceConfig = field(default_factory=AndroidConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def platform(self) -> str:
        return self.device.platform

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        platform = (env.get("PLATFORM") or DEFAULT_PLATFORM).strip().lower()
        if platform not in SUPPORTED_PLATFORMS:
            raise ValueError(f"Unsupported PLATFORM '{platform}', expected one of {', '.join(SUPPORTED_PLATFORMS)}")

        device: DeviceConfig
        if platform == "ios":
            device = IosConfig(
                deviceName=env.get("DEVICE_NAME") or IosConfig.deviceName,
                platformVersion=env.get("PLATFORM_VERSION") or None,
                bundleId=env.get("BUNDLE_ID") or None,
                appPath=env.get("APP_PATH") or None,
                udid=env.get("DEVICE_UDID") or None,
            )
        else:
            device = AndroidConfig(
                deviceName=env.get("DEVICE_NAME") or AndroidConfig.deviceName,
                platformVersion=env.get("PLATFORM_VERSION") or None,
                appPackage=env.get("APP_PACKAGE") or None,
                appActivity=env.get("APP_ACTIVITY") or None,
                appWaitActivity=env.get("APP_WAIT_ACTIVITY") or None,
                appPath=env.get("APP_PATH") or None,
                udid=env.get("DEVICE_UDID") or None,
            )

        capture = CaptureConfig(
            appiumUrl=(env.get("APPIUM_URL") or DEFAULT_APPIUM_URL).rstrip("/"),
            skipDeviceProbe=_as_bool(env.get("SKIP_DEVICE_PROBE")),
        )
        if env.get("WAIT_TIMEOUT_MS"):
            capture.waitTimeoutMs = int(env["WAIT_TIMEOUT_MS"])

        azure_endpoint = env.get("AZURE_OPENAI_ENDPOINT") or None
        # the key must belong to the provider the endpoint selects
        key_var = "AZURE_OPENAI_API_KEY" if azure_endpoint else "OPENAI_API_KEY"
        generation = GenerationConfig(
            apiKey=env.get(key_var) or None,
            model=env.get("OPENAI_MODEL") or DEFAULT_MODEL,
            azureEndpoint=azure_endpoint,
            azureApiVersion=env.get("AZURE_OPENAI_API_VERSION") or None,
        )
        return cls(device=device, capture=capture, generation=generation)


def _as_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")
