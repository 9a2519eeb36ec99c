import pytest

from appium_lib_ext.config import AndroidConfig, AppConfig, IosConfig, to_capabilities
from constant.const_config import DEFAULT_APPIUM_URL, DEFAULT_MODEL, DEFAULT_WAIT_TIMEOUT_MS


def test_from_env_defaults_to_android() -> None:
    cfg = AppConfig.from_env({})
    assert isinstance(cfg.device, AndroidConfig)
    assert cfg.platform == "android"
    assert cfg.capture.appiumUrl == DEFAULT_APPIUM_URL
    assert cfg.capture.waitTimeoutMs == DEFAULT_WAIT_TIMEOUT_MS
    assert not cfg.capture.skipDeviceProbe
    assert cfg.generation.apiKey is None
    assert cfg.generation.model == DEFAULT_MODEL


def test_from_env_reads_ios_variant_and_overrides() -> None:
    cfg = AppConfig.from_env({
        "PLATFORM": "iOS",
        "BUNDLE_ID": "com.demo.app",
        "DEVICE_NAME": "iPhone 15",
        "APPIUM_URL": "http://grid:4444/",
        "SKIP_DEVICE_PROBE": "true",
        "WAIT_TIMEOUT_MS": "5000",
        "AZURE_OPENAI_API_KEY": "k",
        "AZURE_OPENAI_ENDPOINT": "https://example.openai.azure.com",
    })
    assert isinstance(cfg.device, IosConfig)
    assert cfg.device.app_id == "com.demo.app"
    assert cfg.device.deviceName == "iPhone 15"
    assert cfg.capture.appiumUrl == "http://grid:4444"
    assert cfg.capture.skipDeviceProbe
    assert cfg.capture.waitTimeoutMs == 5000
    assert cfg.generation.apiKey == "k"
    assert cfg.generation.use_azure


def test_from_env_rejects_unknown_platform() -> None:
    with pytest.raises(ValueError):
        AppConfig.from_env({"PLATFORM": "web"})


def test_android_capabilities() -> None:
    device = AndroidConfig(appPackage="com.demo", appActivity=".Main", platformVersion="14")
    caps = to_capabilities(device)
    always = caps["capabilities"]["alwaysMatch"]
    assert caps["capabilities"]["firstMatch"] == [{}]
    assert always["platformName"] == "Android"
    assert always["appium:automationName"] == "UiAutomator2"
    assert always["appium:appPackage"] == "com.demo"
    assert always["appium:appActivity"] == ".Main"
    assert always["appium:platformVersion"] == "14"
    assert always["appium:autoGrantPermissions"] is True
    assert "appium:appWaitActivity" not in always


def test_ios_capabilities() -> None:
    always = to_capabilities(IosConfig(bundleId="com.demo"))["capabilities"]["alwaysMatch"]
    assert always["platformName"] == "iOS"
    assert always["appium:automationName"] == "XCUITest"
    assert always["appium:bundleId"] == "com.demo"
    assert "appium:appPackage" not in always


def test_api_key_follows_selected_provider() -> None:
    both = {"OPENAI_API_KEY": "sk-openai", "AZURE_OPENAI_API_KEY": "azure-key"}
    assert AppConfig.from_env(both).generation.apiKey == "sk-openai"

    azure = AppConfig.from_env({**both, "AZURE_OPENAI_ENDPOINT": "https://example.openai.azure.com"})
    assert azure.generation.use_azure
    assert azure.generation.apiKey == "azure-key"

    # an OpenAI key is never handed to an Azure endpoint
    only_openai = AppConfig.from_env({"OPENAI_API_KEY": "sk-openai",
                                      "AZURE_OPENAI_ENDPOINT": "https://example.openai.azure.com"})
    assert only_openai.generation.apiKey is None
