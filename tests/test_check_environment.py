import pytest

import check_environment
from appium_lib_ext.config import AppConfig
from libs.dataclass.errors import EndpointUnreachable


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(check_environment.dotenv, "load_dotenv", lambda **kwargs: False)
    for name in ("PLATFORM", "OPENAI_API_KEY", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)


def test_all_checks_skipped() -> None:
    assert check_environment.main(["--skip-llm", "--skip-appium"]) == 0


def test_missing_credential_fails_generation_check() -> None:
    assert check_environment.check_generation_service(AppConfig.from_env({})) is False


def test_unreachable_server_is_reported(monkeypatch) -> None:
    def unreachable(driver):
        raise EndpointUnreachable(driver.base_url, "connection refused")

    monkeypatch.setattr(check_environment, "ensure_endpoint_reachable", unreachable)
    monkeypatch.setenv("SKIP_DEVICE_PROBE", "1")
    assert check_environment.main(["--skip-llm"]) == 2


def test_device_probe_skip_and_invalid_platform() -> None:
    assert check_environment.check_device(AppConfig.from_env({"SKIP_DEVICE_PROBE": "true"})) is True
    with pytest.raises(ValueError):
        AppConfig.from_env({"PLATFORM": "web"})
