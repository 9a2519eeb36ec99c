import json
from pathlib import Path

import pytest

import main as pipeline
from libs.artifacts.locator_repository import LocatorRepository
from libs.dataclass.errors import ContractViolation, FatalPrecondition, LocatorFileUnreadable, MissingCredential
from llm_service.abstract_llm_client import AbstractLLMClient

TEST_CASE = (
    "TestCaseTitle: Validate Login\n"
    "Priority: High\n"
    "Steps:\n"
    "1. Tap on Login button\n"
    "2. Verify that the Welcome banner is displayed\n"
)


class CannedLLMClient(AbstractLLMClient):
    def __init__(self, response: str):
        super().__init__({"model": "fake-model"})
        self.response = response

    def execute_chat_completion_api(self, message, response_format=None, temperature=0.2, max_tokens=16000,
                                    max_attempts: int = 2, retry_delay_s: float = 1.0):
        return self.response


def _setup(tmp_path: Path, *extra: str):
    case = tmp_path / "validate_login.txt"
    case.write_text(TEST_CASE, encoding="utf-8")
    project = tmp_path / "project"
    args = pipeline.build_arg_parser().parse_args([str(case), "--output-root", str(project), *extra])
    cfg = pipeline.load_config(args, environ={})
    return case, project, args, cfg


def test_offline_run_writes_all_three_artifacts(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path, "--offline")
    outcome = pipeline.run_pipeline(args, cfg, log_root=tmp_path / "logs")

    spec = project / "test" / "specs" / "validate-login.spec.ts"
    page = project / "src" / "pages" / "validate-login.page.ts"
    locators = project / "src" / "object-repository" / "validate-login.json"
    assert outcome.written == {"spec": spec.resolve(), "page": page.resolve(), "locators": locators.resolve()}
    assert "ValidateLoginPage" in page.read_text(encoding="utf-8")
    assert json.loads(locators.read_text(encoding="utf-8")) == {}
    assert [a.render() for a in outcome.actions] == ["click(loginButton)", "isVisible(welcomeBanner)"]
    assert (outcome.run_dir / "plan.actions.jsonl").exists()


def test_offline_run_keeps_known_selectors(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path, "--offline")
    repo_file = project / "src" / "object-repository" / "validate-login.json"
    repo_file.parent.mkdir(parents=True)
    repo_file.write_text(json.dumps({"loginButton": {"ios": "~login"}}), encoding="utf-8")

    pipeline.run_pipeline(args, cfg, log_root=tmp_path / "logs")

    assert json.loads(repo_file.read_text(encoding="utf-8")) == {"loginButton": {"ios": "~login"}}


def test_append_actions_writes_block_back(tmp_path: Path) -> None:
    case, _, args, cfg = _setup(tmp_path, "--offline", "--append-actions")
    pipeline.run_pipeline(args, cfg, log_root=tmp_path / "logs")
    text = case.read_text(encoding="utf-8")
    assert "Actions:\nclick(loginButton)\nisVisible(welcomeBanner)" in text


def test_capture_run_persists_captured_selectors(tmp_path: Path, fake_driver) -> None:
    _, project, args, cfg = _setup(tmp_path, "--offline", "--capture")
    cfg.capture.skipDeviceProbe = True
    cfg.capture.actionPauseMs = 0

    outcome = pipeline.run_pipeline(args, cfg, driver=fake_driver, log_root=tmp_path / "logs")

    login = "//android.widget.Button[@resource-id='com.app:id/login_button']"
    banner = "//android.widget.TextView[@content-desc='welcome banner']"
    assert outcome.pending == []
    assert outcome.captured == {"loginButton": {"android": login}, "welcomeBanner": {"android": banner}}
    stored = json.loads((project / "src" / "object-repository" / "validate-login.json").read_text(encoding="utf-8"))
    assert stored == {"loginButton": {"android": login}, "welcomeBanner": {"android": banner}}
    assert (outcome.run_dir / "capture.json").exists()


def test_generation_service_response_is_written(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path)
    response = "```json\n" + json.dumps({
        "specPath": "validate-login.spec.ts",
        "specContent": "// spec",
        "pagePath": "../../outside.page.ts",
        "pageContent": "// page",
        "locatorsPath": "validate-login.json",
        "locatorsContent": json.dumps({"loginButton": {"android": "~login", "web": "#login"}}),
    }) + "\n```"

    outcome = pipeline.run_pipeline(args, cfg, llm_client=CannedLLMClient(response), log_root=tmp_path / "logs")

    assert outcome.written["page"] == (project / "src" / "pages" / "validate-login.page.ts").resolve()
    assert outcome.written["page"].read_text(encoding="utf-8") == "// page"
    assert json.loads(outcome.written["locators"].read_text(encoding="utf-8")) == {"loginButton": {"android": "~login"}}


def test_contract_violation_keeps_raw_response(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path)
    with pytest.raises(ContractViolation):
        pipeline.run_pipeline(args, cfg, llm_client=CannedLLMClient("I cannot do that."),
                              log_root=tmp_path / "logs")
    saved = list((tmp_path / "logs").glob("run_*/generation_response.txt"))
    assert len(saved) == 1
    assert saved[0].read_text(encoding="utf-8") == "I cannot do that."
    assert not (project / "test" / "specs").exists()


def test_missing_credential_before_anything_is_written(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path)
    with pytest.raises(MissingCredential):
        pipeline.run_pipeline(args, cfg, log_root=tmp_path / "logs")
    assert not (tmp_path / "logs").exists()


def test_literal_title_input(tmp_path: Path) -> None:
    text, source = pipeline.read_test_case_input("Validate Login")
    assert text == "TestCaseTitle: Validate Login"
    assert source is None
    with pytest.raises(FatalPrecondition):
        pipeline.read_test_case_input(str(tmp_path / "absent.txt"))


def test_main_exit_codes(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(pipeline, "configure_logging", lambda verbose=False: None)
    monkeypatch.setattr(pipeline.dotenv, "load_dotenv", lambda **kwargs: False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("AZURE_OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("PLATFORM", raising=False)

    no_title = tmp_path / "no_title.txt"
    no_title.write_text("Steps:\nTap Login button\n", encoding="utf-8")
    assert pipeline.main([str(no_title)]) == pipeline.EXIT_FATAL_PRECONDITION

    case = tmp_path / "case.txt"
    case.write_text(TEST_CASE, encoding="utf-8")
    assert pipeline.main([str(case)]) == pipeline.EXIT_FATAL_PRECONDITION

    monkeypatch.setenv("PLATFORM", "web")
    assert pipeline.main([str(case)]) == pipeline.EXIT_FATAL_PRECONDITION


def _response(locators: dict) -> str:
    return json.dumps({
        "specPath": "validate-login.spec.ts",
        "specContent": "// spec",
        "pagePath": "validate-login.page.ts",
        "pageContent": "// page",
        "locatorsPath": "validate-login.json",
        "locatorsContent": json.dumps(locators),
    })


def test_generated_locators_only_touch_the_run_platform(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path)
    repo_file = project / "src" / "object-repository" / "validate-login.json"
    repo_file.parent.mkdir(parents=True)
    repo_file.write_text(json.dumps({"loginButton": {"android": "A", "ios": "I"}}), encoding="utf-8")

    response = _response({"loginButton": {"android": "A2", "ios": "//GUESSED"},
                          "welcomeBanner": {"ios": "//ALSO_GUESSED"}})
    pipeline.run_pipeline(args, cfg, llm_client=CannedLLMClient(response), log_root=tmp_path / "logs")

    assert json.loads(repo_file.read_text(encoding="utf-8")) == {"loginButton": {"android": "A2", "ios": "I"}}


def test_keys_from_other_locator_files_are_not_copied(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path, "--offline")
    locator_dir = project / "src" / "object-repository"
    locator_dir.mkdir(parents=True)
    common = locator_dir / "common.json"
    common.write_text(json.dumps({"loginButton": {"android": "OLD"}}), encoding="utf-8")

    pipeline.run_pipeline(args, cfg, log_root=tmp_path / "logs")

    assert json.loads((locator_dir / "validate-login.json").read_text(encoding="utf-8")) == {}
    common.write_text(json.dumps({"loginButton": {"android": "FIXED"}}), encoding="utf-8")
    assert LocatorRepository.load(locator_dir).selector_for("loginButton", "android") == "FIXED"


def test_captured_selector_for_shared_key_goes_to_its_file(tmp_path: Path, fake_driver) -> None:
    _, project, args, cfg = _setup(tmp_path, "--offline", "--capture")
    cfg.capture.skipDeviceProbe = True
    cfg.capture.actionPauseMs = 0
    locator_dir = project / "src" / "object-repository"
    locator_dir.mkdir(parents=True)
    common = locator_dir / "common.json"
    common.write_text(json.dumps({"loginButton": {"android": "OLD", "ios": "I"}}), encoding="utf-8")

    pipeline.run_pipeline(args, cfg, driver=fake_driver, log_root=tmp_path / "logs")

    login = "//android.widget.Button[@resource-id='com.app:id/login_button']"
    banner = "//android.widget.TextView[@content-desc='welcome banner']"
    assert json.loads(common.read_text(encoding="utf-8")) == {"loginButton": {"android": login, "ios": "I"}}
    assert json.loads((locator_dir / "validate-login.json").read_text(encoding="utf-8")) == {
        "welcomeBanner": {"android": banner}}


def test_corrupt_locator_file_is_left_untouched(tmp_path: Path) -> None:
    _, project, args, cfg = _setup(tmp_path, "--offline")
    repo_file = project / "src" / "object-repository" / "validate-login.json"
    repo_file.parent.mkdir(parents=True)
    repo_file.write_text('{"a": {"android": "A"},', encoding="utf-8")

    with pytest.raises(LocatorFileUnreadable):
        pipeline.run_pipeline(args, cfg, log_root=tmp_path / "logs")
    assert repo_file.read_text(encoding="utf-8") == '{"a": {"android": "A"},'
    assert not (project / "test" / "specs").exists()
