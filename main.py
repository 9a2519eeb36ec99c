# main.py
"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Main Script (Wiring)
                                                        Test case document -> actions -> optional device capture
                                                        -> spec / page object / locator files

"""
import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import dotenv

from appium_lib_ext.config import AppConfig
from appium_lib_ext.runner import DeviceCaptureSession, captured_locators, pending_keys
from appium_lib_ext.webdriver_client import DeviceDriver
from constant.const_config import ENV_FILE, LOG_FILE, LOG_FOLDER, SUPPORTED_PLATFORMS
from libs.artifacts.actions_exporter import actions_to_jsonl, append_actions_block
from libs.artifacts.locator_repository import (
    LocatorMap, LocatorRepository, clean_locator_map, merge_entries, platform_entries, read_locator_file,
)
from libs.artifacts.naming import artifact_names_for
from libs.artifacts.safe_path import resolve_safe_path
from libs.artifacts.scaffold_templates import scaffold_artifact_set
from libs.dataclass.conceptual_objects import Action, ArtifactNames, GenerationArtifactSet, TestCaseDocument
from libs.dataclass.errors import ContractViolation, FatalPrecondition, MissingCredential
from libs.parsing.action_synthesizer import synthesize_actions
from libs.parsing.document_parser import parse_test_case_document
from llm_service.abstract_llm_client import AbstractLLMClient
from llm_service.oracle import ArtifactGenerationOracle, collect_style_exemplars

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_FATAL_PRECONDITION = 2
EXIT_CONTRACT_VIOLATION = 3

logger = logging.getLogger(__name__)


# region Logging Initiation
def configure_logging(verbose: bool = False):
    root = logging.getLogger()
    os.makedirs(LOG_FOLDER, exist_ok=True)

    root.setLevel(logging.INFO)
    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s "
        "[%(name)s %(filename)s:%(lineno)d %(funcName)s] %(message)s"
    )
    if not any(isinstance(h, logging.FileHandler) for h in root.handlers):
        fh = logging.FileHandler(LOG_FILE, mode="w", encoding="utf-8")
        fh.setFormatter(fmt)
        root.addHandler(fh)
    if verbose and not any(type(h) is logging.StreamHandler for h in root.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        root.addHandler(sh)
    root.info("Logging Started For Mobile Test Scaffolding From Test Case Document - ")


# endregion


@dataclass
class PipelineOutcome:
    document: TestCaseDocument
    actions: List[Action]
    names: ArtifactNames
    written: Dict[str, Path] = field(default_factory=dict)
    captured: LocatorMap = field(default_factory=dict)
    pending: List[str] = field(default_factory=list)
    run_dir: Optional[Path] = None


# region Input

def read_test_case_input(raw_input: str) -> Tuple[str, Optional[Path]]:
    """A path to a test case file, or a literal title used as a one-line document."""
    path = Path(raw_input)
    if path.is_file():
        return path.read_text(encoding="utf-8"), path
    if path.suffix.lower() in (".txt", ".md"):
        raise FatalPrecondition(f"Test case file not found: {raw_input}",
                                remedy="Check the path, or pass the test case title in quotes.")
    return f"TestCaseTitle: {raw_input.strip()}", None


def resolve_actions(document: TestCaseDocument) -> List[Action]:
    if document.has_explicit_actions:
        return list(document.actions)
    actions = synthesize_actions(document.steps)
    if not actions:
        logger.warning(f"No actions could be derived for '{document.title}'")
    return actions


def locator_keys_for(actions: List[Action]) -> List[str]:
    keys: List[str] = []
    for a in actions:
        if a.verb != "keypress" and a.target not in keys:
            keys.append(a.target)
    return keys


def known_selectors(repo: LocatorRepository, keys: List[str], captured: LocatorMap) -> LocatorMap:
    known = {k: repo.platforms_for(k) for k in keys if k in repo}
    return merge_entries(known, captured)


# endregion


# region Output

def write_artifacts(artifacts: GenerationArtifactSet, cfg: AppConfig, names: ArtifactNames,
                    repo: LocatorRepository, captured: LocatorMap) -> Dict[str, Path]:
    """
    Write spec and page object under their roots, then persist the locator
    file through the repository merge; captured selectors win over suggested ones.
    Only the run's platform is taken from the suggestions, and keys defined in
    another locator file stay there.
    """
    suggested = clean_locator_map(json.loads(artifacts.locators.content), source="generated locators")
    locator_path = resolve_safe_path(cfg.output.locator_dir(), artifacts.locators.path, names.locators_basename)
    if locator_path.exists():
        # fail before any write when the locator file cannot be merged
        read_locator_file(locator_path, strict=True)

    written: Dict[str, Path] = {}
    spec_path = resolve_safe_path(cfg.output.spec_dir(), artifacts.spec.path, names.spec_basename)
    spec_path.parent.mkdir(parents=True, exist_ok=True)
    spec_path.write_text(artifacts.spec.content, encoding="utf-8")
    written["spec"] = spec_path

    page_path = resolve_safe_path(cfg.output.page_dir(), artifacts.page.path, names.page_basename)
    page_path.parent.mkdir(parents=True, exist_ok=True)
    page_path.write_text(artifacts.page.content, encoding="utf-8")
    written["page"] = page_path

    fresh = merge_entries(platform_entries(suggested, cfg.platform), captured)
    foreign = repo.owned_elsewhere(locator_path)
    if foreign & set(fresh):
        logger.info(f"Left in their own locator files: {sorted(foreign & set(fresh))}")
    repo.persist(locator_path, platform_entries(fresh, cfg.platform, exclude=foreign))
    written["locators"] = locator_path

    for kind, path in written.items():
        logger.info(f"Wrote {kind}: {path}")
    return written


# endregion


# region wiring

def run_pipeline(args: argparse.Namespace, cfg: AppConfig, driver: Optional[DeviceDriver] = None,
                 llm_client: Optional[AbstractLLMClient] = None,
                 device_runner: Optional[Callable[[List[str]], str]] = None,
                 log_root: Optional[Path] = None) -> PipelineOutcome:
    # region Document -> Actions
    text, source = read_test_case_input(args.input)
    document = parse_test_case_document(text, str(source) if source else None)
    actions = resolve_actions(document)
    msg = f"Test case '{document.title}': {len(actions)} action(s) " \
          f"({'explicit' if document.has_explicit_actions else 'synthesized'})"
    logger.info(msg)
    print(msg)
    if args.append_actions and source is not None and not document.has_explicit_actions:
        append_actions_block(source, actions)
    # endregion

    # fail on a missing credential before any remote call
    if not args.offline and llm_client is None and not cfg.generation.apiKey:
        raise MissingCredential()

    names = artifact_names_for(document.title)
    repo = LocatorRepository.load(cfg.output.locator_dir())
    locator_keys = locator_keys_for(actions)

    time_stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(log_root or LOG_FOLDER) / f"run_{time_stamp}"
    run_dir.mkdir(parents=True, exist_ok=True)
    outcome = PipelineOutcome(document=document, actions=actions, names=names, run_dir=run_dir)

    # region Device Capture
    if args.capture:
        session = DeviceCaptureSession(cfg, driver=driver, run_dir=run_dir, device_runner=device_runner)
        try:
            session.run(actions)
        finally:
            session.save_outputs(actions)
        outcome.captured = captured_locators(session.results, cfg.platform)
        outcome.pending = pending_keys(session.results)
        if outcome.captured:
            target = resolve_safe_path(cfg.output.locator_dir(), names.locators_basename, names.locators_basename)
            repo.persist_by_owner(target, outcome.captured)
        print(f"Captured {len(outcome.captured)} of {len(locator_keys)} locator key(s) on {cfg.platform}")
        if outcome.pending:
            msg = f"Pending locator key(s) without a {cfg.platform} selector: {', '.join(outcome.pending)}"
            logger.warning(msg)
            print(msg)
    else:
        actions_to_jsonl(actions, run_dir / "plan.actions.jsonl")
    # endregion

    # region Generation
    known = known_selectors(repo, locator_keys, outcome.captured)
    if args.offline:
        artifacts = scaffold_artifact_set(names, actions, locator_keys, known)
    else:
        exemplars = collect_style_exemplars(cfg.output.spec_dir(), cfg.output.page_dir(),
                                            exclude=[names.spec_basename, names.page_basename],
                                            limit=cfg.generation.maxExemplars,
                                            max_chars=cfg.generation.maxExemplarChars)
        oracle = ArtifactGenerationOracle(cfg.generation, llm_client=llm_client)
        try:
            artifacts = oracle.generate(document, actions, names, locator_keys, cfg.platform,
                                        exemplars=exemplars, captured=known)
        except ContractViolation:
            if oracle.last_raw_response is not None:
                (run_dir / "generation_response.txt").write_text(oracle.last_raw_response, encoding="utf-8")
            raise
    # endregion

    outcome.written = write_artifacts(artifacts, cfg, names, repo, outcome.captured)

    print(f"\nSaved outputs for '{document.title}':")
    for kind in ("spec", "page", "locators"):
        print(f" - {kind}: {outcome.written[kind]}")
    print(f"Run details: {run_dir.resolve()}")
    return outcome


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mobile-test-recorder",
        description="Generate WebdriverIO/Appium spec, page object and locator files from a manual test case.")
    parser.add_argument("input", help="Path to a test case file, or the test case title in quotes")
    parser.add_argument("--platform", choices=SUPPORTED_PLATFORMS, help="Target platform (default: $PLATFORM or android)")
    parser.add_argument("--capture", action="store_true", help="Resolve locators on a live device through Appium")
    parser.add_argument("--offline", action="store_true", help="Scaffold from templates without the generation service")
    parser.add_argument("--append-actions", action="store_true",
                        help="Append synthesized actions to the test case file as an Actions: block")
    parser.add_argument("--app-path", help="Local .apk/.app/.ipa installed when the app is missing")
    parser.add_argument("--output-root", default=".", help="Project root the artifacts are written under")
    parser.add_argument("--verbose", action="store_true", help="Echo log records and per-action progress")
    return parser


def load_config(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    env = dict(os.environ if environ is None else environ)
    if args.platform:
        env["PLATFORM"] = args.platform
    cfg = AppConfig.from_env(env)
    if args.app_path:
        cfg.device.appPath = args.app_path
    cfg.output.outputRoot = args.output_root
    if args.verbose:
        cfg.logging.verbosity = "verbose"
    return cfg


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    dotenv.load_dotenv(dotenv_path=ENV_FILE)
    configure_logging(args.verbose)

    try:
        cfg = load_config(args)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FATAL_PRECONDITION

    try:
        run_pipeline(args, cfg)
    except FatalPrecondition as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FATAL_PRECONDITION
    except ContractViolation as e:
        logger.error(str(e))
        print(f"ERROR: generation response rejected: {e}", file=sys.stderr)
        return EXIT_CONTRACT_VIOLATION
    except Exception as e:
        logger.exception("Unexpected failure")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_UNEXPECTED
    return EXIT_OK


# endregion


if __name__ == "__main__":
    sys.exit(main())
