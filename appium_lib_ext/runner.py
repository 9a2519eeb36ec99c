"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Device Capture Session (Appium), Action Executor

"""
import json
import logging
import os
import time
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from appium_lib_ext.config import AppConfig, to_capabilities
from appium_lib_ext.device_probe import ensure_device_online, ensure_endpoint_reachable
from appium_lib_ext.element_resolver import ElementResolver, ResolvedElement
from appium_lib_ext.webdriver_client import AppiumDriver, DeviceDriver
from libs.artifacts.actions_exporter import actions_to_jsonl
from libs.artifacts.artifacts import ArtifactManager
from libs.dataclass.conceptual_objects import Action, CaptureResult, capture_results_to_json_dict
from libs.dataclass.errors import ElementNotFound, RemoteActionFailure

logger = logging.getLogger(__name__)


class CaptureState(str, Enum):
    IDLE = "Idle"
    SESSION_STARTING = "SessionStarting"
    APP_RESOLUTION = "AppResolution"
    READY = "Ready"
    EXECUTING_ACTION = "ExecutingAction"
    COMPLETED = "Completed"
    FAILED = "Failed"


def captured_locators(results: List[CaptureResult], platform: str) -> Dict[str, Dict[str, str]]:
    """Fresh {key: {platform: selector}} map from resolved results; first capture per key wins."""
    fresh: Dict[str, Dict[str, str]] = {}
    for r in results:
        if r.selector and r.action.target not in fresh:
            fresh[r.action.target] = {platform: r.selector}
    return fresh


def pending_keys(results: List[CaptureResult]) -> List[str]:
    """Targets never resolved in this capture; these still need a selector."""
    resolved = {r.action.target for r in results if r.resolved}
    pending: List[str] = []
    for r in results:
        if r.action.verb == "keypress" or r.resolved:
            continue
        if r.action.target not in resolved and r.action.target not in pending:
            pending.append(r.action.target)
    return pending


class DeviceCaptureSession:
    def __init__(self, cfg: AppConfig, driver: Optional[DeviceDriver] = None,
                 resolver: Optional[ElementResolver] = None, run_dir: Optional[Path] = None,
                 device_runner: Optional[Callable[[List[str]], str]] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.cfg = cfg
        self.platform = cfg.platform
        self.driver: DeviceDriver = driver or AppiumDriver(
            cfg.capture.appiumUrl, platform=self.platform, timeout_s=cfg.capture.requestTimeoutS)
        self.resolver = resolver or ElementResolver(self.platform)
        self.run_dir = run_dir
        self.artifacts: Optional[ArtifactManager] = None
        if run_dir is not None and cfg.capture.saveHierarchySnapshots:
            self.artifacts = ArtifactManager(run_dir)
        self._device_runner = device_runner
        self._sleep = sleep
        self._clock = clock
        self.state = CaptureState.IDLE
        self.current_index: Optional[int] = None
        self.results: List[CaptureResult] = []
        self.run_log: Dict[str, Any] = {
            "meta": {
                "startedAt": datetime.now(timezone.utc).isoformat(timespec="seconds"),
                "platform": self.platform,
                "appiumUrl": cfg.capture.appiumUrl,
                "device": cfg.device.deviceName,
            },
            "transitions": [],
            "actions": [],
        }

    # ---------- state ----------
    def _transition(self, state: CaptureState, note: str = ""):
        logger.info(f"Capture state {self.state.value} -> {state.value}{f' ({note})' if note else ''}")
        self.state = state
        self.run_log["transitions"].append({"state": state.value, "note": note})

    # ---------- lifecycle ----------
    def check_preconditions(self):
        if isinstance(self.driver, AppiumDriver):
            ensure_endpoint_reachable(self.driver)
        if not self.cfg.capture.skipDeviceProbe:
            ensure_device_online(self.platform, runner=self._device_runner)

    def start(self):
        self.check_preconditions()
        self._transition(CaptureState.SESSION_STARTING)
        result = self.driver.start_session(to_capabilities(self.cfg.device))
        if not result.ok:
            raise RemoteActionFailure("session", result.error or "session could not be created")
        self._transition(CaptureState.APP_RESOLUTION)
        self.resolve_app()
        self._transition(CaptureState.READY)

    def resolve_app(self):
        app_id = self.cfg.device.app_id
        app_path = self.cfg.device.appPath
        if app_id:
            installed = self.driver.is_app_installed(app_id)
            if installed.ok and installed.value:
                activated = self.driver.activate_app(app_id)
                if not activated.ok:
                    logger.warning(f"Unable to foreground {app_id}: {activated.error}")
                return
        if app_path and os.path.isfile(app_path):
            installed = self.driver.install_app(os.path.abspath(app_path))
            if not installed.ok:
                raise RemoteActionFailure("installApp", installed.error or f"install of {app_path} failed")
            if app_id:
                self.driver.activate_app(app_id)
            return
        msg = f"App {app_id or '<unset>'} not installed and no local package to install; continuing on the current screen"
        logger.warning(msg)
        print(f"WARNING: {msg}")

    def close(self):
        try:
            self.driver.end_session()
        except Exception as e:
            logger.error(f"Session teardown failed: {e}")
        self.run_log["endedAt"] = datetime.now(timezone.utc).isoformat(timespec="seconds")

    def run(self, actions: List[Action]) -> List[CaptureResult]:
        """Full capture: preconditions, session, every action, teardown. Teardown runs on every path."""
        try:
            self.start()
            self.execute_actions(actions)
            self._transition(CaptureState.COMPLETED)
        except Exception as e:
            self._transition(CaptureState.FAILED, str(e))
            raise
        finally:
            self.close()
        return self.results

    # ---------- utilities ----------
    def _log_action(self, entry: Dict[str, Any]):
        if self.cfg.logging.verbosity == "verbose":
            print(f"[ACTION - {entry.get('index')}] {entry.get('action')} -> {entry.get('status')}")
        self.run_log["actions"].append(entry)

    def _save_json(self, obj: Any, path: Path):
        path.write_text(json.dumps(obj, indent=2, ensure_ascii=False), encoding="utf-8")

    def _pause(self, ms: int):
        if ms > 0:
            self._sleep(ms / 1000.0)

    def _current_source(self, target: str) -> str:
        result = self.driver.page_source()
        if not result.ok:
            raise RemoteActionFailure(target, result.error or "page source unavailable")
        source = result.value or ""
        if self.artifacts is not None:
            self.artifacts.capture_hierarchy(source, target)
        return source

    def _resolve(self, action: Action) -> Optional[ResolvedElement]:
        return self.resolver.resolve(action.target, self._current_source(action.target))

    def _resolve_with_wait(self, action: Action, timeout_ms: int) -> Optional[ResolvedElement]:
        deadline = self._clock() + timeout_ms / 1000.0
        while True:
            resolved = self._resolve(action)
            if resolved is not None or self._clock() >= deadline:
                return resolved
            self._pause(self.cfg.capture.pollIntervalMs)

    def _timeout_for(self, action: Action) -> int:
        if action.params and isinstance(action.params[0], int):
            return action.params[0]
        return self.cfg.capture.waitTimeoutMs

    def _find(self, action: Action, resolved: ResolvedElement) -> str:
        found = self.driver.find("xpath", resolved.selector)
        if not found.ok:
            raise RemoteActionFailure(action.target, found.error or f"element lookup failed for {resolved.selector}")
        return found.value

    def _wait_displayed(self, action: Action, element_id: str, timeout_ms: int) -> bool:
        deadline = self._clock() + timeout_ms / 1000.0
        while True:
            shown = self.driver.is_displayed(element_id)
            if shown.ok and shown.value:
                return True
            if shown.unsupported:
                # no displayed endpoint; the hierarchy already reported it as displayed
                return True
            if self._clock() >= deadline:
                return False
            self._pause(self.cfg.capture.pollIntervalMs)

    def _perform(self, action: Action, resolved: ResolvedElement) -> bool:
        element_id = self._find(action, resolved)
        if action.verb in ("click", "fallbackClick"):
            result = self.driver.click(element_id)
        elif action.verb == "setValue":
            value = str(action.params[0]) if action.params else ""
            result = self.driver.set_value(element_id, value)
        elif action.verb == "waitUntilVisible":
            return self._wait_displayed(action, element_id, self._timeout_for(action))
        elif action.verb == "isVisible":
            shown = self.driver.is_displayed(element_id)
            return bool(shown.value) if shown.ok else shown.unsupported
        else:
            raise RemoteActionFailure(action.target, f"unsupported verb {action.verb}")
        if not result.ok:
            raise RemoteActionFailure(action.target, result.error or f"{action.verb} failed")
        return True

    # ---------- main execution ----------
    def execute_actions(self, actions: List[Action]) -> List[CaptureResult]:
        for idx, action in enumerate(actions, start=1):
            self.current_index = idx
            self._transition(CaptureState.EXECUTING_ACTION, f"{idx}/{len(actions)} {action.render()}")
            log_entry: Dict[str, Any] = {
                "index": idx, "action": action.render(), "strategy": None, "selector": None,
                "confidence": None, "status": "pending", "notes": "",
            }
            result = CaptureResult(action=action, platform=self.platform)

            try:
                if action.verb == "keypress":
                    # pacing only, no element involved
                    self._pause(self.cfg.capture.actionPauseMs)
                    result.success = True
                    log_entry["status"] = "passed"
                    self.results.append(result)
                    self._log_action(log_entry)
                    continue

                if action.verb == "waitUntilVisible":
                    resolved = self._resolve_with_wait(action, self._timeout_for(action))
                else:
                    resolved = self._resolve(action)
                if resolved is None:
                    raise ElementNotFound(action.target)

                result.selector = resolved.selector
                result.strategy = resolved.strategy
                result.attributes = resolved.node.snapshot()
                log_entry.update(strategy=resolved.strategy, selector=resolved.selector,
                                 confidence=resolved.confidence)

                result.success = self._perform(action, resolved)
                self._pause(self.cfg.capture.actionPauseMs)
                log_entry["status"] = "passed" if result.success else "failed"

            except ElementNotFound as e:
                result.error = str(e)
                log_entry["status"] = "notFound"
                log_entry["notes"] = str(e)
                logger.warning(str(e))
            except Exception as e:
                result.success = False
                result.error = str(e)
                log_entry["status"] = "failed"
                log_entry["notes"] = str(e)
                logger.error(f"Action {idx} {action.render()} failed: {e}")

            self.results.append(result)
            self._log_action(log_entry)

        self.current_index = None
        return self.results

    # ---------- save outputs ----------
    def save_outputs(self, actions: List[Action]):
        if self.run_dir is None:
            return
        self.run_dir.mkdir(parents=True, exist_ok=True)
        capture_path = self.run_dir / "capture.json"
        runlog_path = self.run_dir / "run_log.json"
        jsonl_path = self.run_dir / "plan.actions.jsonl"

        self._save_json(capture_results_to_json_dict(self.results, pending_keys(self.results)), capture_path)
        actions_to_jsonl(actions, jsonl_path, self.results)
        if self.artifacts is not None:
            self._save_json(self.artifacts.to_dict(), self.run_dir / "artifacts.json")
        if self.cfg.logging.saveRunLog:
            self._save_json(self.run_log, runlog_path)
