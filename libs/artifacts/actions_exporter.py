"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Actions -> Document Block / Executor-Call JSONL
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from libs.dataclass.conceptual_objects import Action, CaptureResult

logger = logging.getLogger(__name__)

# action verb -> CommonActionsPage method the generated page object calls
EXECUTOR_METHOD = {
    "click": "click",
    "fallbackClick": "click",
    "waitUntilVisible": "waitUntilVisible",
    "setValue": "setValue",
    "isVisible": "isVisible",
    "keypress": "pause",
}

KEYPRESS_PAUSE_MS = 500


def render_actions_block(actions: List[Action]) -> str:
    lines = ["Actions:"]
    lines.extend(a.render() for a in actions)
    return "\n".join(lines)


def append_actions_block(path: Path, actions: List[Action]) -> None:
    """Append the synthesized actions to the backing test case file."""
    if not actions:
        return
    existing = path.read_text(encoding="utf-8")
    sep = "" if existing.endswith("\n") else "\n"
    path.write_text(existing + sep + "\n" + render_actions_block(actions) + "\n", encoding="utf-8")
    logger.info(f"Appended {len(actions)} synthesized action(s) to {path}")


def action_to_executor_call(action: Action) -> Dict[str, Any]:
    """
    Project an action onto the action-executor contract, e.g.
    setValue(usernameField, "bob") -> {"method": "setValue", "args": ["usernameField", "bob"]}.
    """
    method = EXECUTOR_METHOD[action.verb]
    if action.verb == "keypress":
        return {"method": method, "args": [KEYPRESS_PAUSE_MS]}
    if action.verb == "setValue":
        value = action.params[0] if action.params else ""
        return {"method": method, "args": [action.target, str(value)]}
    if action.verb == "waitUntilVisible" and action.params and isinstance(action.params[0], int):
        return {"method": method, "args": [action.target, action.params[0]]}
    return {"method": method, "args": [action.target]}


def actions_to_jsonl(actions: List[Action], out_path: Path,
                     results: Optional[List[CaptureResult]] = None) -> None:
    """
    Emit one JSON object per line:
    - action: canonical verb/target/params
    - call: executor method & args
    - selector/resolved when a capture result exists for that position
    """
    lines: List[str] = []
    for idx, a in enumerate(actions, start=1):
        entry: Dict[str, Any] = {
            "step": idx,
            "action": a.to_dict(),
            "call": action_to_executor_call(a),
        }
        if results is not None and idx <= len(results):
            r = results[idx - 1]
            entry["selector"] = r.selector
            entry["resolved"] = r.resolved
            entry["success"] = r.success
        lines.append(json.dumps(entry, ensure_ascii=False))

    out_path.write_text("\n".join(lines), encoding="utf-8")
