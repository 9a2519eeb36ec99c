"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Offline Spec / Page / Locator Templates (No LLM)
"""
import json
import re
from typing import Dict, List

from libs.artifacts.actions_exporter import action_to_executor_call
from libs.dataclass.conceptual_objects import Action, ArtifactNames, GenerationArtifact, GenerationArtifactSet

LocatorMap = Dict[str, Dict[str, str]]


def _ts_literal(value) -> str:
    if isinstance(value, int):
        return str(value)
    return "'" + str(value).replace("\\", "\\\\").replace("'", "\\'") + "'"


def _method_name(action: Action, used: Dict[str, int]) -> str:
    base = {
        "click": "tap", "fallbackClick": "tap", "waitUntilVisible": "waitFor",
        "setValue": "enter", "isVisible": "check", "keypress": "pressKey",
    }[action.verb]
    target = action.target if action.verb != "keypress" else str(action.params[0] if action.params else "key")
    target = re.sub(r"[^A-Za-z0-9]", "", target)
    name = base + target[:1].upper() + target[1:]
    used[name] = used.get(name, 0) + 1
    return name if used[name] == 1 else f"{name}{used[name]}"


def _call_line(action: Action) -> str:
    call = action_to_executor_call(action)
    args = ", ".join(_ts_literal(a) for a in call["args"])
    if action.verb == "isVisible":
        return f"return this.{call['method']}({args});"
    return f"await this.{call['method']}({args});"


def build_page_content(names: ArtifactNames, actions: List[Action]) -> str:
    used: Dict[str, int] = {}
    methods = []
    for a in actions:
        name = _method_name(a, used)
        returns = ": Promise<boolean>" if a.verb == "isVisible" else ""
        methods.append(
            f"  async {name}(){returns} {{\n"
            f"    {_call_line(a)}\n"
            f"  }}\n"
        )
    body = "\n".join(methods) if methods else "  async open() {\n    // landing screen is the app start screen\n  }\n"
    return (
        "import CommonActionsPage from '../utilities/CommonActions.page';\n"
        "\n"
        f"export default class {names.page_class} extends CommonActionsPage {{\n"
        f"{body}"
        "}\n"
    )


def build_spec_content(names: ArtifactNames, actions: List[Action]) -> str:
    used: Dict[str, int] = {}
    lines = []
    for a in actions:
        name = _method_name(a, used)
        if a.verb == "isVisible":
            lines.append(f"    expect(await page.{name}()).to.equal(true);")
        else:
            lines.append(f"    await page.{name}();")
    steps = "\n".join(lines) if lines else "    await page.open();"
    page_import = names.page_basename[:-3] if names.page_basename.endswith(".ts") else names.page_basename
    describe = names.describe_name.replace("'", "\\'")
    return (
        "import { expect } from 'chai';\n"
        f"import {names.page_class} from '../../src/pages/{page_import}';\n"
        "\n"
        f"describe('{describe}', () => {{\n"
        f"  const page = new {names.page_class}();\n"
        "\n"
        f"  it('should {describe}', async () => {{\n"
        f"{steps}\n"
        "  });\n"
        "});\n"
    )


def build_locators_content(locator_keys: List[str], captured: LocatorMap) -> str:
    data = {k: dict(captured[k]) for k in locator_keys if captured.get(k)}
    return json.dumps(data, indent=2, ensure_ascii=False)


def scaffold_artifact_set(names: ArtifactNames, actions: List[Action], locator_keys: List[str],
                          captured: LocatorMap) -> GenerationArtifactSet:
    """Deterministic artifact set for runs without the generation service."""
    return GenerationArtifactSet(
        spec=GenerationArtifact(path=names.spec_basename, content=build_spec_content(names, actions)),
        page=GenerationArtifact(path=names.page_basename, content=build_page_content(names, actions)),
        locators=GenerationArtifact(path=names.locators_basename,
                                    content=build_locators_content(locator_keys, captured)),
    )
