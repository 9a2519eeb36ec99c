"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Data Structure To Test Case, Action, Locator, Capture, Artifacts
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Literal, Dict, Any, Union

from constant.const_config import SUPPORTED_PLATFORMS
from libs.dataclass.errors import ContractViolation

ActionVerb = Literal[
    "click", "waitUntilVisible", "setValue", "isVisible", "keypress", "fallbackClick"
]

ACTION_VERBS = ("click", "waitUntilVisible", "setValue", "isVisible", "keypress", "fallbackClick")

VERB_ALIASES = {
    "fallback-click": "fallbackClick",
    "fallback_click": "fallbackClick",
    "waituntilvisible": "waitUntilVisible",
    "setvalue": "setValue",
    "isvisible": "isVisible",
    "fallbackclick": "fallbackClick",
}

PlatformType = Literal["android", "ios"]

ActionParam = Union[str, int]

# six string fields every generation response must carry
ARTIFACT_CONTRACT_FIELDS = (
    "specPath", "specContent", "pagePath", "pageContent", "locatorsPath", "locatorsContent"
)


def normalize_verb(verb: str) -> Optional[str]:
    v = verb.strip()
    if v in ACTION_VERBS:
        return v
    return VERB_ALIASES.get(v.lower())


# ---------- Core dataclasses ----------

@dataclass(frozen=True)
class Action:
    verb: ActionVerb
    target: str
    params: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"verb": self.verb, "target": self.target, "params": list(self.params)}

    def render(self) -> str:
        parts = [self.target] + [_render_param(p) for p in self.params]
        return f"{self.verb}({', '.join(parts)})"


def _render_param(p: ActionParam) -> str:
    if isinstance(p, int):
        return str(p)
    return '"' + str(p).replace('"', "'") + '"'


@dataclass(frozen=True)
class TestCaseDocument:
    title: str
    metadata: Dict[str, str] = field(default_factory=dict)
    preconditions: str = ""
    steps: str = ""
    expected_results: str = ""
    actions: tuple = ()
    source_path: Optional[str] = None

    # keeps pytest from collecting the dataclass as a test class
    __test__ = False

    @property
    def has_explicit_actions(self) -> bool:
        return len(self.actions) > 0


@dataclass
class LocatorEntry:
    key: str
    platforms: Dict[str, str] = field(default_factory=dict)

    def valid_platforms(self) -> Dict[str, str]:
        return {p: s for p, s in self.platforms.items() if is_valid_selector(p, s)}

    def is_valid(self) -> bool:
        return bool(self.key) and len(self.valid_platforms()) > 0


def is_valid_selector(platform: Any, selector: Any) -> bool:
    return platform in SUPPORTED_PLATFORMS and isinstance(selector, str) and selector.strip() != ""


@dataclass
class CaptureResult:
    action: Action
    selector: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    success: bool = False
    strategy: Optional[str] = None
    platform: str = "android"
    error: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.selector is not None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["action"] = self.action.to_dict()
        return d


@dataclass
class GenerationArtifact:
    path: str
    content: str


@dataclass
class GenerationArtifactSet:
    spec: GenerationArtifact
    page: GenerationArtifact
    locators: GenerationArtifact


@dataclass(frozen=True)
class ArtifactNames:
    title: str
    slug: str
    class_base: str
    page_class: str
    describe_name: str
    spec_basename: str
    page_basename: str
    locators_basename: str


# ---------- JSON utilities ----------

# Capture <-> JSON
def capture_results_to_json_dict(results: List[CaptureResult], pending: List[str]) -> Dict[str, Any]:
    return {
        "results": [r.to_dict() for r in results],
        "resolved": sum(1 for r in results if r.resolved),
        "total": len(results),
        "pending": list(pending),
    }


# Artifacts <-> JSON
def artifact_set_from_dict(raw: Any) -> GenerationArtifactSet:
    if not isinstance(raw, dict):
        raise ContractViolation(f"Generation response must be a JSON object, got {type(raw).__name__}.")
    missing = [k for k in ARTIFACT_CONTRACT_FIELDS if k not in raw]
    if missing:
        raise ContractViolation(f"Generation response missing required field(s): {', '.join(missing)}")
    mistyped = [k for k in ARTIFACT_CONTRACT_FIELDS if not isinstance(raw[k], str)]
    if mistyped:
        raise ContractViolation(f"Generation response field(s) must be strings: {', '.join(mistyped)}")
    return GenerationArtifactSet(
        spec=GenerationArtifact(path=raw["specPath"], content=raw["specContent"]),
        page=GenerationArtifact(path=raw["pagePath"], content=raw["pageContent"]),
        locators=GenerationArtifact(path=raw["locatorsPath"], content=raw["locatorsContent"]),
    )
