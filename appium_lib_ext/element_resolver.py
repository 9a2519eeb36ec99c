"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Find Element For Locator Key In Live UI Hierarchy
                                                        (Android UiAutomator2 / iOS XCUITest page source)
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from libs.parsing.locator_key import humanize_locator_key, strip_role_suffix

logger = logging.getLogger(__name__)

# Strategy weights for confidence calculation (heuristic)
STRATEGY_WEIGHT = {
    "description": 1.0,
    "identifier": 0.95,
    "text": 0.9,
    "textContains": 0.75,
    "descriptionContains": 0.7,
    "typedControl": 0.65,
    "broadScan": 0.4,
}

ANDROID_CONTROL_CLASSES = (
    "android.widget.Button", "android.widget.ImageButton", "android.widget.EditText",
    "android.widget.TextView", "android.widget.CheckBox", "android.widget.Switch",
    "android.widget.RadioButton",
)
IOS_CONTROL_CLASSES = (
    "XCUIElementTypeButton", "XCUIElementTypeTextField", "XCUIElementTypeSecureTextField",
    "XCUIElementTypeStaticText", "XCUIElementTypeSwitch", "XCUIElementTypeCell",
)

_EDITABLE_MARKERS = ("EditText", "TextField", "SecureTextField", "SearchField", "XCUIElementTypeTextView")
_INTERACTIVE_MARKERS = ("Button", "CheckBox", "Switch", "RadioButton", "Cell", "Link", "Spinner", "Tab")
_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")

SNAPSHOT_ATTRIBUTES = (
    "class", "type", "resource-id", "content-desc", "text", "hint", "name", "label", "value",
    "bounds", "displayed", "visible", "clickable", "enabled",
)

# attribute, selector kind: identifier > description > text
_SELECTOR_ATTRIBUTES = {
    "android": (("resource-id", "identifier"), ("content-desc", "description"), ("text", "text")),
    "ios": (("name", "identifier"), ("label", "description"), ("value", "text")),
}


@dataclass
class UiNode:
    index: int
    class_name: str
    attrs: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    description: str = ""
    identifier: str = ""
    hint: str = ""
    displayed: bool = True
    clickable: bool = False
    class_occurrence: int = 1

    @property
    def editable(self) -> bool:
        return any(m in self.class_name for m in _EDITABLE_MARKERS)

    @property
    def interactive(self) -> bool:
        return self.clickable or self.editable or any(m in self.class_name for m in _INTERACTIVE_MARKERS)

    @property
    def identifier_tail(self) -> str:
        return self.identifier.split(":id/", 1)[-1]

    def snapshot(self) -> Dict[str, str]:
        return {k: self.attrs[k] for k in SNAPSHOT_ATTRIBUTES if self.attrs.get(k) not in (None, "")}


@dataclass
class ResolvedElement:
    node: UiNode
    strategy: str
    confidence: float
    selector: str


def _truthy(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.strip().lower() == "true"


def _has_area(attrs: Dict[str, str]) -> Optional[bool]:
    m = _BOUNDS_RE.match(attrs.get("bounds", ""))
    if m:
        left, top, right, bottom = map(int, m.groups())
        return right > left and bottom > top
    if "width" in attrs and "height" in attrs:
        try:
            return float(attrs["width"]) > 0 and float(attrs["height"]) > 0
        except ValueError:
            return None
    return None


def detect_platform(page_source: str) -> str:
    return "ios" if "XCUIElementType" in page_source else "android"


def parse_hierarchy(page_source: str, platform: Optional[str] = None) -> List[UiNode]:
    """Flatten Appium page source into UiNode records in document order."""
    platform = platform or detect_platform(page_source)
    soup = BeautifulSoup(page_source or "", "xml", multi_valued_attributes=None)
    nodes: List[UiNode] = []
    occurrences: Dict[str, int] = {}
    for tag in soup.find_all(True):
        attrs = {k: (v if isinstance(v, str) else " ".join(v)) for k, v in tag.attrs.items()}
        class_name = attrs.get("class") or attrs.get("type")
        if not class_name:
            continue
        occurrences[class_name] = occurrences.get(class_name, 0) + 1

        if platform == "ios":
            text = attrs.get("label") or attrs.get("value") or ""
            description = attrs.get("name") or ""
            identifier = attrs.get("name") or ""
            hint = attrs.get("placeholderValue") or ""
            displayed = _truthy(attrs.get("visible"))
            clickable = "Button" in class_name or _truthy(attrs.get("accessible")) is True
        else:
            text = attrs.get("text") or ""
            description = attrs.get("content-desc") or ""
            identifier = attrs.get("resource-id") or ""
            hint = attrs.get("hint") or ""
            displayed = _truthy(attrs.get("displayed"))
            clickable = _truthy(attrs.get("clickable")) is True
        if displayed is None:
            area = _has_area(attrs)
            displayed = True if area is None else area

        nodes.append(UiNode(
            index=len(nodes),
            class_name=class_name,
            attrs=attrs,
            text=text,
            description=description,
            identifier=identifier,
            hint=hint,
            displayed=displayed,
            clickable=clickable,
            class_occurrence=occurrences[class_name],
        ))
    return nodes


def xpath_literal(value: str) -> str:
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def synthesize_selector(node: UiNode, platform: str, nodes: List[UiNode]) -> Tuple[str, str]:
    """
    Most specific selector available for ``node``: identifier > description >
    text > class-only. Returns (kind, xpath). When the attribute is shared with
    other nodes of the same class, the xpath is indexed.
    """
    cls = node.class_name
    for attr, kind in _SELECTOR_ATTRIBUTES.get(platform, _SELECTOR_ATTRIBUTES["android"]):
        value = node.attrs.get(attr)
        if not value:
            continue
        xpath = f"//{cls}[@{attr}={xpath_literal(value)}]"
        same = [n for n in nodes if n.class_name == cls and n.attrs.get(attr) == value]
        if len(same) > 1:
            position = next(i for i, n in enumerate(same, start=1) if n.index == node.index)
            xpath = f"({xpath})[{position}]"
        return kind, xpath
    return "class", f"(//{cls})[{node.class_occurrence}]"


class ElementResolver:
    """
    Resolves a locator key against a UI hierarchy. Strategies run in a fixed
    order and the first displayed match wins; the broad scan only runs when
    every precise strategy missed.
    """

    def __init__(self, platform: str = "android"):
        self.platform = platform
        self.control_classes = IOS_CONTROL_CLASSES if platform == "ios" else ANDROID_CONTROL_CLASSES

    # ---------- needles ----------
    @staticmethod
    def exact_needles(key: str) -> List[str]:
        human = humanize_locator_key(key)
        out: List[str] = []
        for n in (key, human, human.replace(" ", "_"), human.replace(" ", "-")):
            n = n.strip().lower()
            if n and n not in out:
                out.append(n)
        return out

    # ---------- strategies ----------
    def strategies(self, key: str) -> List[Tuple[str, Callable[[UiNode], bool]]]:
        exact = self.exact_needles(key)
        phrase = humanize_locator_key(key)
        base = strip_role_suffix(key)

        def eq(value: str) -> bool:
            return " ".join(value.lower().split()) in exact

        def contains(value: str) -> bool:
            return bool(phrase) and phrase in " ".join(value.lower().split())

        ordered: List[Tuple[str, Callable[[UiNode], bool]]] = [
            ("description", lambda n: bool(n.description) and eq(n.description)),
            ("identifier", lambda n: bool(n.identifier) and (eq(n.identifier) or eq(n.identifier_tail))),
            ("text", lambda n: bool(n.text) and eq(n.text)),
            ("textContains", lambda n: bool(n.text) and contains(n.text)),
            ("descriptionContains", lambda n: bool(n.description) and contains(n.description)),
        ]
        for cls in self.control_classes:
            ordered.append((
                "typedControl",
                lambda n, cls=cls: n.class_name == cls and bool(base)
                and base in (" ".join(n.text.lower().split()), " ".join(n.description.lower().split())),
            ))
        return ordered

    @staticmethod
    def broad_match(key: str, node: UiNode) -> bool:
        needle = key.lower()
        if not needle or not (node.interactive or node.editable):
            return False
        normalized_id = re.sub(r"[\s_]", "", node.identifier_tail).lower()
        return any(needle in v for v in (node.text.lower(), node.hint.lower(), node.description.lower(),
                                          normalized_id))

    # ---------- resolve ----------
    def resolve_in(self, key: str, nodes: List[UiNode]) -> Optional[ResolvedElement]:
        for strategy, predicate in self.strategies(key):
            for node in nodes:
                if node.displayed and predicate(node):
                    return self._resolved(node, strategy, nodes)
        for node in nodes:
            if node.displayed and self.broad_match(key, node):
                return self._resolved(node, "broadScan", nodes)
        logger.info(f"No displayed element matched locator key '{key}'")
        return None

    def resolve(self, key: str, page_source: str) -> Optional[ResolvedElement]:
        return self.resolve_in(key, parse_hierarchy(page_source, self.platform))

    def _resolved(self, node: UiNode, strategy: str, nodes: List[UiNode]) -> ResolvedElement:
        _, selector = synthesize_selector(node, self.platform, nodes)
        confidence = STRATEGY_WEIGHT.get(strategy, 0.3)
        logger.info(f"Resolved via {strategy} -> {selector} (confidence {confidence})")
        return ResolvedElement(node=node, strategy=strategy, confidence=confidence, selector=selector)
