"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Free-Form Steps -> Canonical Actions (Heuristic, No LLM)

The rule table is ordered data; the first rule whose pattern matches a line
classifies it. Each classifier is a plain function and can be exercised on
its own.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple

from constant.const_config import DEFAULT_WAIT_TIMEOUT_MS
from libs.dataclass.conceptual_objects import Action
from libs.parsing.locator_key import derive_locator_key

logger = logging.getLogger(__name__)

KEYPRESS_TARGET = "keyboard"

_KEY_NAMES = r"enter|return|tab|back|done|search|escape|esc|space|delete|backspace"

_LINE_PREFIX_RE = re.compile(r"^\s*(?:[-*•]\s*|step\s*\d+\s*[:.)-]?\s*|\d+\s*[.)]\s*)+", re.I)
_QUOTED_RE = re.compile(r"\"([^\"]+)\"|'([^']+)'|“([^”]+)”|‘([^’]+)’")
_LEADING_FILLER_RE = re.compile(
    r"^(?:(?:on|in|into|at|to|for|the|a|an|that|if|whether|user|button|field|of)\b\s*)+", re.I)
_TRAILING_FILLER_RE = re.compile(
    r"\s*(?:\b(?:is|are|should|be|gets|get|to)\b\s*)*"
    r"(?:\b(?:visible|displayed|shown|appears?|loaded|loads?|present)\b)?\s*[.!;:,]*\s*$", re.I)
_TRAILING_PUNCT_RE = re.compile(r"[\s.!;:,]+$")


@dataclass(frozen=True)
class SynthesisRule:
    name: str
    pattern: Pattern
    classifier: Callable[[str, "re.Match"], Optional[Action]]


def clean_step_line(line: str) -> str:
    return _LINE_PREFIX_RE.sub("", line).strip()


def first_quoted(text: str) -> List[str]:
    found = []
    for m in _QUOTED_RE.finditer(text):
        value = next(g for g in m.groups() if g is not None)
        found.append(value.strip())
    return found


def _tidy_phrase(phrase: str) -> str:
    phrase = _TRAILING_FILLER_RE.sub("", phrase)
    phrase = _LEADING_FILLER_RE.sub("", phrase.strip())
    return _TRAILING_PUNCT_RE.sub("", phrase).strip()


def extract_target_phrase(line: str, match: "re.Match") -> str:
    """Quoted substring first, else the text after the verb, else the text before it."""
    quoted = first_quoted(line)
    if quoted:
        return quoted[0]
    after = _tidy_phrase(line[match.end():])
    if after:
        return after
    return _tidy_phrase(line[:match.start()])


# ---------- classifiers ----------

def _classify_click(line: str, match: "re.Match") -> Optional[Action]:
    return Action(verb="click", target=derive_locator_key(extract_target_phrase(line, match)))


def _classify_wait(line: str, match: "re.Match") -> Optional[Action]:
    return Action(verb="waitUntilVisible", target=derive_locator_key(extract_target_phrase(line, match)),
                  params=(DEFAULT_WAIT_TIMEOUT_MS,))


def _classify_visible(line: str, match: "re.Match") -> Optional[Action]:
    return Action(verb="isVisible", target=derive_locator_key(extract_target_phrase(line, match)))


_PREPOSITION_RE = re.compile(r"\s+(?:in|into|on)\s+(?:the\s+)?", re.I)
_WITH_RE = re.compile(r"\s+with\s+", re.I)


def split_value_and_field(line: str, match: "re.Match") -> Tuple[str, str]:
    quoted = first_quoted(line)
    rest = line[match.end():]
    if len(quoted) >= 2:
        return quoted[0], quoted[1]
    if len(quoted) == 1:
        value = quoted[0]
        # field comes from whatever prepositional context surrounds the quote
        tail = rest.split(value, 1)[-1]
        prep = _PREPOSITION_RE.search(tail)
        if prep:
            return value, _tidy_phrase(tail[prep.end():])
        with_split = _WITH_RE.split(rest, maxsplit=1)
        if len(with_split) == 2:
            return value, _tidy_phrase(with_split[0])
        return value, value
    prep = _PREPOSITION_RE.search(rest)
    if prep:
        return _tidy_phrase(rest[:prep.start()]), _tidy_phrase(rest[prep.end():])
    with_split = _WITH_RE.split(rest, maxsplit=1)
    if len(with_split) == 2:
        return _tidy_phrase(with_split[1]), _tidy_phrase(with_split[0])
    phrase = _tidy_phrase(rest)
    return phrase, phrase


def _classify_set_value(line: str, match: "re.Match") -> Optional[Action]:
    value, field_name = split_value_and_field(line, match)
    return Action(verb="setValue", target=derive_locator_key(field_name or value), params=(value,))


def _classify_keypress(line: str, match: "re.Match") -> Optional[Action]:
    key = match.group("key").lower()
    if key == "esc":
        key = "escape"
    return Action(verb="keypress", target=KEYPRESS_TARGET, params=(key.capitalize(),))


def _classify_fallback(line: str, match: "re.Match") -> Optional[Action]:
    return Action(verb="fallbackClick", target=derive_locator_key(extract_target_phrase(line, match)))


# ---------- ordered rule table ----------

SYNTHESIS_RULES: Tuple[SynthesisRule, ...] = (
    SynthesisRule(
        name="click",
        pattern=re.compile(
            rf"\b(?:click(?:s|ed)?|tap(?:s|ped)?|touch(?:es|ed)?|open(?:s|ed)?"
            rf"|press(?!\s+(?:the\s+)?(?:{_KEY_NAMES})\b(?:\s+key)?\s*[.!]?\s*$)(?:es|ed)?)\b(?:\s+on\b)?",
            re.I),
        classifier=_classify_click,
    ),
    SynthesisRule(
        name="waitUntilVisible",
        pattern=re.compile(r"\b(?:wait(?:s|ed)?(?:\s+(?:for|until))?|should\s+appear|should\s+load)\b", re.I),
        classifier=_classify_wait,
    ),
    SynthesisRule(
        name="isVisible",
        pattern=re.compile(
            r"\b(?:validate|verify|check|should|is\s+visible|appears|displayed)\b(?:\s+(?:that|whether|if))?",
            re.I),
        classifier=_classify_visible,
    ),
    SynthesisRule(
        name="setValue",
        pattern=re.compile(
            rf"\b(?:enter(?!\s*(?:key)?\s*[.!]?\s*$)|type|input|fill(?:\s+in)?|send\s+keys)\b", re.I),
        classifier=_classify_set_value,
    ),
    SynthesisRule(
        name="keypress",
        pattern=re.compile(
            rf"\b(?:(?:press|hit)\s+(?:the\s+)?)?(?P<key>{_KEY_NAMES})(?:\s+key)?\s*[.!]?\s*$", re.I),
        classifier=_classify_keypress,
    ),
    SynthesisRule(
        name="fallbackClick",
        pattern=re.compile(
            r"\b(?:select|choose|pick|navigate(?:\s+to)?|go\s+to|scroll(?:\s+to)?|swipe(?:\s+to)?|submit"
            r"|toggle|enable|disable|launch|log\s*in|login|sign\s*in|search(?:\s+for)?|expand|collapse"
            r"|accept|dismiss|confirm|close|switch(?:\s+to)?)\b",
            re.I),
        classifier=_classify_fallback,
    ),
)


def classify_line(line: str, rules: Tuple[SynthesisRule, ...] = SYNTHESIS_RULES) -> Optional[Action]:
    cleaned = clean_step_line(line)
    if not cleaned:
        return None
    for rule in rules:
        m = rule.pattern.search(cleaned)
        if m:
            return rule.classifier(cleaned, m)
    return None


def collapse_adjacent_duplicates(actions: List[Action]) -> List[Action]:
    out: List[Action] = []
    for a in actions:
        if out and out[-1] == a:
            continue
        out.append(a)
    return out


def synthesize_actions(steps_text: str) -> List[Action]:
    """
    Convert free-form steps into canonical actions. Same text in, same
    action list out.
    """
    actions: List[Action] = []
    for line in (steps_text or "").splitlines():
        action = classify_line(line)
        if action is None:
            if line.strip():
                logger.info(f"No action synthesized for step line: {line.strip()!r}")
            continue
        actions.append(action)
    return collapse_adjacent_duplicates(actions)
