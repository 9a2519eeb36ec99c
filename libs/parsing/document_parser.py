"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Test Case Document -> Metadata, Sections, Explicit Actions
"""
import logging
import re
from typing import Dict, List, Optional, Tuple

from constant.const_config import METADATA_SCAN_LINES
from libs.dataclass.conceptual_objects import Action, TestCaseDocument, normalize_verb
from libs.dataclass.errors import MissingTitle

logger = logging.getLogger(__name__)

SECTION_PRECONDITIONS = "preconditions"
SECTION_STEPS = "steps"
SECTION_ACTIONS = "actions"
SECTION_EXPECTED = "expected results"

_HEADER_RE = re.compile(
    r"^\s*#*\s*(preconditions?|steps|actions|expected\s+results?)\s*(?::\s*(.*))?$",
    re.I,
)
_METADATA_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9 .\-]*?)\s*[:=]\s*(.*)$")
_ACTION_LINE_RE = re.compile(r"^\s*(?:[-*•]\s*|\d+[.)]\s*)?([A-Za-z][\w\-]*)\s*\((.*)\)\s*;?\s*$")
_INT_RE = re.compile(r"^-?\d+$")

# ordered; compared after removing spaces, hyphens, underscores and dots
TITLE_ALIASES = (
    "testcasetitle", "title", "testcasename", "testcase", "testname", "name", "summary", "tctitle",
)


def _canonical_section(raw: str) -> str:
    low = " ".join(raw.lower().split())
    if low.startswith("precondition"):
        return SECTION_PRECONDITIONS
    if low.startswith("expected"):
        return SECTION_EXPECTED
    return low


def match_section_header(line: str) -> Optional[Tuple[str, str]]:
    m = _HEADER_RE.match(line)
    if not m:
        return None
    return _canonical_section(m.group(1)), (m.group(2) or "").strip()


def _alias_form(key: str) -> str:
    return re.sub(r"[\s\-_.]", "", key.lower())


def extract_metadata(lines: List[str], scan_limit: int = METADATA_SCAN_LINES) -> Dict[str, str]:
    metadata: Dict[str, str] = {}
    for line in lines[:scan_limit]:
        if match_section_header(line):
            break
        m = _METADATA_RE.match(line)
        if not m:
            continue
        key = " ".join(m.group(1).lower().split())
        metadata.setdefault(key, m.group(2).strip())
    return metadata


def extract_sections(lines: List[str]) -> Dict[str, List[str]]:
    sections: Dict[str, List[str]] = {}
    current: Optional[str] = None
    for line in lines:
        header = match_section_header(line)
        if header:
            current, inline = header
            bucket = sections.setdefault(current, [])
            if inline:
                bucket.append(inline)
            continue
        if current is not None:
            sections[current].append(line.rstrip())
    return sections


def resolve_title(metadata: Dict[str, str], lines: List[str]) -> Optional[str]:
    by_alias = {_alias_form(k): v for k, v in metadata.items()}
    for alias in TITLE_ALIASES:
        value = by_alias.get(alias)
        if value:
            return value

    for line in lines:
        if match_section_header(line):
            # anything from here on belongs to a section
            break
        text = line.strip().lstrip("#").strip()
        if not text or _METADATA_RE.match(line):
            continue
        return text
    return None


def split_action_params(raw: str) -> List[str]:
    """Comma split that keeps double-quoted substrings together."""
    parts: List[str] = []
    buf: List[str] = []
    in_quotes = False
    for ch in raw:
        if ch == '"':
            in_quotes = not in_quotes
            buf.append(ch)
        elif ch == "," and not in_quotes:
            parts.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
    tail = "".join(buf).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def _coerce_param(token: str):
    if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
        return token[1:-1]
    if _INT_RE.match(token):
        return int(token)
    return token


def parse_action_line(line: str) -> Optional[Action]:
    m = _ACTION_LINE_RE.match(line)
    if not m:
        return None
    verb = normalize_verb(m.group(1))
    if verb is None:
        logger.debug(f"Skipping action line with unknown verb: {line!r}")
        return None
    parts = split_action_params(m.group(2))
    if not parts or not parts[0]:
        logger.debug(f"Skipping action line without target: {line!r}")
        return None
    target = _coerce_param(parts[0])
    params = tuple(_coerce_param(p) for p in parts[1:] if p != "")
    return Action(verb=verb, target=str(target), params=params)


def parse_action_lines(lines: List[str]) -> List[Action]:
    actions: List[Action] = []
    for line in lines:
        if not line.strip():
            continue
        action = parse_action_line(line)
        if action is not None:
            actions.append(action)
    return actions


def parse_test_case_document(text: str, source_path: Optional[str] = None) -> TestCaseDocument:
    """
    Split raw test case text into metadata, named sections and the explicit
    action list. Raises MissingTitle when no title can be determined.
    """
    lines = text.splitlines()
    metadata = extract_metadata(lines)
    sections = extract_sections(lines)
    title = resolve_title(metadata, lines)
    if not title:
        raise MissingTitle(f"Unable to determine the test case title{f' in {source_path}' if source_path else ''}.")

    def _joined(name: str) -> str:
        return "\n".join(sections.get(name, [])).strip()

    return TestCaseDocument(
        title=title,
        metadata=metadata,
        preconditions=_joined(SECTION_PRECONDITIONS),
        steps=_joined(SECTION_STEPS),
        expected_results=_joined(SECTION_EXPECTED),
        actions=tuple(parse_action_lines(sections.get(SECTION_ACTIONS, []))),
        source_path=source_path,
    )
