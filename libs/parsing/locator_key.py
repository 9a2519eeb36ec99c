"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Phrase To Locator Key (camelCase + role suffix)
"""
import re
from typing import Optional, Tuple

GENERIC_LOCATOR_KEY = "element"

# ordered, first group with a hit wins; within a group the first listed word wins
ROLE_SUFFIX_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ("icon",),
    ("button",),
    ("option",),
    ("screen", "component", "form"),
    ("header", "title"),
)

_WORD_RE = re.compile(r"[A-Za-z0-9]+")


def detect_role(phrase: str) -> Optional[str]:
    low = phrase.lower()
    for group in ROLE_SUFFIX_GROUPS:
        for role in group:
            if role in low:
                return role
    return None


def _camel(words) -> str:
    out = []
    for i, w in enumerate(words):
        w = w.lower()
        out.append(w if i == 0 else w[:1].upper() + w[1:])
    return "".join(out)


def derive_locator_key(phrase: str) -> str:
    """
    Turn a free-text target phrase into a locator key.

    "Login button" -> "loginButton", "form screen" -> "formScreen",
    "Account header" -> "accountHeader". Phrases without any alphanumeric
    content map to GENERIC_LOCATOR_KEY.
    """
    if not phrase or not _WORD_RE.search(phrase):
        return GENERIC_LOCATOR_KEY

    role = detect_role(phrase)
    remainder = phrase
    if role:
        remainder = re.sub(re.escape(role), " ", phrase, flags=re.I)

    words = _WORD_RE.findall(remainder)
    if not role:
        return _camel(words)
    if not words:
        return role
    return _camel(words) + role.capitalize()


def humanize_locator_key(key: str) -> str:
    """Split a camelCase key back into lower-cased words: "loginButton" -> "login button"."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", key)
    spaced = re.sub(r"[_\-]+", " ", spaced)
    return " ".join(spaced.lower().split())


def strip_role_suffix(key: str) -> str:
    """Key phrase without its trailing role word: "loginButton" -> "login"."""
    words = humanize_locator_key(key).split()
    if len(words) > 1 and any(words[-1] in group for group in ROLE_SUFFIX_GROUPS):
        words = words[:-1]
    return " ".join(words)
