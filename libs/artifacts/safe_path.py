"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Safe File Names / Write Targets Under Output Roots
"""
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Union

logger = logging.getLogger(__name__)

DEFAULT_BASENAME = "artifact"
MAX_BASENAME_LENGTH = 180

_ILLEGAL_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_NOT_ALLOWED_RUN_RE = re.compile(r"[^A-Za-z0-9._-]+")
_SEPARATOR_RUN_RE = re.compile(r"_{2,}")
_DOT_RUN_RE = re.compile(r"\.{2,}")
_DRIVE_RE = re.compile(r"^[A-Za-z]:")
_WINDOWS_RESERVED = {
    "CON", "PRN", "AUX", "NUL",
    *(f"COM{i}" for i in range(1, 10)),
    *(f"LPT{i}" for i in range(1, 10)),
}


def make_safe_basename(name: str, fallback: str = DEFAULT_BASENAME, max_length: int = MAX_BASENAME_LENGTH) -> str:
    """
    Sanitize a file name so it contains only letters, digits, dot, underscore
    and hyphen. Never returns an empty string.
    """
    s = _ILLEGAL_CHARS_RE.sub("_", name or "")
    s = _NOT_ALLOWED_RUN_RE.sub("_", s)
    s = _SEPARATOR_RUN_RE.sub("_", s)
    s = _DOT_RUN_RE.sub(".", s)
    s = s.strip("._-")

    if len(s) > max_length:
        stem, dot, ext = s.rpartition(".")
        if dot and stem and len(ext) < 16:
            s = stem[:max_length - len(ext) - 1].rstrip("._-") + "." + ext
        else:
            s = s[:max_length].rstrip("._-")

    if s.split(".", 1)[0].upper() in _WINDOWS_RESERVED:
        s = "_" + s

    if not s:
        return make_safe_basename(fallback) if fallback and fallback != name else DEFAULT_BASENAME
    return s


def _is_within(candidate: Path, root: Path) -> bool:
    try:
        candidate.relative_to(root)
        return True
    except ValueError:
        return False


def resolve_safe_path(root: Union[str, Path], relative: str, default_name: str = DEFAULT_BASENAME) -> Path:
    """
    Join ``relative`` under ``root``. Drive prefixes and leading slashes are
    dropped; anything that would still land outside ``root`` falls back to
    ``root / <safe basename>``.
    """
    root_path = Path(root).resolve()
    rel = (relative or "").replace("\\", "/").strip()
    rel = _DRIVE_RE.sub("", rel).lstrip("/")

    parts = [p for p in PurePosixPath(rel).parts if p not in ("", ".")] if rel else []
    if not parts:
        return root_path / make_safe_basename(default_name)

    basename = make_safe_basename(parts[-1], fallback=default_name)
    candidate = root_path.joinpath(*parts[:-1], basename).resolve()
    if candidate != root_path and _is_within(candidate, root_path):
        return candidate

    fallback = root_path / basename
    logger.warning(f"Write target {relative!r} escapes {root_path}; using {fallback}")
    return fallback
