"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Locator Repository (Load / Merge / Persist Object Repository JSON)

Locator files map a key to an object of platform -> selector:

    {"loginButton": {"android": "//android.widget.Button[@text='Login']",
                     "ios": "//XCUIElementTypeButton[@name='Login']"}}
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

from constant.const_config import SUPPORTED_PLATFORMS
from libs.dataclass.conceptual_objects import LocatorEntry, is_valid_selector
from libs.dataclass.errors import LocatorFileUnreadable

logger = logging.getLogger(__name__)

LocatorMap = Dict[str, Dict[str, str]]


def clean_locator_map(raw, source: str = "<memory>") -> LocatorMap:
    """Keep only keys with at least one recognized platform and a non-empty selector."""
    if not isinstance(raw, dict):
        logger.warning(f"Locator source {source} is not a JSON object; ignored")
        return {}
    cleaned: LocatorMap = {}
    for key, platforms in raw.items():
        if not isinstance(platforms, dict):
            logger.warning(f"Locator '{key}' in {source} is not an object of platform selectors; skipped")
            continue
        entry = LocatorEntry(key=str(key), platforms=dict(platforms))
        valid = entry.valid_platforms()
        dropped = set(platforms) - set(valid)
        if dropped:
            logger.warning(f"Locator '{key}' in {source}: dropped invalid platform entries {sorted(map(str, dropped))}")
        if entry.is_valid():
            cleaned[entry.key] = valid
    return cleaned


def merge_entries(existing: LocatorMap, fresh: LocatorMap) -> LocatorMap:
    """
    Merge ``fresh`` over ``existing`` per (key, platform). Platforms present
    only in ``existing`` are kept; invalid fresh selectors never overwrite.
    """
    merged: LocatorMap = {k: dict(v) for k, v in existing.items()}
    for key, platforms in fresh.items():
        node = merged.setdefault(key, {})
        for platform, selector in platforms.items():
            if is_valid_selector(platform, selector):
                node[platform] = selector
        if not node:
            del merged[key]
    return merged


def read_locator_file(path: Path, strict: bool = False) -> LocatorMap:
    """
    Load one locator file. An unreadable file is skipped with a warning, or
    raises ``LocatorFileUnreadable`` when ``strict`` (the file is about to be
    rewritten).
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        if strict:
            raise LocatorFileUnreadable(str(path), str(e)) from e
        logger.warning(f"Unable to read locator file {path}: {e}")
        return {}
    if strict and not isinstance(raw, dict):
        raise LocatorFileUnreadable(str(path), f"top level is {type(raw).__name__}")
    return clean_locator_map(raw, source=str(path))


def platform_entries(entries: LocatorMap, platform: str, exclude: Iterable[str] = ()) -> LocatorMap:
    """Narrow ``entries`` to one platform, dropping keys listed in ``exclude``."""
    skipped = set(exclude)
    return {k: {platform: v[platform]} for k, v in entries.items() if platform in v and k not in skipped}


class LocatorRepository:
    """
    Union of every locator file known to one run. Constructed per run and
    passed to whoever needs it.
    """

    def __init__(self, root: Optional[Path] = None, entries: Optional[LocatorMap] = None):
        self.root = Path(root) if root else None
        self.entries: LocatorMap = clean_locator_map(entries or {})
        self.sources: List[Path] = []
        # key -> files defining it, in load order
        self.origins: Dict[str, List[Path]] = {}

    # ---------- load ----------
    @classmethod
    def load(cls, root: Union[str, Path]) -> "LocatorRepository":
        root = Path(root)
        repo = cls(root=root)
        if not root.is_dir():
            logger.info(f"Locator root {root} does not exist yet; starting with an empty repository")
            return repo
        repo.load_sources(sorted(root.glob("*.json")))
        return repo

    def load_sources(self, paths: Iterable[Path]) -> None:
        for path in paths:
            data = read_locator_file(Path(path))
            self.entries = merge_entries(self.entries, data)
            self.sources.append(Path(path))
            for key in data:
                self.origins.setdefault(key, []).append(Path(path).resolve())
            logger.info(f"Loaded {len(data)} locator key(s) from {path}")

    # ---------- lookup ----------
    def keys(self) -> List[str]:
        return sorted(self.entries)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def platforms_for(self, key: str) -> Dict[str, str]:
        return dict(self.entries.get(key, {}))

    def selector_for(self, key: str, platform: str, fallback: bool = False) -> Optional[str]:
        node = self.entries.get(key)
        if not node:
            return None
        if platform in node:
            return node[platform]
        if fallback:
            for other in SUPPORTED_PLATFORMS:
                if other in node:
                    return node[other]
        return None

    def owned_elsewhere(self, target: Union[str, Path]) -> Set[str]:
        """Keys defined only in locator files other than ``target``."""
        target = Path(target).resolve()
        return {k for k, paths in self.origins.items() if target not in paths}

    def owner_of(self, key: str) -> Optional[Path]:
        """File whose value is in effect for ``key`` (the last one loaded)."""
        paths = self.origins.get(key)
        return paths[-1] if paths else None

    # ---------- update / persist ----------
    def merge_capture(self, fresh: LocatorMap) -> None:
        self.entries = merge_entries(self.entries, fresh)

    def persist(self, target: Union[str, Path], fresh: LocatorMap) -> LocatorMap:
        """
        Read-merge-write ``target``: fresh keys are merged into whatever the
        file holds now, and the in-memory repository picks up the same values.
        An existing file that cannot be decoded is never overwritten.
        """
        target = Path(target)
        existing = read_locator_file(target, strict=True) if target.exists() else {}
        merged = merge_entries(existing, clean_locator_map(fresh, source="capture"))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(merged, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        self.merge_capture(merged)
        for key in merged:
            paths = self.origins.setdefault(key, [])
            if target.resolve() not in paths:
                paths.append(target.resolve())
        logger.info(f"Persisted {len(merged)} locator key(s) to {target}")
        return merged

    def persist_by_owner(self, default_target: Union[str, Path], fresh: LocatorMap) -> Dict[Path, LocatorMap]:
        """
        Persist each fresh key into the file that already defines it, and new
        keys into ``default_target``, so a key keeps living in one file.
        """
        default_target = Path(default_target)
        groups: Dict[Path, LocatorMap] = {}
        for key, platforms in fresh.items():
            owner = self.owner_of(key) or default_target.resolve()
            groups.setdefault(owner, {})[key] = platforms
        for path, entries in groups.items():
            self.persist(path, entries)
        return groups
