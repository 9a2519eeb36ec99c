"""
Date                Author                                  Change Details
17-10-2026          QA Tooling                              Managing Captured UI Hierarchy Snapshots Per Run
"""
import hashlib
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional


@dataclass
class SnapshotEntry:
    id: int
    pathRef: str
    target: str
    timestamp: str
    sourceHash: Optional[str] = None


@dataclass
class SnapshotMap:
    hierarchy: List[SnapshotEntry] = field(default_factory=list)


class ArtifactManager:
    def __init__(self, run_dir: Path):
        self.run_dir = run_dir
        self.hierarchy_dir = self.run_dir / "hierarchy"
        self.hierarchy_dir.mkdir(parents=True, exist_ok=True)
        self.snapshot_id = 0
        self.map = SnapshotMap()

    def _ts(self) -> str:
        return datetime.now().isoformat(timespec="seconds") + "Z"

    def _sha1(self, text: str) -> str:
        return "sha1:" + hashlib.sha1(text.encode("utf-8", errors="ignore")).hexdigest()

    def capture_hierarchy(self, page_source: str, target: str) -> int:
        self.snapshot_id += 1
        path = self.hierarchy_dir / f"{self.snapshot_id:04d}.xml"
        path.write_text(page_source, encoding="utf-8")
        self.map.hierarchy.append(SnapshotEntry(
            id=self.snapshot_id,
            pathRef=str(path),
            target=target,
            timestamp=self._ts(),
            sourceHash=self._sha1(page_source),
        ))
        return self.snapshot_id

    def latest_id(self) -> int:
        return self.snapshot_id

    def get_path_by_id(self, snapshot_id: int) -> Optional[str]:
        for s in self.map.hierarchy:
            if s.id == snapshot_id:
                return s.pathRef
        return None

    def to_dict(self) -> dict:
        return {"hierarchy": [asdict(e) for e in self.map.hierarchy]}
