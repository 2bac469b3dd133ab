"""選取影像的解析結果。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ResolvedImage:
    name: str
    source_path: Path
    discovery_index: int
    order: int

    @property
    def stem(self) -> str:
        return self.source_path.stem
