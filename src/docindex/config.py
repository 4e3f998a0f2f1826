"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_INDEX_NAME = ".docindex.json"
LOCK_SCOPES = ("file", "walk")


@dataclass(slots=True)
class AppConfig:
    index_path: Path | None = None
    host: str = "127.0.0.1"
    port: int = 6969
    result_limit: int = 20
    lock_scope: str = "file"

    def __post_init__(self) -> None:
        if self.index_path is None:
            self.index_path = Path(DEFAULT_INDEX_NAME)
        if self.lock_scope not in LOCK_SCOPES:
            raise ValueError(
                f"lock_scope must be one of {', '.join(LOCK_SCOPES)}, got {self.lock_scope!r}"
            )

    def resolve_index_path(self, root: Path | None = None) -> Path:
        """Resolve the snapshot location, relative paths land inside ``root``."""
        if self.index_path is None:
            self.index_path = Path(DEFAULT_INDEX_NAME)
        if Path(self.index_path).is_absolute() or root is None:
            return Path(self.index_path)
        return root / self.index_path
