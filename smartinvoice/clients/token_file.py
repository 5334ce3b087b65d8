"""JSON file holding the persisted Google credential."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional


class TokenFile:
    """Read, replace and merge the token JSON on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Optional[Dict[str, Any]]:
        if not self._path.exists():
            return None
        return json.loads(self._path.read_text(encoding="utf-8"))

    def save(self, token: Dict[str, Any]) -> None:
        """Replace the file contents with ``token``."""
        if self._path.parent and not self._path.parent.exists():
            self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_text(json.dumps(token, indent=2, default=str), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def merge(self, update: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay ``update`` onto the stored token, keeping unrelated keys."""
        merged = dict(self.load() or {})
        merged.update({key: value for key, value in update.items() if value is not None})
        self.save(merged)
        return merged


__all__ = ["TokenFile"]
