# tracksurvey/services/storage.py
"""
Filesystem storage for submission files.
All paths are relative to the storage base directory.
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional

from tracksurvey import config

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    raise ValueError(f"non-finite number in JSON: {name}")


class LocalStorage:
    """Local filesystem storage rooted at ``base_dir``"""

    def __init__(self, base_dir: str | Path = "submissions"):
        self.base_dir = Path(base_dir)

    def _full_path(self, path: str) -> Path:
        base = self.base_dir.resolve()
        full_path = (base / path).resolve()
        if full_path != base and base not in full_path.parents:
            raise ValueError(f"path escapes storage directory: {path!r}")
        return full_path

    def write_file(self, path: str, content: bytes) -> str:
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        with open(full_path, 'wb') as f:
            f.write(content)
        return str(full_path)

    def write_text(self, path: str, content: str) -> str:
        return self.write_file(path, content.encode('utf-8'))

    def write_json(self, path: str, data: Any) -> str:
        """Write pretty-printed JSON, replacing any existing file"""
        content = json.dumps(data, ensure_ascii=False, indent=2)
        return self.write_text(path, content)

    def read_file(self, path: str) -> bytes:
        with open(self._full_path(path), 'rb') as f:
            return f.read()

    def read_text(self, path: str) -> str:
        return self.read_file(path).decode('utf-8')

    def read_json(self, path: str) -> Any:
        """Parse a JSON file; NaN and Infinity are rejected"""
        return json.loads(self.read_text(path), parse_constant=_reject_constant)

    def exists(self, path: str) -> bool:
        return self._full_path(path).exists()

    def list_dir(self, path: str = "") -> list[str]:
        """File names under ``path``; a missing directory lists as empty"""
        full_path = self._full_path(path)
        if not full_path.is_dir():
            return []
        return sorted(p.name for p in full_path.iterdir() if p.is_file())


# Global storage instance
_storage: Optional[LocalStorage] = None


def get_storage() -> LocalStorage:
    """Get storage backend singleton"""
    global _storage
    if _storage is None:
        _storage = LocalStorage(base_dir=config.SUBMISSIONS_DIR)
        logger.info("Storage: local filesystem at %s", _storage.base_dir)
    return _storage
