"""
Key-value stores for persisted panel state.

The panel only remembers whether the page background has been set, but any
string key works.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Default store location
DEFAULT_STORE_DIR = Path.home() / ".cache" / "futureself"
DEFAULT_STORE_FILE = "state.json"


class InMemoryKeyValueStore:
    """Implements IKeyValueStore in a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._data.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data


class JSONFileKeyValueStore:
    """
    Implements IKeyValueStore on top of a small JSON file.

    The file is read lazily on first access and rewritten on every ``set``.
    """

    def __init__(self, store_dir: Optional[Path] = None, store_file: str = DEFAULT_STORE_FILE):
        """
        Args:
            store_dir: Directory holding the file (default: ~/.cache/futureself)
            store_file: Name of the file (default: state.json)
        """
        self._store_dir = store_dir or DEFAULT_STORE_DIR
        self._store_file = self._store_dir / store_file
        self._data: Optional[Dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._store_file

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data
        try:
            if self._store_file.exists():
                with open(self._store_file, "r", encoding="utf-8") as f:
                    raw = json.load(f)
                self._data = {str(k): str(v) for k, v in raw.items()} if isinstance(raw, dict) else {}
                logger.debug("Loaded %d keys from %s", len(self._data), self._store_file)
            else:
                self._data = {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load %s: %s - starting fresh", self._store_file, e)
            self._data = {}
        return self._data

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._load().get(key, default)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._store_dir.mkdir(parents=True, exist_ok=True)
        with open(self._store_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def has(self, key: str) -> bool:
        return key in self._load()
