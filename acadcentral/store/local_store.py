"""
AcadCentral Department Portal
Local Store: the in-process key-value store every domain operation reads and writes
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

WriteListener = Callable[[str, str], Any]


class LocalStore:
    """
    String keys mapped to JSON text, mirroring browser local storage.

    Collections live under one key each as a JSON-encoded list. When a
    ``path`` is given the whole store is persisted to that JSON file after
    every mutation and reloaded on construction.

    Write listeners are called with ``(key, value)`` after each ``set_item``;
    the sync engine hooks in here to mirror writes.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path) if path else None
        self._items: Dict[str, str] = {}
        self._listeners: List[WriteListener] = []

        if self._path and self._path.exists():
            self._load()

    # --- persistence -----------------------------------------------------

    def _load(self) -> None:
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Local store file {self._path} unreadable, starting empty: {e}")
            return

        if isinstance(data, dict):
            self._items = {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _persist(self) -> None:
        if not self._path:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(self._items, fh)
        os.replace(tmp_path, self._path)

    # --- raw key/value API -----------------------------------------------

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str, notify: bool = True) -> None:
        self._items[key] = value
        self._persist()
        if notify:
            for listener in list(self._listeners):
                listener(key, value)

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._persist()

    def has_item(self, key: str) -> bool:
        return key in self._items

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def clear(self) -> None:
        self._items.clear()
        self._persist()

    # --- listeners -------------------------------------------------------

    def subscribe(self, listener: WriteListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: WriteListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- JSON helpers ----------------------------------------------------

    def read_json(self, key: str, default: Any = None) -> Any:
        raw = self._items.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"⚠️ Local store key {key} holds invalid JSON")
            return default

    def write_json(self, key: str, value: Any, notify: bool = True) -> None:
        self.set_item(key, json.dumps(value), notify=notify)

    def read_collection(self, key: str) -> List[Dict[str, Any]]:
        """Fresh list of a collection's records; missing or malformed keys read as empty"""
        records = self.read_json(key, [])
        if not isinstance(records, list):
            return []
        return records

    def write_collection(self, key: str, records: List[Dict[str, Any]], notify: bool = True) -> None:
        self.write_json(key, list(records), notify=notify)


__all__ = ["LocalStore", "WriteListener"]
