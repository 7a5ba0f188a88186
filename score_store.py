# score_store.py
from __future__ import annotations

import json
from collections.abc import MutableMapping
from pathlib import Path
from typing import Callable, Iterator, List, Optional

HIGHEST_SCORE_KEY = "highest_score"
DEFAULT_VALUE = "0"

Subscriber = Callable[[str], None]


class JsonFileStorage(MutableMapping):
    """
    Small persistent key-value store backed by one JSON file.

    Every write rewrites the whole file (temp file then replace).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # atomic-ish write: write temp then replace
        tmp_path = self.path.with_suffix(".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        tmp_path.replace(self.path)

    def __getitem__(self, key: str) -> str:
        return self._load()[key]

    def __setitem__(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def __delitem__(self, key: str) -> None:
        data = self._load()
        del data[key]
        self._save(data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._load())

    def __len__(self) -> int:
        return len(self._load())


class HighestScore:
    """
    Observable cell holding the player's best local score as a string.

    Starts from the value persisted under ``highest_score`` (or "0") and
    writes every new value straight back to ``storage``. With no storage
    the value lives only in memory.
    """

    def __init__(self, storage: Optional[MutableMapping] = None, key: str = HIGHEST_SCORE_KEY):
        self._storage = storage
        self._key = key
        initial = storage.get(key) if storage is not None else None
        self._value = initial if initial is not None else DEFAULT_VALUE
        self._subscribers: List[Subscriber] = []
        self.subscribe(self._persist)

    def _persist(self, value: str) -> None:
        if self._storage is not None:
            self._storage[self._key] = value

    def get(self) -> str:
        return self._value

    def set(self, value: str) -> None:
        value = str(value)
        if value == self._value:
            return
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def update(self, fn: Callable[[str], str]) -> None:
        self.set(fn(self._value))

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback`` now and on every change. Returns an unsubscribe function."""
        self._subscribers.append(callback)
        callback(self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def offer(self, score: Optional[int]) -> bool:
        """Raise the stored value to ``score`` if it beats it. Returns True on change."""
        if score is None:
            return False
        try:
            current = int(self._value)
        except ValueError:
            current = 0
        if score <= current:
            return False
        self.set(str(score))
        return True
