"""The JSON-backed database of donated game keys."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from keybot.keys import normalize_game, service_type


@dataclass
class GameKey:
    """One donated key for a game."""

    author: str
    game_name: str
    serial: str
    service_type: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the record as stored on disk."""
        return {
            "Author": self.author,
            "GameName": self.game_name,
            "Serial": self.serial,
            "ServiceType": self.service_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameKey:
        """Build a record from its on-disk form; missing fields are empty."""
        return cls(
            author=data.get("Author") or "",
            game_name=data.get("GameName") or "",
            serial=data.get("Serial") or "",
            service_type=data.get("ServiceType") or "",
        )


Database = dict[str, list[GameKey]]


def load_db(path: str | Path) -> Database:
    """Read a key database; an empty file holds an empty database."""
    text = Path(path).read_text(encoding="utf-8")
    if not text.strip():
        return {}
    raw = json.loads(text)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return {
        name: [GameKey.from_dict(entry) for entry in entries or []]
        for name, entries in raw.items()
    }


def save_db(path: str | Path, db: Database) -> None:
    """Write a key database as compact JSON with sorted names."""
    payload = {name: [key.to_dict() for key in keys] for name, keys in db.items()}
    Path(path).write_text(
        json.dumps(payload, sort_keys=True, separators=(",", ":")), encoding="utf-8"
    )


class KeyStore:
    """Game keys grouped by normalised game name, kept in sync with a file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.db: Database = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.db)

    def load(self) -> None:
        """Merge the file's contents into memory; a missing file adds nothing."""
        with self._lock:
            if self.path.exists():
                self.db.update(load_db(self.path))

    def save(self) -> None:
        """Write the in-memory database to the file."""
        with self._lock:
            save_db(self.path, self.db)

    def check(self) -> None:
        """Fill in missing service types and save."""
        with self._lock:
            for keys in self.db.values():
                for key in keys:
                    if not key.service_type:
                        key.service_type = service_type(key.serial)
            self.save()

    def add_game(self, name: str, key: str, user: str) -> int:
        """Add a key; return the game's key count, or 0 if it was a duplicate."""
        game_name = name.strip()
        serial = key.strip()
        normalized = normalize_game(game_name)
        entry = GameKey(
            author=user,
            game_name=game_name,
            serial=serial,
            service_type=service_type(serial),
        )
        with self._lock:
            self.load()
            existing = self.db.get(normalized, [])
            if any(k.serial == serial for k in existing):
                return 0
            self.db[normalized] = [*existing, entry]
            self.save()
            return len(self.db[normalized])

    def take(self, name: str) -> tuple[GameKey, int] | None:
        """Remove the oldest key for a game; return it with the count left."""
        normalized = normalize_game(name)
        with self._lock:
            self.load()
            keys = self.db.get(normalized)
            if not keys:
                return None
            taken, *rest = keys
            if rest:
                self.db[normalized] = rest
            else:
                del self.db[normalized]
            self.save()
            return taken, len(rest)

    def list_keys(self) -> tuple[str, int]:
        """Describe every game, sorted by name; return the text and game count."""
        with self._lock:
            self.load()
            lines = [
                f"{keys[0].game_name} ({service_type(keys[0].serial)}) : {len(keys)} keys\n"
                for _, keys in sorted(self.db.items())
                if keys
            ]
        return "".join(lines), len(lines)

    def search(self, query: str) -> list[str]:
        """Describe the games whose normalised name contains the query."""
        needle = normalize_game(query)
        with self._lock:
            self.load()
            return [
                f"{keys[0].game_name} ({service_type(keys[0].serial)}): {len(keys)} keys"
                for name, keys in sorted(self.db.items())
                if needle in name and keys
            ]