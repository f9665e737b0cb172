"""User-configurable key -> action table."""

from __future__ import annotations

from typing import Mapping

from pos_terminal.constant import DEFAULT_KEYBINDS
from pos_terminal.errors import PersistenceError, Result, ValidationError
from pos_terminal.models import Action
from pos_terminal.persistence import SqliteStore


class KeybindingMap:
    """One key per action; every action in `Action` is always bound."""

    def __init__(self, bindings: Mapping[Action, str]) -> None:
        missing = set(Action) - set(bindings)
        if missing:
            raise ValueError(f"Unbound actions: {sorted(a.value for a in missing)}")
        self._bindings = dict(bindings)

    @classmethod
    def defaults(cls) -> KeybindingMap:
        return cls({Action(action): key for action, key in DEFAULT_KEYBINDS.items()})

    @classmethod
    def from_dict(cls, raw: Mapping[str, object] | None) -> KeybindingMap:
        """Build from stored data, keeping the default for anything unknown or malformed."""
        bindings = dict(cls.defaults()._bindings)
        for action_name, key in (raw or {}).items():
            try:
                action = Action(action_name)
            except ValueError:
                continue
            if isinstance(key, str) and key.strip():
                bindings[action] = key.strip()
        return cls(bindings)

    def as_dict(self) -> dict[str, str]:
        return {action.value: self._bindings[action] for action in Action}

    def key_for(self, action: Action) -> str:
        return self._bindings[action]

    def action_for_key(self, key: str) -> Action | None:
        for action in Action:
            if self._bindings[action] == key:
                return action
        return None

    def with_binding(self, action: Action, key: str) -> KeybindingMap:
        bindings = dict(self._bindings)
        bindings[action] = key
        return KeybindingMap(bindings)

    def duplicate_keys(self) -> list[str]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for action in Action:
            key = self._bindings[action]
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        return duplicates


def load_keybinds(store: SqliteStore) -> KeybindingMap:
    """Load saved bindings; missing or unreadable settings fall back to defaults."""
    try:
        return KeybindingMap.from_dict(store.load_keybinds())
    except PersistenceError:
        return KeybindingMap.defaults()


def save_keybinds(store: SqliteStore, keybinds: KeybindingMap) -> Result:
    duplicates = keybinds.duplicate_keys()
    if duplicates:
        return Result.failure(ValidationError(f"Key bound to more than one action: {', '.join(duplicates)}"))
    try:
        store.save_keybinds(keybinds.as_dict())
    except PersistenceError as exc:
        return Result.failure(exc)
    return Result.success(keybinds)
