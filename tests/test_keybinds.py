from pos_terminal.errors import PersistenceError, ValidationError
from pos_terminal.keybinds import KeybindingMap, load_keybinds, save_keybinds
from pos_terminal.models import Action
from pos_terminal.persistence import SqliteStore


def test_defaults_bind_every_action():
    keybinds = KeybindingMap.defaults()
    assert keybinds.key_for(Action.HOLD) == "f2"
    assert keybinds.key_for(Action.RECALL) == "f3"
    assert keybinds.key_for(Action.CLEAR) == "f4"
    assert keybinds.key_for(Action.LOCK_SCREEN) == "f5"
    assert keybinds.key_for(Action.EDIT_SELECTED_LINE) == "f7"
    assert keybinds.key_for(Action.DELETE_SELECTED_LINE) == "f8"
    assert keybinds.key_for(Action.PAY) == "f9"
    assert keybinds.key_for(Action.OPEN_CASHIER_MENU) == "f11"
    assert keybinds.duplicate_keys() == []


def test_action_for_key():
    keybinds = KeybindingMap.defaults()
    assert keybinds.action_for_key("f9") == Action.PAY
    assert keybinds.action_for_key("f1") is None


def test_from_dict_keeps_defaults_for_unknown_or_blank_entries():
    keybinds = KeybindingMap.from_dict({"pay": "f10", "hold": "  ", "dance": "f1", "clear": 4})

    assert keybinds.key_for(Action.PAY) == "f10"
    assert keybinds.key_for(Action.HOLD) == "f2"
    assert keybinds.key_for(Action.CLEAR) == "f4"
    assert set(keybinds.as_dict()) == {action.value for action in Action}


def test_with_binding_returns_new_map():
    original = KeybindingMap.defaults()
    rebound = original.with_binding(Action.PAY, "f12")

    assert rebound.key_for(Action.PAY) == "f12"
    assert original.key_for(Action.PAY) == "f9"


def test_missing_action_is_rejected():
    bindings = {action: f"f{i}" for i, action in enumerate(Action, start=1)}
    del bindings[Action.PAY]
    try:
        KeybindingMap(bindings)
    except ValueError as exc:
        assert "pay" in str(exc)
    else:
        raise AssertionError("expected ValueError")


def test_save_rejects_duplicate_keys(store):
    keybinds = KeybindingMap.defaults().with_binding(Action.PAY, "f2")

    result = save_keybinds(store, keybinds)

    assert isinstance(result.error, ValidationError)
    assert "f2" in result.error.message
    assert store.load_keybinds() is None


def test_saved_bindings_load_back(store):
    keybinds = KeybindingMap.defaults().with_binding(Action.LOCK_SCREEN, "ctrl+l")

    assert save_keybinds(store, keybinds).ok

    loaded = load_keybinds(store)
    assert loaded.as_dict() == keybinds.as_dict()


def test_load_falls_back_to_defaults(store, tmp_path):
    assert load_keybinds(store).as_dict() == KeybindingMap.defaults().as_dict()
    broken = SqliteStore(tmp_path)
    assert load_keybinds(broken).as_dict() == KeybindingMap.defaults().as_dict()


def test_save_reports_store_failure(tmp_path):
    result = save_keybinds(SqliteStore(tmp_path), KeybindingMap.defaults())
    assert isinstance(result.error, PersistenceError)
