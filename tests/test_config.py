import json

import pytest

from utils.config import ConfigManager, split_names


@pytest.fixture
def manager(tmp_path):
    return ConfigManager(
        global_path=str(tmp_path / "config.global.json"),
        guilds_dir=str(tmp_path / "guilds"),
    )


def test_default_limits(manager) -> None:
    lim = manager.get_limits()
    assert (lim.max_dice, lim.max_sides, lim.max_batch) == (100, 1000, 50)


def test_set_limits_persists(manager, tmp_path) -> None:
    manager.set_limits(max_dice=200)
    raw = json.loads((tmp_path / "config.global.json").read_text(encoding="utf-8"))
    assert raw["limits"]["max_dice"] == 200

    reloaded = ConfigManager(
        global_path=str(tmp_path / "config.global.json"),
        guilds_dir=str(tmp_path / "guilds"),
    )
    assert reloaded.get_limits().max_dice == 200


def test_set_limits_rejects_unknown_or_zero(manager) -> None:
    with pytest.raises(ValueError):
        manager.set_limits(max_cats=3)
    with pytest.raises(ValueError):
        manager.set_limits(max_batch=0)


def test_broken_global_file_falls_back(tmp_path) -> None:
    path = tmp_path / "config.global.json"
    path.write_text("{not json", encoding="utf-8")
    manager = ConfigManager(global_path=str(path), guilds_dir=str(tmp_path / "guilds"))
    assert manager.get_limits().max_dice == 100


def test_global_null_values_fall_back(tmp_path) -> None:
    path = tmp_path / "config.global.json"
    path.write_text(json.dumps({"limits": {"max_dice": None}}), encoding="utf-8")
    manager = ConfigManager(global_path=str(path), guilds_dir=str(tmp_path / "guilds"))
    assert manager.get_limits().max_dice == 100


def test_split_names() -> None:
    assert split_names(" Attack, ATK ,a,, ") == ("attack", ["atk", "a"])
    assert split_names("heal") == ("heal", [])


def test_saved_rolls_round_trip(manager, tmp_path) -> None:
    manager.save_roll(1, 42, "Attack,atk", "1d20 + 5")
    manager.save_roll(1, 42, "Damage", "2d6 + 3")

    reloaded = ConfigManager(
        global_path=str(tmp_path / "config.global.json"),
        guilds_dir=str(tmp_path / "guilds"),
    )
    saved = reloaded.find_saved_roll(1, "Attack")
    assert saved.name == "attack"
    assert saved.aliases == ["atk"]
    assert saved.command == "1d20 + 5"
    assert saved.user_id == 42
    assert [r.name for r in reloaded.list_saved_rolls(1)] == ["attack", "damage"]


def test_find_by_alias(manager) -> None:
    manager.save_roll(1, 1, "attack,atk", "1d20 + 5")
    assert manager.find_saved_roll(1, "atk").command == "1d20 + 5"
    assert manager.find_saved_roll(1, "AT").command == "1d20 + 5"


def test_find_by_prefix(manager) -> None:
    manager.save_roll(1, 1, "fireball", "8d6")
    manager.save_roll(1, 1, "fire", "1d10")
    assert manager.find_saved_roll(1, "FIRE").command == "1d10"
    assert manager.find_saved_roll(1, "fireb").command == "8d6"
    assert manager.find_saved_roll(1, "ice") is None
    assert manager.find_saved_roll(2, "fire") is None


def test_users_keep_separate_rolls(manager) -> None:
    manager.save_roll(1, 1, "attack", "1d20 + 5")
    manager.save_roll(1, 2, "attack", "1d20 + 9")

    assert [(r.user_id, r.command) for r in manager.list_saved_rolls(1)] == [
        (1, "1d20 + 5"), (2, "1d20 + 9"),
    ]
    assert manager.find_saved_roll(1, "attack", user_id=1).command == "1d20 + 5"
    assert manager.find_saved_roll(1, "attack", user_id=2).command == "1d20 + 9"


def test_saving_again_replaces_own_roll(manager) -> None:
    manager.save_roll(1, 1, "attack", "1d20 + 5")
    manager.save_roll(1, 1, "ATTACK,a", "1d20 + 6")
    rolls = manager.list_saved_rolls(1)
    assert len(rolls) == 1
    assert rolls[0].command == "1d20 + 6"
    assert rolls[0].aliases == ["a"]


def test_empty_name_rejected(manager) -> None:
    with pytest.raises(ValueError):
        manager.save_roll(1, 1, " ,atk", "1d6")


def test_delete_only_own_roll(manager) -> None:
    manager.save_roll(1, 1, "heal", "2d4 + 2")
    manager.save_roll(1, 2, "heal", "2d4 + 4")

    assert not manager.delete_saved_roll(1, 3, "heal")
    assert manager.delete_saved_roll(1, 1, "HEAL")
    assert not manager.delete_saved_roll(1, 1, "heal")
    assert [(r.user_id, r.command) for r in manager.list_saved_rolls(1)] == [(2, "2d4 + 4")]
