from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
import logging
from typing import Dict, Optional, List, Tuple

from utils.dice import MAX_DICE, MAX_SIDES

logger = logging.getLogger("roll_bot")

@dataclass
class RollLimits:
    max_dice: int = MAX_DICE      # 單一骰式最多幾顆
    max_sides: int = MAX_SIDES    # 骰子最多幾面
    max_batch: int = 50           # 連續擲骰次數上限

@dataclass
class GlobalConfig:
    limits: RollLimits = field(default_factory=RollLimits)

NAME_SEPARATOR = ","

@dataclass
class SavedRoll:
    name: str
    command: str
    user_id: int = 0
    aliases: List[str] = field(default_factory=list)

    def identifiers(self) -> List[str]:
        return [self.name, *self.aliases]

@dataclass
class GuildConfig:
    # 同一使用者的名稱不可重複（名稱一律小寫）
    saved_rolls: List[SavedRoll] = field(default_factory=list)

def split_names(names: str) -> Tuple[str, List[str]]:
    """``"Attack, atk"`` → ``("attack", ["atk"])``：第一個是名稱，其餘是縮寫。"""
    parts = [p.strip() for p in names.strip().lower().split(NAME_SEPARATOR)]
    name, aliases = parts[0], [p for p in parts[1:] if p]
    return name, list(dict.fromkeys(a for a in aliases if a != name))

class ConfigManager:
    def __init__(self, global_path: str = "data/config.global.json", guilds_dir: str = "data/guilds"):
        self.global_path = Path(global_path)
        self.guilds_dir = Path(guilds_dir)
        self.guilds_dir.mkdir(parents=True, exist_ok=True)
        self.global_path.parent.mkdir(parents=True, exist_ok=True)

        self.global_config = self._load_global()
        self.guild_cache: Dict[int, GuildConfig] = {}

    # ---------- Global ----------
    def _load_global(self) -> GlobalConfig:
        try:
            if self.global_path.exists():
                raw = json.loads(self.global_path.read_text(encoding="utf-8"))
                lim = raw.get("limits", {})
                return GlobalConfig(
                    limits=RollLimits(
                        max_dice=int(lim.get("max_dice", MAX_DICE)),
                        max_sides=int(lim.get("max_sides", MAX_SIDES)),
                        max_batch=int(lim.get("max_batch", 50)),
                    )
                )
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"讀取全域設定失敗：{e}")
        return GlobalConfig()

    def _save_global(self):
        payload = asdict(self.global_config)
        self.global_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("全域設定已儲存")

    def get_limits(self) -> RollLimits:
        return self.global_config.limits

    def set_limits(self, **kwargs):
        lim = self.global_config.limits
        for k, v in kwargs.items():
            if not hasattr(lim, k):
                raise ValueError(f"未知的上限欄位：{k}")
            if int(v) < 1:
                raise ValueError(f"{k} 必須 ≥ 1")
            setattr(lim, k, int(v))
        self._save_global()

    # ---------- Guild ----------
    def _guild_file(self, guild_id: int) -> Path:
        return self.guilds_dir / f"{guild_id}.json"

    def _load_guild(self, guild_id: int) -> GuildConfig:
        path = self._guild_file(guild_id)
        if not path.exists():
            return GuildConfig()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            rolls = [
                SavedRoll(
                    name=r["name"].lower(),
                    command=r["command"],
                    user_id=int(r.get("user_id", 0)),
                    aliases=[a.lower() for a in r.get("aliases", [])],
                )
                for r in raw.get("saved_rolls", [])
            ]
            return GuildConfig(saved_rolls=rolls)
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"讀取伺服器設定失敗（{guild_id}）：{e}，使用預設值")
            return GuildConfig()

    def _save_guild(self, guild_id: int):
        cfg = self.guild_cache.get(guild_id)
        if cfg is None:
            return
        path = self._guild_file(guild_id)
        payload = asdict(cfg)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info(f"伺服器設定已儲存：{guild_id}")

    def get_guild_cfg(self, guild_id: int) -> GuildConfig:
        cfg = self.guild_cache.get(guild_id)
        if cfg is None:
            cfg = self._load_guild(guild_id)
            self.guild_cache[guild_id] = cfg
        return cfg

    # 已儲存的擲骰指令
    def save_roll(self, guild_id: int, user_id: int, names: str, command: str) -> SavedRoll:
        """儲存（或覆寫自己的）指令；``names`` 以逗號分隔，第一個是名稱，其餘是縮寫。"""
        name, aliases = split_names(names)
        if not name:
            raise ValueError("名稱不可為空")
        user_id = int(user_id)
        cfg = self.get_guild_cfg(guild_id)
        cfg.saved_rolls = [
            r for r in cfg.saved_rolls if not (r.user_id == user_id and r.name == name)
        ]
        saved = SavedRoll(name=name, command=command, user_id=user_id, aliases=aliases)
        cfg.saved_rolls.append(saved)
        self._save_guild(guild_id)
        return saved

    def find_saved_roll(self, guild_id: int, identifier: str,
                        user_id: Optional[int] = None) -> Optional[SavedRoll]:
        """以名稱或縮寫找指令：完全相符優先於前綴相符，自己的優先於別人的。"""
        key = identifier.strip().lower()
        rolls = self.list_saved_rolls(guild_id)
        if user_id is not None:
            rolls.sort(key=lambda r: r.user_id != user_id)
        for r in rolls:
            if key in r.identifiers():
                return r
        for r in rolls:
            if any(i.startswith(key) for i in r.identifiers()):
                return r
        return None

    def list_saved_rolls(self, guild_id: int) -> List[SavedRoll]:
        rolls = self.get_guild_cfg(guild_id).saved_rolls
        return sorted(rolls, key=lambda r: (r.name, r.user_id))

    def delete_saved_roll(self, guild_id: int, user_id: int, name: str) -> bool:
        """只會刪除該使用者自己的指令。"""
        key = name.strip().lower()
        cfg = self.get_guild_cfg(guild_id)
        kept = [r for r in cfg.saved_rolls if not (r.user_id == int(user_id) and r.name == key)]
        if len(kept) == len(cfg.saved_rolls):
            return False
        cfg.saved_rolls = kept
        self._save_guild(guild_id)
        return True
