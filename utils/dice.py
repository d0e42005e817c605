import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

DIGITS_RE = re.compile(r"[0-9]+")

# 預設上限（可由設定檔覆寫）
MAX_DICE = 100
MAX_SIDES = 1000


class DiceError(ValueError):
    pass


class ModifierKind(Enum):
    BEST = "b"    # 取最高 n 顆
    WORST = "w"   # 取最低 n 顆


@dataclass(frozen=True)
class DiceModifier:
    kind: ModifierKind
    n: int


@dataclass(frozen=True)
class DiceSpec:
    size: int
    count: int
    modifier: Optional[DiceModifier] = None

    def roll(self, rng=None) -> Tuple[List[int], int]:
        """擲出 ``count`` 顆 ``size`` 面骰，回傳 (各骰點數, 計分值)。"""
        rng = rng or random
        rolls = [rng.randint(1, self.size) for _ in range(self.count)]

        if self.modifier is None:
            return rolls, sum(rolls)
        ordered = sorted(rolls, reverse=self.modifier.kind is ModifierKind.BEST)
        return rolls, sum(ordered[:self.modifier.n])

    def __str__(self) -> str:
        text = f"{self.count}d{self.size}"
        if self.modifier is not None:
            text += f"{self.modifier.kind.value}{self.modifier.n}"
        return text


class FailureKind(Enum):
    INT = "int"          # 數字格式錯誤
    FORMAT = "format"    # 骰式結構錯誤
    VALUE = "value"      # 數值超出範圍


@dataclass(frozen=True)
class DiceParseFailure:
    kind: FailureKind
    detail: str


def _parse_positive(text: str, what: str) -> Union[int, DiceParseFailure]:
    if not DIGITS_RE.fullmatch(text):
        return DiceParseFailure(FailureKind.INT, f"{what} 不是整數：{text!r}")
    return int(text)


def parse_dice(token: str, *, max_dice: int = MAX_DICE,
               max_sides: int = MAX_SIDES) -> Union[DiceSpec, DiceParseFailure]:
    """把單一 token 解析成骰式，例如 ``2d20b``、``d6``、``3d10w2``。

    不拋例外：成功回傳 :class:`DiceSpec`，失敗回傳 :class:`DiceParseFailure`。
    """
    processed = token.strip().lower()

    d_index = processed.find("d")
    if d_index < 0:
        return DiceParseFailure(FailureKind.FORMAT, "缺少 d")

    head = processed[:d_index]
    count = _parse_positive(head, "顆數") if head else 1
    if isinstance(count, DiceParseFailure):
        return count

    remaining = processed[d_index + 1:]
    b_index = remaining.find("b")
    w_index = remaining.find("w")
    if b_index >= 0 and w_index >= 0:
        return DiceParseFailure(FailureKind.FORMAT, "b 與 w 不可同時使用")

    mod_index = b_index if b_index >= 0 else w_index
    size_text = remaining[:mod_index] if mod_index >= 0 else remaining
    size = _parse_positive(size_text, "骰面數")
    if isinstance(size, DiceParseFailure):
        return size

    modifier = None
    if mod_index >= 0:
        n_text = remaining[mod_index + 1:]
        n = _parse_positive(n_text, "保留顆數") if n_text else 1
        if isinstance(n, DiceParseFailure):
            return n
        if n < 1 or n > count:
            return DiceParseFailure(FailureKind.VALUE, f"保留顆數 1~{count}")
        kind = ModifierKind.BEST if b_index >= 0 else ModifierKind.WORST
        modifier = DiceModifier(kind, n)

    if not (1 <= count <= max_dice):
        return DiceParseFailure(FailureKind.VALUE, f"骰子顆數 1~{max_dice}")
    if not (2 <= size <= max_sides):
        return DiceParseFailure(FailureKind.VALUE, f"骰面數 2~{max_sides}")

    return DiceSpec(size=size, count=count, modifier=modifier)
