# utils/display.py
import math
import re
from typing import List, Optional, Sequence, Tuple

ANNOTATION_CHAR = "!"
MAX_FIELD_VALUE = 1024
CLIPPED_TEXT = "*…clipped because there were too many values*"

ESCAPE_RE = re.compile(r"([\\_*~`|])")


def split_annotation(text: str) -> Tuple[str, Optional[str]]:
    """``"2d6 + 3 ! 傷害"`` → ``("2d6 + 3", "傷害")``；沒有 ``!`` 時註解為 None。"""
    index = text.find(ANNOTATION_CHAR)
    if index < 0:
        return text.strip(), None
    return text[:index].strip(), text[index + 1:].strip()


def has_annotation(command: str) -> bool:
    """儲存的指令不能帶註解。"""
    return ANNOTATION_CHAR in command


def combine_saved(command: str, name: str, additional: str) -> Tuple[str, str]:
    """把儲存的指令與追加的內容合併，回傳 (指令, 原因)。

    ``("1d20", "attack", "+ 2 ! 偷襲")`` → ``("(1d20) + 2", "attack; 偷襲")``
    """
    extra, extra_annotation = split_annotation(additional)
    if extra:
        command = f"({command}) {extra}"
    reason = name
    if extra_annotation:
        reason = f"{reason}; {extra_annotation}"
    return command, reason


def batch_count_valid(count: int, max_batch: int) -> bool:
    return 2 <= count <= max_batch


def escape_str(s: str) -> str:
    """跳脫 Discord Markdown；方括號無法用反斜線跳脫，改成長得像的字元。"""
    return ESCAPE_RE.sub(r"\\\1", s).replace("[", "⁅").replace("]", "⁆")


def format_value(value: float) -> str:
    """最多兩位小數，去掉尾端的 0 與小數點（600.00 → 600，不是 6）。"""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = f"{value:.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def display_rolls(dice_rolls: Sequence[Sequence[int]]) -> str:
    """``[[4]]`` → `` `4` ``；``[[3, 5], [4]]`` → `` `[[3 5] 4]` ``；沒有骰子時回傳空字串。"""
    if not dice_rolls:
        return ""

    parts = []
    for roll in dice_rolls:
        faces = " ".join(str(v) for v in roll)
        parts.append(f"[{faces}]" if len(roll) > 1 else faces)
    body = " ".join(parts)
    if len(dice_rolls) > 1:
        body = f"[{body}]"
    return f"`{body}`"


def is_big_result(dice_rolls: Sequence[Sequence[int]]) -> bool:
    return len(dice_rolls) > 1 or (len(dice_rolls) == 1 and len(dice_rolls[0]) >= 5)


def clip_rolls(rolls_string: str, limit: int = MAX_FIELD_VALUE) -> str:
    return CLIPPED_TEXT if len(rolls_string) > limit else rolls_string


def shows_result(dice_rolls: Sequence[Sequence[int]], value: float) -> bool:
    """單顆骰且點數就是結果時，不必再顯示 Result。"""
    return not (len(dice_rolls) == 1 and len(dice_rolls[0]) == 1
                and float(dice_rolls[0][0]) == value)


def format_plain(value: float, dice_rolls: Sequence[Sequence[int]], *,
                 mention: Optional[str] = None, annotation: Optional[str] = None,
                 command: Optional[str] = None) -> str:
    """一般（非 embed）回覆：``@user `原因`: `[3 5]` Result: `8` ``。"""
    rolls_string = display_rolls(dice_rolls)
    display = mention or ""
    if annotation is not None:
        display += f" `{escape_str(annotation)}`"
    if command is not None:
        display += f" `{escape_str(command)}`"
    display += ": " + rolls_string
    if shows_result(dice_rolls, value):
        if rolls_string:
            display += " "
        display += f"Result: `{format_value(value)}`"
    return display.strip()


def format_batch(results: List[float]) -> str:
    """連續擲骰結果表，編號靠右對齊。"""
    width = len(str(len(results)))
    return "\n".join(f"{i:>{width}}: {format_value(v)}" for i, v in enumerate(results, start=1))
