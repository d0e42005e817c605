# utils/expression.py
"""四則運算＋骰式的解析與求值。

解析採 Shunting-Yard 演算法，把中序指令轉成逆波蘭式（RPN）程式；
程式是不可變的 tuple，可以重複求值（連續擲骰就是這樣做的）。
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from utils.dice import (
    MAX_DICE, MAX_SIDES, DiceError, DiceParseFailure, DiceSpec, parse_dice,
)
from utils.tokenizer import tokenize


class RollParseError(DiceError):
    def __init__(self, message: str, cause: Optional[DiceParseFailure] = None):
        super().__init__(message)
        self.cause = cause


class RollEvalError(DiceError):
    pass


class OperatorKind(Enum):
    # (符號, 優先序, 左結合, 真正的運算子)
    EXPONENT = ("^", 4, False, True)
    MULTIPLY = ("*", 3, True, True)
    DIVIDE = ("/", 3, True, True)
    ADD = ("+", 2, True, True)
    SUBTRACT = ("-", 2, True, True)
    PAREN_LEFT = ("(", 0, True, False)
    PAREN_RIGHT = (")", 0, True, False)

    def __init__(self, symbol: str, precedence: int, associates_left: bool, functional: bool):
        self.symbol = symbol
        self.precedence = precedence
        self.associates_left = associates_left
        self.functional = functional


SYMBOL_TO_OPERATOR = {
    "^": OperatorKind.EXPONENT,
    "*": OperatorKind.MULTIPLY,
    "×": OperatorKind.MULTIPLY,
    "x": OperatorKind.MULTIPLY,
    "/": OperatorKind.DIVIDE,
    "÷": OperatorKind.DIVIDE,
    "+": OperatorKind.ADD,
    "-": OperatorKind.SUBTRACT,
    "(": OperatorKind.PAREN_LEFT,
    ")": OperatorKind.PAREN_RIGHT,
}


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Dice:
    spec: DiceSpec


@dataclass(frozen=True)
class Operator:
    kind: OperatorKind


Evaluable = Union[Number, Dice, Operator]
Program = Tuple[Evaluable, ...]


@dataclass
class EvaluationResult:
    value: float
    rolls: List[List[int]] = field(default_factory=list)


# ---------- 解析 ----------
def _classify(token: str, max_dice: int, max_sides: int) -> Evaluable:
    """非運算子 token：先試骰式，再試數字。"""
    spec = parse_dice(token, max_dice=max_dice, max_sides=max_sides)
    if isinstance(spec, DiceSpec):
        return Dice(spec)
    try:
        if "_" in token:
            raise ValueError(token)
        return Number(float(token))
    except ValueError:
        raise RollParseError(f"無法辨識的 token：{token!r}", cause=spec) from None


def parse_roll_command(command: str, *, max_dice: int = MAX_DICE,
                       max_sides: int = MAX_SIDES) -> Program:
    """把擲骰指令解析成 RPN 程式（Shunting-Yard）。

    失敗時拋出 :class:`RollParseError`。
    """
    output: List[Evaluable] = []
    stack: List[OperatorKind] = []

    for token in tokenize(command):
        op = SYMBOL_TO_OPERATOR.get(token) if len(token) == 1 else None
        if op is None:
            output.append(_classify(token, max_dice, max_sides))
            continue

        if op.functional:
            while stack and stack[-1].functional and (
                stack[-1].precedence > op.precedence
                or (stack[-1].precedence == op.precedence and op.associates_left)
            ):
                output.append(Operator(stack.pop()))
            stack.append(op)
        elif op is OperatorKind.PAREN_LEFT:
            stack.append(op)
        else:
            while True:
                if not stack:
                    raise RollParseError("括號不成對")
                top = stack.pop()
                if top is OperatorKind.PAREN_LEFT:
                    break
                output.append(Operator(top))

    while stack:
        op = stack.pop()
        if not op.functional:
            raise RollParseError("括號不成對")
        output.append(Operator(op))

    # 缺少運算元的情況（如 "1 + + 2"）在解析時就擋下
    depth = 0
    for item in output:
        depth += -1 if isinstance(item, Operator) else 1
        if depth < 1:
            raise RollParseError("運算子缺少運算元")
    if output and depth != 1:
        raise RollParseError("運算元多於運算子")

    return tuple(output)


# ---------- 求值 ----------
def _divide(left: float, right: float) -> float:
    if right != 0:
        return left / right
    if left == 0 or math.isnan(left):
        return math.nan
    return math.copysign(1.0, left) * math.copysign(1.0, right) * math.inf


def _power(left: float, right: float) -> float:
    try:
        return math.pow(left, right)
    except OverflowError:
        odd = right.is_integer() and right % 2 == 1
        return -math.inf if left < 0 and odd else math.inf
    except ValueError:
        # 0 的負次方 → inf；負數的非整數次方 → nan
        if left == 0:
            odd = right.is_integer() and right % 2 == 1
            return math.copysign(math.inf, left) if odd else math.inf
        return math.nan


def _apply(kind: OperatorKind, left: float, right: float) -> float:
    if kind is OperatorKind.EXPONENT:
        return _power(left, right)
    if kind is OperatorKind.MULTIPLY:
        return left * right
    if kind is OperatorKind.DIVIDE:
        return _divide(left, right)
    if kind is OperatorKind.ADD:
        return left + right
    if kind is OperatorKind.SUBTRACT:
        return left - right
    raise RollEvalError(f"程式中不應出現括號：{kind.symbol}")


def evaluate_program(program: Program, rng=None) -> EvaluationResult:
    """對 RPN 程式求值；每次呼叫都重新擲骰。

    ``rng`` 需有 ``randint``，預設為 :mod:`random` 模組。
    """
    rng = rng or random
    rolls: List[List[int]] = []
    stack: List[float] = []

    for item in program:
        if isinstance(item, Number):
            stack.append(item.value)
        elif isinstance(item, Dice):
            faces, value = item.spec.roll(rng)
            rolls.append(faces)
            stack.append(float(value))
        else:
            if len(stack) < 2:
                raise RollEvalError("運算子缺少運算元")
            right = stack.pop()
            left = stack.pop()
            stack.append(_apply(item.kind, left, right))

    if len(stack) != 1:
        raise RollEvalError(f"求值結束時剩下 {len(stack)} 個值")

    return EvaluationResult(value=stack[0], rolls=rolls)


def roll(command: str, rng=None, **limits) -> EvaluationResult:
    """解析並求值一次。"""
    return evaluate_program(parse_roll_command(command, **limits), rng)
