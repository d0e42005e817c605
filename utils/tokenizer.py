# utils/tokenizer.py
from typing import List

# 運算子符號（× 與 x 都是乘號，÷ 是除號）
OPERATOR_SYMBOLS = frozenset("^*×x/÷+-()")


def tokenize(command: str) -> List[str]:
    """把指令切成 token：先依空白切開，再把每個運算子符號獨立成一個 token。

    例：``"2d20+1d4"`` → ``["2d20", "+", "1d4"]``
    """
    tokens: List[str] = []
    for chunk in command.split():
        start = 0
        for i, c in enumerate(chunk):
            if c in OPERATOR_SYMBOLS:
                if start != i:
                    tokens.append(chunk[start:i])
                tokens.append(c)
                start = i + 1
        if start < len(chunk):
            tokens.append(chunk[start:])
    return tokens
