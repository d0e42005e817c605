from utils.display import (
    CLIPPED_TEXT, batch_count_valid, clip_rolls, combine_saved, display_rolls, escape_str,
    format_batch, format_plain, format_value, has_annotation, is_big_result, split_annotation,
)


def test_split_annotation() -> None:
    assert split_annotation(" 2d6 + 3 ! 火球 傷害 ") == ("2d6 + 3", "火球 傷害")
    assert split_annotation("1d20") == ("1d20", None)
    assert split_annotation("1d20 !") == ("1d20", "")


def test_format_value_trims_zeros() -> None:
    assert format_value(600.0) == "600"
    assert format_value(2.5) == "2.5"
    assert format_value(1 / 3) == "0.33"
    assert format_value(-0.001) == "0"
    assert format_value(float("inf")) == "inf"


def test_display_rolls() -> None:
    assert display_rolls([]) == ""
    assert display_rolls([[4]]) == "`4`"
    assert display_rolls([[3, 5]]) == "`[3 5]`"
    assert display_rolls([[3, 5], [4]]) == "`[[3 5] 4]`"


def test_big_result() -> None:
    assert not is_big_result([[1, 2, 3, 4]])
    assert is_big_result([[1, 2, 3, 4, 5]])
    assert is_big_result([[1], [2]])
    assert not is_big_result([])


def test_clip_rolls() -> None:
    assert clip_rolls("`[1 2]`") == "`[1 2]`"
    assert clip_rolls("x" * 1025) == CLIPPED_TEXT


def test_escape_str() -> None:
    assert escape_str("a_b*c") == "a\\_b\\*c"
    assert escape_str("[1]") == "⁅1⁆"


def test_format_plain_hides_redundant_result() -> None:
    assert format_plain(17.0, [[17]], mention="@me") == "@me: `17`"
    assert format_plain(20.0, [[17]], mention="@me", annotation="攻擊") == "@me `攻擊`: `17` Result: `20`"
    assert format_plain(7.0, []) == ": Result: `7`"


def test_format_batch_aligns_indices() -> None:
    text = format_batch([float(v) for v in range(1, 11)])
    lines = text.split("\n")
    assert lines[0] == " 1: 1"
    assert lines[-1] == "10: 10"


def test_combine_saved_appends_extra_command() -> None:
    assert combine_saved("1d20 + 5", "attack", "+ 2") == ("(1d20 + 5) + 2", "attack")


def test_combine_saved_joins_annotation() -> None:
    assert combine_saved("1d20 + 5", "attack", "+ 1d6 ! 偷襲") == ("(1d20 + 5) + 1d6", "attack; 偷襲")
    assert combine_saved("1d20 + 5", "attack", "! 先攻") == ("1d20 + 5", "attack; 先攻")


def test_combine_saved_without_extra() -> None:
    assert combine_saved("2d6", "damage", "") == ("2d6", "damage")
    assert combine_saved("2d6", "damage", "  !  ") == ("2d6", "damage")


def test_saved_commands_cannot_carry_annotations() -> None:
    assert has_annotation("1d20 ! attack")
    assert not has_annotation("1d20 + 5")


def test_batch_count_bounds() -> None:
    assert not batch_count_valid(1, 50)
    assert batch_count_valid(2, 50)
    assert batch_count_valid(50, 50)
    assert not batch_count_valid(51, 50)
