"""ユーティリティ関数"""
import math
import re
from typing import Any, Iterable, Union

Number = Union[int, float]

_FULL_WIDTH_ALNUM = re.compile(r"[Ａ-Ｚａ-ｚ０-９]")
_FULL_WIDTH_OFFSET = 0xFEE0


def to_half_width(value: str, mode: str = "text") -> str:
    """全角英数字を半角英数字に変換

    Args:
        value: 入力値
        mode: "numeric"（数字とハイフンのみ残す）/ "alphanumeric"（英数字のみ残す）/
              "text"（全角英数字のみ半角に変換し、他はそのまま）

    Returns:
        str: 変換後の文字列
    """
    if not value:
        return ""

    converted = _FULL_WIDTH_ALNUM.sub(lambda m: chr(ord(m.group(0)) - _FULL_WIDTH_OFFSET), value)

    if mode == "numeric":
        # 電話番号・郵便番号のハイフンは残す
        converted = re.sub(r"[^0-9-]", "", converted)
    elif mode == "alphanumeric":
        converted = re.sub(r"[^a-zA-Z0-9]", "", converted)

    return converted


def coerce_number(value: Any) -> Any:
    """数値文字列を数値に変換

    None・空文字は0、数値に変換できない値や有限でない値（nan, inf）はそのまま返す（描画時にエラーとなる）
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return value
        return number if math.isfinite(number) else value
    return value


def format_number(value: Number) -> str:
    """数値を3桁区切りで整形（例: 3000 → "3,000"、1234.5 → "1,234.5"）"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"数値ではありません: {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"有限の数値ではありません: {value!r}")
        if value.is_integer():
            return f"{int(value):,}"
        return f"{round(value, 3):,}"
    return f"{value:,}"


def next_sequential_id(existing_ids: Iterable[str], prefix: str, digits: int) -> str:
    """既存IDの最大値+1で連番IDを採番

    例: prefix="C", digits=6 → "C000001"
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(\d{{{digits}}})$")
    max_num = 0
    for existing in existing_ids:
        match = pattern.match(existing or "")
        if match:
            max_num = max(max_num, int(match.group(1)))
    return f"{prefix}{max_num + 1:0{digits}d}"
