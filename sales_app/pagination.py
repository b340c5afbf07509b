"""明細のページ分割とセル文字サイズの調整"""
from typing import Sequence

from .models import DeliveryLineItem, Page, PageGroup

PAGE_SIZE = 10  # 1ページあたりの明細行数（合計行を含まない）
MIN_FONT_SIZE = 6

# 列ごとの文字数上限（これを超えると文字サイズを縮小）
COLUMN_MAX_LENGTHS = {
    "product_code": 30,
    "quantity": 8,
    "unit": 4,
    "unit_price": 10,
    "amount": 10,
    "remarks": 11,
}


def count_pages(item_count: int, page_size: int = PAGE_SIZE) -> int:
    """総ページ数（切り上げ）"""
    return (item_count + page_size - 1) // page_size


def chunk_items(items: Sequence[DeliveryLineItem], page_size: int = PAGE_SIZE) -> list[PageGroup]:
    """明細を page_size 件ずつに分割し、ページごとに控え/本紙の組を作る

    並び順はそのまま維持する。空のリストは呼び出し側で事前に弾くこと。
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    total_pages = count_pages(len(items), page_size)
    groups = []
    for page_num in range(total_pages):
        start_idx = page_num * page_size
        page_items = tuple(items[start_idx:start_idx + page_size])
        groups.append(
            PageGroup(
                copy=Page(items=page_items, page_index=page_num + 1, total_pages=total_pages, is_copy=True),
                original=Page(items=page_items, page_index=page_num + 1, total_pages=total_pages, is_copy=False),
            )
        )
    return groups


def fit_font_size(text: str, base_font_size: float, max_length: int, min_font_size: float = MIN_FONT_SIZE) -> float:
    """文字数に応じてフォントサイズを縮小

    上限文字数を超えた分だけ比例して縮小し、min_font_size を下限とする。
    折り返しや切り詰めは行わない。
    """
    if not text or len(text) <= max_length:
        return base_font_size
    return max(min_font_size, base_font_size * max_length / len(text))
