"""納品書データの構造定義

リクエストの検証は validation.py で行い、以降は本モジュールの型のみを扱う
"""
from dataclasses import dataclass, field
from typing import Optional

from .utils import Number

NOTE_NUMBER_PLACEHOLDER = "未設定"


@dataclass(frozen=True)
class DeliveryLineItem:
    """納品書の明細行"""
    product_code: str  # 品番
    quantity: Number  # 数量
    unit: str  # 単位
    unit_price: Number  # 単価
    remarks: str = ""  # 備考
    delivery_number: str = ""  # 明細側の納品書番号（ページ先頭の明細の値を印字に優先使用）

    @property
    def line_amount(self) -> Number:
        """金額（数量 × 単価）"""
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class CompanyInfo:
    """自社情報"""
    name: str
    postal_code: str = ""
    address: str = ""
    phone: str = ""
    fax: str = ""
    mail: str = ""
    contact_person: str = ""  # 担当者
    bank_name: str = ""
    bank_branch: str = ""
    bank_type: str = ""  # 普通/当座
    bank_number: str = ""
    bank_holder: str = ""
    registration_number: str = ""  # 適格請求書発行事業者登録番号


@dataclass(frozen=True)
class CustomerInfo:
    """取引先情報"""
    code: str
    postal_code: str = ""
    address: str = ""
    name: str = ""


@dataclass(frozen=True)
class DeliveryNoteRequest:
    """納品書生成リクエスト（検証済み）"""
    company: CompanyInfo
    customer: CustomerInfo  # 一括生成時は先頭の取引先を代表として使用
    items: tuple[DeliveryLineItem, ...]
    note_number: Optional[str] = None  # リクエスト側の納品書番号（印字のフォールバック）
    note_date: str = ""
    filename_number: Optional[str] = None  # ダウンロードファイル名に使う番号


@dataclass(frozen=True)
class Page:
    """1ページ分の明細（控え/本紙のどちらか）"""
    items: tuple[DeliveryLineItem, ...]
    page_index: int  # 1始まり
    total_pages: int
    is_copy: bool


@dataclass(frozen=True)
class PageGroup:
    """1枚の用紙に上下で描画する控えと本紙の組"""
    copy: Page
    original: Page

    @property
    def page_index(self) -> int:
        return self.original.page_index


@dataclass
class RenderedCell:
    """描画済みセル"""
    text: str
    font_size: float
    align: str = "center"  # left / center / right


@dataclass
class RenderedPage:
    """1ページ分のレイアウト結果（キャンバス描画前）"""
    title: str
    note_number_text: str
    note_date: str
    customer_lines: list[tuple[str, float]]  # (テキスト, フォントサイズ)
    company_lines: list[tuple[str, float]]
    header: list[str]
    item_rows: list[list[RenderedCell]]
    blank_rows: int
    subtotal: Number
    subtotal_text: str
    is_copy: bool
    page_index: int
    total_pages: int

    @property
    def row_count(self) -> int:
        """明細行数（空行を含む、合計行を除く）"""
        return len(self.item_rows) + self.blank_rows


@dataclass
class RenderedGroup:
    """描画済みの控え/本紙の組"""
    copy: RenderedPage
    original: RenderedPage
    page_index: int = 0

    @property
    def faces(self) -> list[RenderedPage]:
        """上段（控え）→ 下段（本紙）の順"""
        return [self.copy, self.original]


@dataclass
class GenerationResult:
    """PDF生成結果"""
    content: bytes
    filename: str
    total_pages: int
    item_count: int = 0
    groups: list[RenderedGroup] = field(default_factory=list)
