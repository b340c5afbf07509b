"""納品書PDF生成モジュール

1枚のA4用紙の上段に控え、下段に本紙を描画する日本式納品書フォーマット。
明細は10行ずつページ分割し、ページごとの小計を合計行に表示する。
"""
from io import BytesIO
from typing import Optional, Sequence
from urllib.parse import quote

from loguru import logger
from pypdf import PdfReader, PdfWriter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from . import config
from .errors import AssemblyError, DeliveryNoteError, RenderError
from .fonts import get_font_name
from .models import (
    NOTE_NUMBER_PLACEHOLDER,
    CompanyInfo,
    CustomerInfo,
    DeliveryLineItem,
    DeliveryNoteRequest,
    GenerationResult,
    Page,
    RenderedCell,
    RenderedGroup,
    RenderedPage,
)
from .pagination import COLUMN_MAX_LENGTHS, PAGE_SIZE, chunk_items, fit_font_size
from .utils import format_number

TABLE_HEADERS = ["品番", "数量", "単位", "単価", "金額", "備考"]
# 列幅の比率（品番, 数量, 単位, 単価, 金額, 備考）
COLUMN_RATIOS = [4.5, 1, 0.5, 1.2, 1.2, 1.6]
COLUMN_KEYS = ["product_code", "quantity", "unit", "unit_price", "amount", "remarks"]
COLUMN_ALIGNS = ["left", "right", "center", "right", "right", "left"]

CELL_FONT_SIZE = 8
TOTAL_FONT_SIZE = 9
TOTAL_LABEL = "合　計"
CLOSING_TEXT = "下記の通り納品致しましたのでご査収ください"
HEADER_FILL = colors.HexColor("#f0f0f0")


def build_title(is_copy: bool, page_index: int, total_pages: int) -> str:
    """タイトル文字列（例: "納品書(控) (1/3ページ)"）"""
    title = "納品書"
    if is_copy:
        title += "(控)"
    if total_pages > 1:
        title += f" ({page_index}/{total_pages}ページ)"
    return title


def _format_quantity(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _customer_lines(customer: CustomerInfo) -> list[tuple[str, float]]:
    return [
        (f"取引先コード: {customer.code}", 9),
        (f"〒{customer.postal_code}", 10),
        (customer.address, 10),
        (f"{customer.name}　御中", 12),
    ]


def _company_lines(company: CompanyInfo) -> list[tuple[str, float]]:
    lines = [
        (company.name, 11),
        (f"〒{company.postal_code}", 9),
        (company.address, 9),
        (f"TEL: {company.phone}", 9),
        (f"FAX: {company.fax}", 9),
    ]
    if company.mail:
        lines.append((f"MAIL: {company.mail}", 9))

    bank_parts = [
        company.bank_name,
        company.bank_branch,
        company.bank_type,
        company.bank_number,
        company.bank_holder,
    ]
    bank_text = " ".join(part for part in bank_parts if part)
    if bank_text:
        lines.append((bank_text, 9))

    lines.append((f"担当者: {company.contact_person}", 9))
    if company.registration_number:
        lines.append((f"登録番号: {company.registration_number}", 9))
    lines.append((CLOSING_TEXT, 9))
    return lines


def _item_row(item: DeliveryLineItem) -> list[RenderedCell]:
    texts = [
        item.product_code,
        _format_quantity(item.quantity),
        item.unit,
        format_number(item.unit_price),
        format_number(item.line_amount),
        item.remarks,
    ]
    return [
        RenderedCell(
            text=text,
            font_size=fit_font_size(text, CELL_FONT_SIZE, COLUMN_MAX_LENGTHS[key]),
            align=align,
        )
        for text, key, align in zip(texts, COLUMN_KEYS, COLUMN_ALIGNS)
    ]


def page_note_number(page: Page, note_number: Optional[str]) -> str:
    """ページに印字する納品書番号（先頭明細の番号 → リクエストの番号 → 未設定）"""
    first_number = page.items[0].delivery_number if page.items else ""
    return first_number or note_number or NOTE_NUMBER_PLACEHOLDER


def render_page(
    page: Page,
    company: CompanyInfo,
    customer: CustomerInfo,
    note_number: Optional[str],
    note_date: str,
    page_size: int = PAGE_SIZE,
) -> RenderedPage:
    """1ページ分のレイアウトを計算

    キャンバスには描画せず、描画内容（文字列・フォントサイズ・行数）を返す。

    印字する納品書番号はページ先頭の明細の番号を優先し、無ければ note_number を使う。

    Raises:
        RenderError: 数値項目が不正などでレイアウト計算に失敗した場合
    """
    try:
        item_rows = [_item_row(item) for item in page.items]
        subtotal = sum(item.line_amount for item in page.items)
        subtotal_text = format_number(subtotal)
    except Exception as e:
        raise RenderError(f"Error rendering page {page.page_index}: {e}") from e

    return RenderedPage(
        title=build_title(page.is_copy, page.page_index, page.total_pages),
        note_number_text=f"納品書No.: {page_note_number(page, note_number)}",
        note_date=note_date,
        customer_lines=_customer_lines(customer),
        company_lines=_company_lines(company),
        header=list(TABLE_HEADERS),
        item_rows=item_rows,
        blank_rows=max(0, page_size - len(item_rows)),
        subtotal=subtotal,
        subtotal_text=subtotal_text,
        is_copy=page.is_copy,
        page_index=page.page_index,
        total_pages=page.total_pages,
    )


def draw_rendered_page(c, page: RenderedPage, font_name: str, x, top_y, width, height):
    """レイアウト済みの1面をキャンバスに描画

    Args:
        c: reportlab キャンバス
        x, top_y: 枠の左上座標
        width, height: 枠のサイズ
    """
    padding = 4 * mm
    inner_left = x + padding
    inner_right = x + width - padding
    inner_width = width - padding * 2

    c.setStrokeColor(colors.black)
    c.setLineWidth(0.8)
    c.rect(x, top_y - height, width, height)

    # ===== タイトル =====
    y = top_y - padding - 12
    c.setFont(font_name, 16)
    title_width = c.stringWidth(page.title, font_name, 16)
    title_x = x + (width - title_width) / 2
    c.drawString(title_x, y, page.title)
    c.setLineWidth(0.5)
    c.line(title_x, y - 2, title_x + title_width, y - 2)

    # ===== 納品書番号・日付（右上）=====
    c.setFont(font_name, 9)
    c.drawRightString(inner_right, top_y - padding - 8, page.note_number_text)
    c.drawRightString(inner_right, top_y - padding - 19, page.note_date)

    # ===== 取引先（左）・自社（右）=====
    info_top = y - 10 * mm
    line_y = info_top
    for text, size in page.customer_lines:
        c.setFont(font_name, size)
        line_y -= size + 3
        c.drawString(inner_left, line_y, text)

    company_y = info_top
    for text, size in page.company_lines:
        c.setFont(font_name, size)
        company_y -= size + 2
        c.drawRightString(inner_right, company_y, text)

    # ===== 明細テーブル =====
    table_top = min(line_y, company_y) - 3 * mm
    _draw_table(c, page, font_name, inner_left, table_top, inner_width)


def _draw_table(c, page: RenderedPage, font_name: str, x, y, table_width):
    """明細テーブル（ヘッダー + 明細/空行 + 合計行）を描画"""
    ratio_total = sum(COLUMN_RATIOS)
    col_widths = [table_width * r / ratio_total for r in COLUMN_RATIOS]
    row_height = 5 * mm
    cell_padding = 1 * mm
    text_offset = 1.6 * mm

    c.setLineWidth(0.5)

    # ヘッダー行
    current_x = x
    c.setFont(font_name, CELL_FONT_SIZE)
    for col_name, col_width in zip(page.header, col_widths):
        c.setFillColor(HEADER_FILL)
        c.rect(current_x, y - row_height, col_width, row_height, fill=1, stroke=1)
        c.setFillColor(colors.black)
        c.drawCentredString(current_x + col_width / 2, y - row_height + text_offset, col_name)
        current_x += col_width

    # 明細行
    row_y = y - row_height
    for row in page.item_rows:
        row_y -= row_height
        current_x = x
        for cell, col_width in zip(row, col_widths):
            c.rect(current_x, row_y, col_width, row_height)
            c.setFont(font_name, cell.font_size)
            if cell.align == "right":
                c.drawRightString(current_x + col_width - cell_padding, row_y + text_offset, cell.text)
            elif cell.align == "center":
                c.drawCentredString(current_x + col_width / 2, row_y + text_offset, cell.text)
            else:
                c.drawString(current_x + cell_padding, row_y + text_offset, cell.text)
            current_x += col_width

    # 空行を追加して10行にそろえる
    for _ in range(page.blank_rows):
        row_y -= row_height
        current_x = x
        for col_width in col_widths:
            c.rect(current_x, row_y, col_width, row_height)
            current_x += col_width

    # 合計行（単価列に「合計」、金額列にページ小計）
    row_y -= row_height
    label_x = x + sum(col_widths[:3])
    c.setFillColor(HEADER_FILL)
    c.rect(label_x, row_y, col_widths[3], row_height, fill=1, stroke=1)
    c.setFillColor(colors.black)
    c.rect(label_x + col_widths[3], row_y, col_widths[4], row_height)
    c.rect(label_x + col_widths[3] + col_widths[4], row_y, col_widths[5], row_height)

    c.setFont(font_name, CELL_FONT_SIZE)
    c.drawCentredString(label_x + col_widths[3] / 2, row_y + text_offset, TOTAL_LABEL)
    c.setFont(font_name, TOTAL_FONT_SIZE)
    amount_right = label_x + col_widths[3] + col_widths[4] - cell_padding
    c.drawRightString(amount_right, row_y + text_offset, page.subtotal_text)


def draw_group(c, group: RenderedGroup, font_name: str):
    """1枚の用紙に控え（上段）と本紙（下段）を描画"""
    page_width, page_height = A4
    margin = 10
    face_width = page_width - margin * 2
    face_height = (page_height - margin * 2) / 2

    for i, face in enumerate(group.faces):
        top_y = page_height - margin - face_height * i
        draw_rendered_page(c, face, font_name, margin, top_y, face_width, face_height)


def _new_canvas(buffer):
    # invariant=1: 作成日時・IDを固定し、同じ入力から同じバイト列を出力する
    c = canvas.Canvas(buffer, pagesize=A4, invariant=1)
    c.setTitle("納品書")
    return c


class DocumentAssembler:
    """描画済みページを1つのPDFにまとめる"""

    name = ""

    def __init__(self, font_name: Optional[str] = None):
        self._font_name = font_name

    @property
    def font_name(self) -> str:
        return self._font_name or get_font_name()

    def assemble(self, groups: Sequence[RenderedGroup]) -> bytes:
        raise NotImplementedError

    def _draw(self, c, group: RenderedGroup):
        try:
            draw_group(c, group, self.font_name)
            c.showPage()
        except DeliveryNoteError:
            raise
        except Exception as e:
            raise RenderError(f"Error drawing page {group.page_index}: {e}") from e


class ComposeAssembler(DocumentAssembler):
    """1つのキャンバスに全ページを描画（標準）"""

    name = "compose"

    def assemble(self, groups: Sequence[RenderedGroup]) -> bytes:
        buffer = BytesIO()
        c = _new_canvas(buffer)
        for group in groups:
            self._draw(c, group)
        c.save()
        return buffer.getvalue()


class MergeAssembler(DocumentAssembler):
    """ページごとに独立したPDFを生成し、pypdfで結合"""

    name = "merge"

    def render_single(self, group: RenderedGroup) -> bytes:
        """1組（控え+本紙）だけのPDFを生成"""
        buffer = BytesIO()
        c = _new_canvas(buffer)
        self._draw(c, group)
        c.save()
        return buffer.getvalue()

    def assemble(self, groups: Sequence[RenderedGroup]) -> bytes:
        page_pdfs = [self.render_single(group) for group in groups]
        return merge_pdf_pages(page_pdfs)


def merge_pdf_pages(page_pdfs: Sequence[bytes]) -> bytes:
    """複数のPDFのページを順番どおりに1つのPDFへコピー

    Raises:
        AssemblyError: 読み込み・書き出しに失敗した場合
    """
    try:
        writer = PdfWriter()
        for pdf_bytes in page_pdfs:
            reader = PdfReader(BytesIO(pdf_bytes))
            for page in reader.pages:
                writer.add_page(page)

        output = BytesIO()
        writer.write(output)
        return output.getvalue()
    except Exception as e:
        raise AssemblyError(f"Error merging PDF pages: {e}") from e


ASSEMBLERS = {
    ComposeAssembler.name: ComposeAssembler,
    MergeAssembler.name: MergeAssembler,
}


def get_assembler(name: str = "", font_name: Optional[str] = None) -> DocumentAssembler:
    """設定名からページ結合方式を選択"""
    name = name or config.PDF_ASSEMBLY_STRATEGY
    try:
        assembler_cls = ASSEMBLERS[name]
    except KeyError:
        raise ValueError(f"Unknown PDF assembly strategy: {name}") from None
    return assembler_cls(font_name=font_name)


def build_filename(note_number: Optional[str]) -> str:
    """ダウンロード用ファイル名（例: "納品書_N001.pdf"）"""
    return f"納品書_{note_number or NOTE_NUMBER_PLACEHOLDER}.pdf"


def content_disposition(filename: str) -> str:
    """RFC 5987 形式の Content-Disposition ヘッダー値"""
    return f"attachment; filename*=UTF-8''{quote(filename, safe='')}"


class DeliveryNoteGenerator:
    """納品書PDF生成クラス

    検証済みリクエストを受け取り、ページ分割 → 各ページ描画 → 結合 を行う。
    リクエスト間で状態は共有しない。
    """

    def __init__(self, assembler: Optional[DocumentAssembler] = None, page_size: int = PAGE_SIZE):
        self.assembler = assembler or get_assembler()
        self.page_size = page_size

    def render(self, request: DeliveryNoteRequest) -> list[RenderedGroup]:
        """全ページのレイアウトを計算（ページ順を維持）"""
        groups = []
        for page_group in chunk_items(request.items, self.page_size):
            groups.append(
                RenderedGroup(
                    copy=render_page(
                        page_group.copy,
                        request.company,
                        request.customer,
                        request.note_number,
                        request.note_date,
                        self.page_size,
                    ),
                    original=render_page(
                        page_group.original,
                        request.company,
                        request.customer,
                        request.note_number,
                        request.note_date,
                        self.page_size,
                    ),
                    page_index=page_group.page_index,
                )
            )
        return groups

    def generate(self, request: DeliveryNoteRequest) -> GenerationResult:
        """納品書PDFを生成

        Raises:
            FontInitError: フォント未初期化
            RenderError: ページ描画の失敗
            AssemblyError: ページ結合の失敗
        """
        # フォント未初期化の場合はここで中断
        font_name = self.assembler.font_name

        groups = self.render(request)
        content = self.assembler.assemble(groups)

        logger.info(
            "納品書PDF生成: items={} pages={} strategy={} font={} bytes={}",
            len(request.items),
            len(groups),
            self.assembler.name,
            font_name,
            len(content),
        )

        return GenerationResult(
            content=content,
            filename=build_filename(request.filename_number),
            total_pages=len(groups),
            item_count=sum(len(group.original.item_rows) for group in groups),
            groups=groups,
        )
