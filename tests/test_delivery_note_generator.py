from io import BytesIO

import pytest
from pypdf import PdfReader

from conftest import bulk_payload, make_items
from sales_app import fonts
from sales_app.delivery_note_generator import (
    ComposeAssembler,
    DeliveryNoteGenerator,
    MergeAssembler,
    build_filename,
    build_title,
    content_disposition,
    get_assembler,
    merge_pdf_pages,
)
from sales_app.errors import AssemblyError, FontInitError, RenderError
from sales_app.validation import validate_bulk_request


def _request(count=1, **overrides):
    return validate_bulk_request(bulk_payload(count, **overrides))


def _page_streams(pdf_bytes):
    reader = PdfReader(BytesIO(pdf_bytes))
    return [page.get_contents().get_data() for page in reader.pages]


def test_single_item_note(font_name):
    generator = DeliveryNoteGenerator(ComposeAssembler())

    result = generator.generate(_request(1))

    assert result.total_pages == 1
    assert result.item_count == 1
    assert result.filename == "納品書_N001.pdf"
    assert result.content.startswith(b"%PDF")

    group = result.groups[0]
    assert group.copy.title == "納品書(控)"
    assert group.original.title == "納品書"
    assert len(group.original.item_rows) == 1
    assert group.original.blank_rows == 9
    assert group.original.row_count == 10
    assert group.original.note_number_text == "納品書No.: N001"
    assert group.original.note_date == "2025/07/30"

    assert len(PdfReader(BytesIO(result.content)).pages) == 1


def test_twenty_five_items_span_three_pages(font_name):
    generator = DeliveryNoteGenerator(ComposeAssembler())

    result = generator.generate(_request(25))

    assert result.total_pages == 3
    assert result.item_count == 25
    assert len(PdfReader(BytesIO(result.content)).pages) == 3

    last = result.groups[2]
    assert last.copy.title == "納品書(控) (3/3ページ)"
    assert last.original.title == "納品書 (3/3ページ)"
    assert len(last.original.item_rows) == 5
    assert last.original.blank_rows == 5

    codes = [row[0].text for group in result.groups for row in group.original.item_rows]
    assert codes == [f"ITEM-{i:03d}" for i in range(1, 26)]


def test_copy_and_original_show_the_same_rows(font_name):
    groups = DeliveryNoteGenerator(ComposeAssembler()).render(_request(12))

    for group in groups:
        copy_texts = [[cell.text for cell in row] for row in group.copy.item_rows]
        original_texts = [[cell.text for cell in row] for row in group.original.item_rows]
        assert copy_texts == original_texts
        assert group.copy.subtotal == group.original.subtotal


def test_amounts_are_formatted_with_separators(font_name):
    payload = bulk_payload()
    payload["deliveries"] = [{"productCode": "A-1", "quantity": 3, "unit": "個", "unitPrice": 1000}]

    page = DeliveryNoteGenerator(ComposeAssembler()).render(validate_bulk_request(payload))[0].original

    row = [cell.text for cell in page.item_rows[0]]
    assert row == ["A-1", "3", "個", "1,000", "3,000", ""]
    assert page.subtotal == 3000
    assert page.subtotal_text == "3,000"


def test_subtotal_is_per_page(font_name):
    payload = bulk_payload()
    payload["deliveries"] = make_items(10, unit_price=100) + make_items(3, unit_price=1000)

    groups = DeliveryNoteGenerator(ComposeAssembler()).render(validate_bulk_request(payload))

    assert [g.original.subtotal for g in groups] == [1000, 3000]
    assert sum(g.original.subtotal for g in groups) == 4000


def test_missing_note_number_uses_placeholder(font_name):
    result = DeliveryNoteGenerator(ComposeAssembler()).generate(_request(1, delivery_number=None))

    assert result.filename == "納品書_未設定.pdf"
    assert result.groups[0].original.note_number_text == "納品書No.: 未設定"


def test_long_product_code_shrinks_font(font_name):
    payload = bulk_payload()
    payload["deliveries"] = [{"productCode": "X" * 60, "quantity": 1, "unit": "個", "unitPrice": 1}]

    page = DeliveryNoteGenerator(ComposeAssembler()).render(validate_bulk_request(payload))[0].original

    assert 6 <= page.item_rows[0][0].font_size < 8
    assert page.item_rows[0][1].font_size == 8


def test_company_block_lines(font_name):
    page = DeliveryNoteGenerator(ComposeAssembler()).render(_request(1))[0].original

    texts = [text for text, _ in page.company_lines]
    assert texts[0] == "株式会社サンプル商事"
    assert "担当者: 山田" in texts
    assert "登録番号: T1234567890123" in texts
    customer_texts = [text for text, _ in page.customer_lines]
    assert customer_texts[0] == "取引先コード: C000001"
    assert customer_texts[-1] == "株式会社取引先A　御中"


def test_non_numeric_quantity_raises_render_error(font_name):
    payload = bulk_payload()
    payload["deliveries"][0]["quantity"] = "abc"

    with pytest.raises(RenderError):
        DeliveryNoteGenerator(ComposeAssembler()).generate(validate_bulk_request(payload))


def test_compose_output_is_reproducible(font_name):
    generator = DeliveryNoteGenerator(ComposeAssembler())
    request = _request(15)

    assert generator.generate(request).content == generator.generate(request).content


def test_merge_matches_compose_page_contents(font_name):
    request = _request(25)

    composed = DeliveryNoteGenerator(ComposeAssembler()).generate(request)
    merged = DeliveryNoteGenerator(MergeAssembler()).generate(request)

    assert merged.total_pages == composed.total_pages == 3
    assert _page_streams(merged.content) == _page_streams(composed.content)


def test_merge_pdf_pages_rejects_broken_input():
    with pytest.raises(AssemblyError):
        merge_pdf_pages([b"not a pdf"])


def test_get_assembler_by_name():
    assert isinstance(get_assembler("compose"), ComposeAssembler)
    assert isinstance(get_assembler("merge"), MergeAssembler)
    with pytest.raises(ValueError):
        get_assembler("zip")


def test_generate_fails_when_fonts_are_not_initialized(font_name):
    fonts.reset_fonts()
    try:
        with pytest.raises(FontInitError):
            DeliveryNoteGenerator(ComposeAssembler()).generate(_request(1))
    finally:
        fonts.initialize_fonts("")


def test_missing_font_file_raises(tmp_path):
    with pytest.raises(FontInitError):
        fonts.initialize_fonts(str(tmp_path / "missing.ttf"))
    assert not fonts.is_initialized()
    fonts.initialize_fonts("")


def test_title_has_page_suffix_only_for_multi_page():
    assert build_title(False, 1, 1) == "納品書"
    assert build_title(True, 1, 1) == "納品書(控)"
    assert build_title(True, 2, 3) == "納品書(控) (2/3ページ)"


def test_filename_and_content_disposition():
    assert build_filename("N001") == "納品書_N001.pdf"
    assert build_filename("") == "納品書_未設定.pdf"

    header = content_disposition("納品書_N001.pdf")
    assert header.startswith("attachment; filename*=UTF-8''")
    assert "%E7%B4%8D%E5%93%81%E6%9B%B8_N001.pdf" in header


@pytest.mark.parametrize("count", [1, 10, 11, 37])
def test_every_page_has_ten_rows(font_name, count):
    groups = DeliveryNoteGenerator(ComposeAssembler()).render(_request(count))

    assert len(groups) == -(-count // 10)
    assert sum(len(g.original.item_rows) for g in groups) == count
    for group in groups:
        assert group.copy.row_count == group.original.row_count == 10


def test_printed_number_prefers_page_first_item(font_name):
    payload = bulk_payload(12, delivery_number="REQ-1")
    payload["deliveries"][0]["delivery_number"] = "ITEM-1"

    result = DeliveryNoteGenerator(ComposeAssembler()).generate(validate_bulk_request(payload))

    first, second = result.groups
    assert first.copy.note_number_text == first.original.note_number_text == "納品書No.: ITEM-1"
    # 2ページ目の先頭明細には番号が無いのでリクエストの番号
    assert second.original.note_number_text == "納品書No.: REQ-1"
    assert result.filename == "納品書_REQ-1.pdf"


@pytest.mark.parametrize("value", ["nan", "inf", "1e400", float("nan"), float("inf")])
def test_non_finite_price_raises_render_error(font_name, value):
    payload = bulk_payload()
    payload["deliveries"][0]["unitPrice"] = value

    with pytest.raises(RenderError):
        DeliveryNoteGenerator(ComposeAssembler()).generate(validate_bulk_request(payload))
