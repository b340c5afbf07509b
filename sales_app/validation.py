"""納品書生成リクエストの検証

APIが受け取ったJSON（辞書）を検証し、DeliveryNoteRequest に変換する。
検証は存在チェックのみで、数値の範囲や日付形式はチェックしない。
"""
from typing import Any, Optional

from .errors import MissingCompanyInfoError, MissingCustomerInfoError, MissingItemsError
from .models import CompanyInfo, CustomerInfo, DeliveryLineItem, DeliveryNoteRequest
from .utils import coerce_number

# 自社情報のキー対応（保存形式のキー, 納品書PDF用の短縮キー）
_COMPANY_FIELDS = {
    "name": ("company_name", "name"),
    "postal_code": ("company_postalCode", "postalCode"),
    "address": ("company_address", "address"),
    "phone": ("company_phone", "phone"),
    "fax": ("company_fax", "fax"),
    "mail": ("company_mail", "mail"),
    "contact_person": ("company_contactPerson", "personInCharge"),
    "bank_name": ("company_bankName", "bankName"),
    "bank_branch": ("company_bankBranch", "branchName"),
    "bank_type": ("company_bankType", "accountType"),
    "bank_number": ("company_bankNumber", "accountNumber"),
    "bank_holder": ("company_bankHolder", "accountHolder"),
    "registration_number": ("company_invoiveNumber", "invoiceNumber"),
}


def _first(data: dict, *keys: str, default: Any = "") -> Any:
    """最初に値が入っているキーの値を返す"""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_company_info(data: Any) -> CompanyInfo:
    """自社情報を変換（未指定の場合は MissingCompanyInfo、空のオブジェクトは空欄として扱う）"""
    if not isinstance(data, dict):
        raise MissingCompanyInfoError()

    values = {field: _text(_first(data, *keys)) for field, keys in _COMPANY_FIELDS.items()}
    return CompanyInfo(**values)


def parse_customer_info(data: Any) -> CustomerInfo:
    """取引先情報を変換（未指定・空の場合は MissingCustomerInfo）"""
    if not isinstance(data, dict) or not data:
        raise MissingCustomerInfoError()

    return CustomerInfo(
        code=_text(_first(data, "customer_id", "code")),
        postal_code=_text(_first(data, "customer_postalCode", "postalCode")),
        address=_text(_first(data, "customer_address", "address")),
        name=_text(_first(data, "customer_formalName", "customer_name", "name")),
    )


def parse_line_item(data: dict) -> DeliveryLineItem:
    """一括生成用の明細行を変換"""
    return DeliveryLineItem(
        product_code=_text(_first(data, "productCode", "product_code", "product_name")),
        quantity=coerce_number(_first(data, "quantity", default=0)),
        unit=_text(_first(data, "unit", "delivery_unit")),
        unit_price=coerce_number(_first(data, "unitPrice", "unit_price", default=0)),
        remarks=_text(_first(data, "remarks", "delivery_note")),
        delivery_number=_text(_first(data, "delivery_number")),
    )


def parse_delivery_record(data: dict) -> DeliveryLineItem:
    """個別生成用の納品データ（delivery_list の1件）を変換"""
    return DeliveryLineItem(
        product_code=_text(_first(data, "product_name", "productCode")),
        quantity=coerce_number(_first(data, "quantity", "delivery_quantity", default=0)),
        unit=_text(_first(data, "delivery_unit", "unit")),
        unit_price=coerce_number(_first(data, "unit_price", "delivery_unitPrice", default=0)),
        remarks=_text(_first(data, "delivery_note", "remarks")),
        delivery_number=_text(_first(data, "delivery_number")),
    )


def _note_number(*candidates: Any) -> Optional[str]:
    for candidate in candidates:
        if candidate is not None and str(candidate).strip():
            return str(candidate)
    return None


def validate_bulk_request(payload: Any) -> DeliveryNoteRequest:
    """一括生成リクエストを検証

    Args:
        payload: {"deliveries": [...], "companyInfo": {...}, "customers": [...],
                  "delivery_number": ..., "delivery_date": ...}

    Returns:
        DeliveryNoteRequest: 検証済みリクエスト（取引先は customers[0] を代表として使用）

    Raises:
        MissingItemsError, MissingCompanyInfoError, MissingCustomerInfoError
    """
    if not isinstance(payload, dict):
        raise MissingItemsError()

    deliveries = payload.get("deliveries")
    if not isinstance(deliveries, list) or len(deliveries) == 0:
        raise MissingItemsError("No delivery data provided for bulk generation")
    if not all(isinstance(d, dict) for d in deliveries):
        raise MissingItemsError("Delivery items must be objects")

    company = parse_company_info(payload.get("companyInfo"))

    customers = payload.get("customers")
    if not isinstance(customers, list) or len(customers) == 0:
        raise MissingCustomerInfoError()
    # 代表取引先（明細ごとの取引先は考慮しない）
    customer = parse_customer_info(customers[0])

    items = tuple(parse_line_item(d) for d in deliveries)

    return DeliveryNoteRequest(
        company=company,
        customer=customer,
        items=items,
        note_number=_note_number(payload.get("delivery_number")),
        note_date=_text(payload.get("delivery_date")),
        # ファイル名はリクエスト側の番号のみ（明細側の番号は使わない）
        filename_number=_note_number(payload.get("delivery_number")),
    )


def validate_single_request(payload: Any) -> DeliveryNoteRequest:
    """個別生成リクエストを検証

    Args:
        payload: {"delivery": {...}, "companyInfo": {...}, "customer": {...},
                  "delivery_number": ..., "delivery_date": ...}
    """
    if not isinstance(payload, dict):
        raise MissingItemsError()

    delivery = payload.get("delivery")
    if not isinstance(delivery, dict):
        raise MissingItemsError("No delivery data provided for individual generation")

    company = parse_company_info(payload.get("companyInfo"))
    customer = parse_customer_info(payload.get("customer"))

    return DeliveryNoteRequest(
        company=company,
        customer=customer,
        items=(parse_delivery_record(delivery),),
        note_number=_note_number(payload.get("delivery_number")),
        note_date=_text(_first(delivery, "delivery_date") or payload.get("delivery_date")),
        filename_number=_note_number(delivery.get("delivery_number")),
    )
