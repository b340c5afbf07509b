"""CSVインポート/エクスポート

エクスポートはExcelで文字化けしないようBOM付きUTF-8で出力する。
インポートはIDをキーに既存データを更新、無ければ追加する。
"""
import csv
import io
from typing import Any, Optional

from loguru import logger

from . import config
from .storage import (
    CUSTOMER_LIST,
    DELIVERY_LIST,
    PRODUCT_LIST,
    USER_LIST,
    JsonListStore,
    customer_store,
    delivery_store,
    product_store,
    user_store,
)
from .utils import next_sequential_id

BOM = "\ufeff"

# データタイプごとのストアとIDフィールド
DATA_TYPES = {
    "company_info": None,
    "customer_list": customer_store,
    "product_list": product_store,
    "user_list": user_store,
    "delivery_list": delivery_store,
}

EXPORT_FILENAMES = {
    "company_info": "company_info.csv",
    "customer_list": CUSTOMER_LIST.replace(".json", ".csv"),
    "product_list": PRODUCT_LIST.replace(".json", ".csv"),
    "user_list": USER_LIST.replace(".json", ".csv"),
    "delivery_list": DELIVERY_LIST.replace(".json", ".csv"),
}


class CsvDataError(ValueError):
    """CSV処理の入力不備（HTTP 400）"""


def _check_data_type(data_type: Optional[str]) -> str:
    if data_type not in DATA_TYPES:
        raise CsvDataError("無効なデータタイプです。")
    return data_type


def _load_records(data_type: str) -> list[dict]:
    if data_type == "company_info":
        company = config.load_company_config()
        return [company] if company else []
    return DATA_TYPES[data_type]().read_all()


def records_to_csv(records: list[dict]) -> str:
    """レコードをCSV文字列に変換（ヘッダーは全レコードのキーの和集合）"""
    fieldnames: list[str] = []
    for record in records:
        for key in record:
            if key not in fieldnames:
                fieldnames.append(key)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fieldnames, lineterminator="\r\n")
    if fieldnames:
        writer.writeheader()
    for record in records:
        writer.writerow({key: record.get(key, "") for key in fieldnames})
    return output.getvalue()


def export_csv(data_type: Optional[str]) -> tuple[str, str]:
    """指定データをBOM付きCSVに変換

    Returns:
        (CSV文字列, ファイル名)
    """
    data_type = _check_data_type(data_type)
    records = _load_records(data_type)
    return BOM + records_to_csv(records), EXPORT_FILENAMES[data_type]


def parse_csv(content: bytes) -> list[dict]:
    """CSVを辞書のリストに変換（BOM除去・前後空白除去・空行スキップ）"""
    text = content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))
    records = []
    for row in reader:
        record = {
            (key or "").strip(): (value or "").strip()
            for key, value in row.items()
            if key is not None
        }
        if any(record.values()):
            records.append(record)
    return records


def _to_int(value: Any) -> int:
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0


def _normalize_product(record: dict) -> dict:
    return {
        **record,
        "product_unitPrice": _to_float(record.get("product_unitPrice")),
        "product_tax": _to_int(record.get("product_tax")),
    }


def _normalize_delivery(record: dict) -> dict:
    quantity = _to_int(record.get("quantity"))
    unit_price = _to_float(record.get("unit_price"))
    total_amount = _to_float(record.get("total_amount"))

    normalized = {
        **record,
        "quantity": quantity,
        "unit_price": unit_price,
        "delivery_tax": _to_int(record.get("delivery_tax")),
        "delivery_quantity": _to_int(record.get("delivery_quantity")),
        "delivery_total_price": _to_float(record.get("delivery_total_price")),
    }
    # 合計金額が空欄・0の場合は 単価 × 数量 で計算
    normalized["total_amount"] = total_amount if total_amount else unit_price * quantity
    return normalized


def import_csv(data_type: Optional[str], content: bytes) -> dict:
    """CSVを取り込んでJSONデータを更新

    Returns:
        dict: {"message": ..., "imported": 件数, "skipped": 件数}

    Raises:
        CsvDataError: データタイプ不正、会社情報が複数行の場合
    """
    data_type = _check_data_type(data_type)
    records = parse_csv(content)

    # 会社情報は1件のみ、既存データを上書き
    if data_type == "company_info":
        if len(records) > 1:
            raise CsvDataError("会社情報は1件のみインポート可能です。")
        if records:
            config.save_company_config(records[0])
        return {"message": "会社情報が正常にインポートされました。", "imported": len(records), "skipped": 0}

    store: JsonListStore = DATA_TYPES[data_type]()
    known_ids = store.ids()
    prepared = []
    skipped = 0

    for record in records:
        if data_type == "product_list":
            record = _normalize_product(record)
        elif data_type == "delivery_list":
            record = _normalize_delivery(record)

        record_id = record.get(store.id_field)
        if not record_id:
            if data_type == "product_list":
                record_id = next_sequential_id(known_ids, "P", 8)
                record[store.id_field] = record_id
            else:
                logger.warning("IDが無いためスキップ ({}): {}", store.id_field, record)
                skipped += 1
                continue

        known_ids.append(str(record_id))
        prepared.append(record)

    added, updated = store.upsert_many(prepared)
    imported = added + updated
    logger.info(
        "CSVインポート: type={} added={} updated={} skipped={}", data_type, added, updated, skipped
    )
    return {"message": "データが正常にインポートされました。", "imported": imported, "skipped": skipped}
