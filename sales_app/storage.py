"""JSONファイルによるマスターデータ管理

取引先・商品・納品・ユーザーの一覧を data/ 配下のJSONファイルに保存する。
ファイル全体を読み込んで書き戻すだけの単純な実装で、排他制御は行わない。
"""
import json
from pathlib import Path
from typing import Optional

from . import config

CUSTOMER_LIST = "customer_list.json"
PRODUCT_LIST = "product_list.json"
USER_LIST = "user_list.json"
DELIVERY_LIST = "delivery_list.json"


class JsonListStore:
    """レコードのリストを1つのJSONファイルで管理"""

    def __init__(self, path: Path, id_field: str):
        self.path = path
        self.id_field = id_field

    def read_all(self) -> list[dict]:
        """全件取得（ファイルが無い場合は空リスト）"""
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, list) else [data]

    def write_all(self, records: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)

    def get(self, record_id: str) -> Optional[dict]:
        for record in self.read_all():
            if record.get(self.id_field) == record_id:
                return record
        return None

    def ids(self) -> list[str]:
        return [str(r.get(self.id_field, "")) for r in self.read_all()]

    def add(self, record: dict) -> dict:
        records = self.read_all()
        records.append(record)
        self.write_all(records)
        return record

    def update(self, record_id: str, changes: dict) -> Optional[dict]:
        """既存レコードに変更をマージ（見つからない場合はNone）"""
        records = self.read_all()
        for index, record in enumerate(records):
            if record.get(self.id_field) == record_id:
                # IDは変更させない
                merged = {**record, **changes, self.id_field: record_id}
                records[index] = merged
                self.write_all(records)
                return merged
        return None

    def delete(self, record_id: str) -> bool:
        records = self.read_all()
        remaining = [r for r in records if r.get(self.id_field) != record_id]
        if len(remaining) == len(records):
            return False
        self.write_all(remaining)
        return True

    def upsert_many(self, records: list[dict]) -> tuple[int, int]:
        """IDが一致するレコードは更新、無ければ追加してまとめて書き込む

        Returns:
            (追加件数, 更新件数)
        """
        existing = self.read_all()
        added = 0
        updated = 0
        for record in records:
            record_id = record.get(self.id_field)
            for index, current in enumerate(existing):
                if current.get(self.id_field) == record_id:
                    existing[index] = {**current, **record}
                    updated += 1
                    break
            else:
                existing.append(record)
                added += 1
        self.write_all(existing)
        return added, updated


def customer_store() -> JsonListStore:
    return JsonListStore(config.DATA_DIR / CUSTOMER_LIST, "customer_id")


def product_store() -> JsonListStore:
    return JsonListStore(config.DATA_DIR / PRODUCT_LIST, "product_id")


def user_store() -> JsonListStore:
    return JsonListStore(config.DATA_DIR / USER_LIST, "user_id")


def delivery_store() -> JsonListStore:
    return JsonListStore(config.DATA_DIR / DELIVERY_LIST, "delivery_id")
