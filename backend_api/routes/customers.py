"""取引先関連のエンドポイント"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from loguru import logger
from pydantic import BaseModel

from sales_app.storage import customer_store
from sales_app.utils import next_sequential_id, to_half_width

router = APIRouter()

# 郵便番号・電話番号は半角数字とハイフンのみ
_NUMERIC_FIELDS = ("customer_postalCode", "customer_phone")


class CustomerCreate(BaseModel):
    customer_name: str
    customer_formalName: str = ""
    customer_postalCode: str = ""
    customer_address: str = ""
    customer_phone: str = ""
    customer_mail: str = ""
    customer_contactPerson: str = ""
    customer_rounding: str = "四捨五入"  # 四捨五入 / 切上げ / 切捨て
    customer_closingDay: str = ""
    customer_paymentTerms: str = ""
    invoiceDeliveryMethod: str = ""


class CustomerUpdate(BaseModel):
    customer_name: Optional[str] = None
    customer_formalName: Optional[str] = None
    customer_postalCode: Optional[str] = None
    customer_address: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_mail: Optional[str] = None
    customer_contactPerson: Optional[str] = None
    customer_rounding: Optional[str] = None
    customer_closingDay: Optional[str] = None
    customer_paymentTerms: Optional[str] = None
    invoiceDeliveryMethod: Optional[str] = None


def _normalize(data: dict) -> dict:
    for field in _NUMERIC_FIELDS:
        if data.get(field):
            data[field] = to_half_width(data[field], "numeric")
    return data


@router.get("/customers")
async def list_customers():
    """取引先一覧を取得（ファイルが無い場合は空リスト）"""
    return customer_store().read_all()


@router.post("/customers", status_code=201)
async def create_customer(customer: CustomerCreate):
    """取引先を登録（IDは C + 6桁の連番）"""
    store = customer_store()
    record = _normalize(customer.model_dump())
    record = {"customer_id": next_sequential_id(store.ids(), "C", 6), **record}
    store.add(record)
    logger.info("取引先を登録: {}", record["customer_id"])
    return record


@router.put("/customers/{customer_id}")
async def update_customer(customer_id: str, changes: CustomerUpdate):
    """取引先を更新（指定された項目のみ）"""
    updated = customer_store().update(customer_id, _normalize(changes.model_dump(exclude_unset=True)))
    if updated is None:
        logger.warning("更新対象の取引先が見つかりません: {}", customer_id)
        raise HTTPException(status_code=404, detail="Customer not found.")
    return {"message": "Customer updated successfully.", "customer": updated}


@router.delete("/customers/{customer_id}")
async def delete_customer(customer_id: str):
    """取引先を削除"""
    if not customer_store().delete(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"message": "Customer deleted successfully"}
