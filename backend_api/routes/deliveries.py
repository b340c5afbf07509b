"""納品データ関連のエンドポイント"""
import time

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict

from sales_app.storage import delivery_store

router = APIRouter()


class DeliveryCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    product_name: str = ""
    quantity: float = 0
    unit_price: float = 0
    delivery_unit: str = ""
    delivery_note: str = ""  # 備考
    delivery_tax: int = 10
    delivery_orderId: str = ""
    delivery_salesGroup: str = ""
    customer_name: str = ""
    delivery_number: str = ""
    delivery_invoiceNumber: str = ""
    delivery_status: str = "未"  # 済 / 未
    delivery_invoiceStatus: str = "未"
    delivery_date: str = ""


def _new_delivery_id(existing_ids: set[str]) -> str:
    delivery_id = f"del-{int(time.time() * 1000)}"
    suffix = 1
    while delivery_id in existing_ids:
        delivery_id = f"del-{int(time.time() * 1000)}-{suffix}"
        suffix += 1
    return delivery_id


@router.get("/delivery")
async def list_deliveries():
    """納品データ一覧を取得"""
    return delivery_store().read_all()


@router.post("/delivery", status_code=201)
async def create_delivery(delivery: DeliveryCreate):
    """納品データを登録（IDは del-<UNIXミリ秒>）"""
    store = delivery_store()
    record = delivery.model_dump()
    record["delivery_id"] = _new_delivery_id(set(store.ids()))
    return store.add(record)


@router.get("/delivery/{delivery_id}")
async def get_delivery(delivery_id: str):
    record = delivery_store().get(delivery_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Delivery not found")
    return record


@router.delete("/delivery/{delivery_id}")
async def delete_delivery(delivery_id: str):
    if not delivery_store().delete(delivery_id):
        raise HTTPException(status_code=404, detail="Delivery not found")
    return {"message": "Delivery deleted successfully"}
