"""商品関連のエンドポイント"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from sales_app.storage import product_store
from sales_app.utils import next_sequential_id

router = APIRouter()


class ProductCreate(BaseModel):
    product_name: str
    product_shippingName: str = ""
    product_shippingPostalcode: str = ""
    product_shippingAddress: str = ""
    product_shippingPhone: str = ""
    product_tax: int = 10  # 税率(%)
    product_unit: str = ""
    product_unitPrice: float = 0
    product_note: str = ""
    customer_name: str = ""


class ProductUpdate(BaseModel):
    product_name: Optional[str] = None
    product_shippingName: Optional[str] = None
    product_shippingPostalcode: Optional[str] = None
    product_shippingAddress: Optional[str] = None
    product_shippingPhone: Optional[str] = None
    product_tax: Optional[int] = None
    product_unit: Optional[str] = None
    product_unitPrice: Optional[float] = None
    product_note: Optional[str] = None
    customer_name: Optional[str] = None


@router.get("/products")
async def list_products():
    """商品一覧取得"""
    return product_store().read_all()


@router.post("/products", status_code=201)
async def create_product(product: ProductCreate):
    """商品登録（IDは P + 8桁の連番）"""
    store = product_store()
    record = {"product_id": next_sequential_id(store.ids(), "P", 8), **product.model_dump()}
    return store.add(record)


@router.put("/products/{product_id}")
async def update_product(product_id: str, changes: ProductUpdate):
    updated = product_store().update(product_id, changes.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="Product not found.")
    return {"message": "Product updated successfully.", "product": updated}


@router.delete("/products/{product_id}")
async def delete_product(product_id: str):
    if not product_store().delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted successfully"}
