"""ユーザー関連のエンドポイント"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from sales_app.storage import user_store

router = APIRouter()


class UserCreate(BaseModel):
    user_id: str
    user_name: str
    user_authority: str = ""


@router.get("/users")
async def list_users():
    return user_store().read_all()


@router.post("/users", status_code=201)
async def create_user(user: UserCreate):
    store = user_store()
    if store.get(user.user_id) is not None:
        raise HTTPException(status_code=409, detail="User already exists")
    return store.add(user.model_dump())


@router.delete("/users/{user_id}")
async def delete_user(user_id: str):
    if not user_store().delete(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "User deleted successfully"}
