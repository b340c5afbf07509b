"""自社情報関連のエンドポイント"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from sales_app.config import load_company_config, save_company_config

router = APIRouter()


class CompanyConfig(BaseModel):
    company_name: str
    company_postalCode: str = ""
    company_address: str = ""
    company_phone: str = ""
    company_fax: str = ""
    company_mail: str = ""
    company_contactPerson: str = ""
    company_bankName: str = ""
    company_bankBranch: str = ""
    company_bankType: str = ""
    company_bankNumber: str = ""
    company_bankHolder: str = ""
    company_invoiveNumber: str = ""  # 登録番号（既存データのキー名に合わせる）


@router.get("/company", response_model=CompanyConfig)
async def get_company_config():
    """自社情報を取得"""

    try:
        config = load_company_config()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not config:
        raise HTTPException(status_code=404, detail="Company info not found")

    return CompanyConfig(**{key: str(config.get(key) or "") for key in CompanyConfig.model_fields})


@router.post("/company")
async def save_company_config_endpoint(config: CompanyConfig):
    """自社情報を保存"""

    success = save_company_config(config.model_dump())
    if not success:
        raise HTTPException(status_code=500, detail="保存に失敗しました")

    return {
        "success": True,
        "message": "自社情報を保存しました",
    }
