"""FastAPI バックエンド - 販売管理システム"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from sales_app import config
from sales_app.delivery_note_generator import get_assembler
from sales_app.fonts import initialize_fonts
from sales_app.logging_config import setup_logging

from backend_api.routes import company, customers, data_io, deliveries, pdf, products, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    """起動時にフォント登録とページ結合方式の解決を行う（どちらか失敗した場合は起動しない）"""
    setup_logging()
    font_name = initialize_fonts()
    app.state.assembler = get_assembler(config.PDF_ASSEMBLY_STRATEGY)
    logger.info("起動完了: font={} strategy={}", font_name, app.state.assembler.name)
    yield


app = FastAPI(
    title="販売管理システム API",
    description="取引先・商品・納品データの管理と納品書PDFの生成を行うAPI",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS設定
allowed_origins = list(config.ALLOWED_ORIGINS)
# 本番環境のドメインも許可
if config.ENVIRONMENT == "production":
    render_url = os.getenv("RENDER_EXTERNAL_URL")
    if render_url:
        allowed_origins.append(render_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ルーター登録（APIは /api プレフィックス）
app.include_router(pdf.router, prefix="/api", tags=["納品書PDF"])
app.include_router(deliveries.router, prefix="/api", tags=["納品データ"])
app.include_router(company.router, prefix="/api", tags=["自社情報"])
app.include_router(customers.router, prefix="/api", tags=["取引先"])
app.include_router(products.router, prefix="/api", tags=["商品"])
app.include_router(users.router, prefix="/api", tags=["ユーザー"])
app.include_router(data_io.router, prefix="/api", tags=["データ入出力"])


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api")
async def api_root():
    """API情報エンドポイント"""
    return {
        "message": "販売管理システム API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend_api.main:app", host="0.0.0.0", port=8000, reload=True)
