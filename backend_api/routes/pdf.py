"""納品書PDF生成のエンドポイント"""
from io import BytesIO
from typing import Any, Callable

from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.responses import StreamingResponse
from loguru import logger

from sales_app.delivery_note_generator import DeliveryNoteGenerator, DocumentAssembler, content_disposition
from sales_app.errors import (
    AssemblyError,
    DeliveryNoteError,
    FontInitError,
    InvalidRequestError,
    RenderError,
)
from sales_app.models import DeliveryNoteRequest, GenerationResult
from sales_app.validation import validate_bulk_request, validate_single_request

router = APIRouter()


def _error_detail(error: DeliveryNoteError) -> dict:
    return {"error": error.code, "message": str(error)}


def _pdf_response(result: GenerationResult) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(result.content),
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(result.filename)},
    )


def _generate(
    payload: Any,
    validate: Callable[[Any], DeliveryNoteRequest],
    assembler: DocumentAssembler,
) -> StreamingResponse:
    """検証 → PDF生成 → レスポンス作成

    途中で失敗した場合はPDFを返さず、エラー内容をJSONで返す。
    """
    try:
        request = validate(payload)
    except InvalidRequestError as e:
        logger.warning("Validation Error: {} ({})", e, e.code)
        raise HTTPException(status_code=400, detail=_error_detail(e))

    try:
        result = DeliveryNoteGenerator(assembler).generate(request)
    except FontInitError as e:
        logger.error("フォント未初期化のため生成不可: {}", e)
        raise HTTPException(status_code=503, detail=_error_detail(e))
    except (RenderError, AssemblyError) as e:
        logger.exception("Error generating PDF: {}", e)
        raise HTTPException(status_code=500, detail=_error_detail(e))
    except Exception as e:
        logger.exception("Unexpected error generating PDF: {}", e)
        raise HTTPException(status_code=500, detail={"error": "InternalError", "message": str(e)})

    return _pdf_response(result)


@router.post("/delivery/generate-bulk-pdf")
async def generate_bulk_pdf(request: Request, payload: Any = Body(...)):
    """複数明細から納品書PDFを生成（10明細ごとに1ページ）

    取引先は customers[0] を全ページの代表として使用する。
    """
    return _generate(payload, validate_bulk_request, request.app.state.assembler)


@router.post("/delivery/generate-individual-pdf")
async def generate_individual_pdf(request: Request, payload: Any = Body(...)):
    """納品データ1件から納品書PDFを生成"""
    return _generate(payload, validate_single_request, request.app.state.assembler)
