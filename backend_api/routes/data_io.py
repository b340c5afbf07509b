"""CSVインポート/エクスポートのエンドポイント"""
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response
from loguru import logger

from sales_app.csv_io import CsvDataError, export_csv, import_csv

router = APIRouter()


@router.get("/export")
async def export_data(data_type: Optional[str] = Query(None, alias="type")):
    """指定データをBOM付きCSVでダウンロード"""
    try:
        csv_text, filename = export_csv(data_type)
    except CsvDataError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error generating CSV: {}", e)
        raise HTTPException(status_code=500, detail="Error generating CSV")

    return Response(
        content=csv_text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_data(
    file: Optional[UploadFile] = File(None),
    dataType: Optional[str] = Form(None),
):
    """CSVを取り込み（IDが一致するデータは更新、それ以外は追加）"""
    if file is None or not dataType:
        raise HTTPException(status_code=400, detail={"error": "ファイルとデータタイプが必要です。"})

    content = await file.read()
    try:
        return import_csv(dataType, content)
    except CsvDataError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)})
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail={"error": "CSVはUTF-8で保存してください。"})
    except Exception as e:
        logger.exception("Import error: {}", e)
        raise HTTPException(status_code=500, detail={"error": "インポート中にエラーが発生しました。"})
