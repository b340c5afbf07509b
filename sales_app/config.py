"""設定ファイル"""
import json
import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

# パス設定
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(BASE_DIR / "output")))

# 実行環境（production の場合は RENDER_EXTERNAL_URL をCORS許可に追加）
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# PDF設定（日本語フォント）
# 未指定の場合は reportlab 組み込みの HeiseiKakuGo-W5 (CIDフォント) を使用
PDF_FONT_PATH = os.getenv("PDF_FONT_PATH", "")

# ページ結合方式: "compose"（1つのキャンバスに描画）/ "merge"（ページ単位PDFを結合）
PDF_ASSEMBLY_STRATEGY = os.getenv("PDF_ASSEMBLY_STRATEGY", "compose")

COMPANY_INFO_FILENAME = "company_info.json"


def company_info_path() -> Path:
    """自社情報JSONのパス"""
    return DATA_DIR / COMPANY_INFO_FILENAME


# 自社情報（JSON管理）
def load_company_config() -> dict:
    """自社情報をJSONファイルから読み込む

    ファイルが存在しない場合は空の辞書を返す。
    """
    path = company_info_path()
    if not path.exists():
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    # CSVインポート由来でリスト形式になっている場合は先頭を採用
    if isinstance(data, list):
        return data[0] if data else {}
    return data


def save_company_config(config: dict) -> bool:
    """自社情報をJSONファイルに保存"""
    path = company_info_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, ensure_ascii=False, indent=2)
        return True
    except OSError as e:
        logger.error("company_info.jsonの保存エラー: {}", e)
        return False
