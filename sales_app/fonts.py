"""日本語フォントの登録

プロセス起動時に一度だけ initialize_fonts() を呼び出す。
失敗した場合はPDF生成を受け付けない（文字化けしたPDFを返さないため）。
"""
from pathlib import Path
from typing import Optional

from loguru import logger
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfbase.ttfonts import TTFont

from . import config
from .errors import FontInitError

TTF_FONT_NAME = "JapaneseFont"
CID_FONT_NAME = "HeiseiKakuGo-W5"

_font_name: Optional[str] = None


def initialize_fonts(font_path: Optional[str] = None) -> str:
    """日本語フォントを登録し、登録名を返す

    Args:
        font_path: TrueTypeフォントのパス（省略時は PDF_FONT_PATH、未設定なら組み込みCIDフォント）

    Raises:
        FontInitError: フォントファイルが無い・読み込めない場合
    """
    global _font_name

    font_path = font_path if font_path is not None else config.PDF_FONT_PATH

    try:
        if font_path:
            font_file = Path(font_path)
            if not font_file.is_file():
                raise FileNotFoundError(f"Font file does not exist at: {font_file}")
            pdfmetrics.registerFont(TTFont(TTF_FONT_NAME, str(font_file)))
            font_name = TTF_FONT_NAME
        else:
            pdfmetrics.registerFont(UnicodeCIDFont(CID_FONT_NAME))
            font_name = CID_FONT_NAME
    except Exception as e:
        _font_name = None
        logger.error("フォント登録エラー: {}: {} (path={})", type(e).__name__, e, font_path or CID_FONT_NAME)
        raise FontInitError(f"Failed to load font for PDF generation: {e}") from e

    _font_name = font_name
    logger.info("Font '{}' registered successfully", font_name)
    return font_name


def get_font_name() -> str:
    """登録済みフォント名（未初期化の場合は FontInitError）"""
    if _font_name is None:
        raise FontInitError("Fonts are not initialized")
    return _font_name


def is_initialized() -> bool:
    return _font_name is not None


def reset_fonts() -> None:
    """登録状態をクリア（テスト用）"""
    global _font_name
    _font_name = None
