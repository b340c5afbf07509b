"""メインスクリプト

JSONで記述した納品データから納品書PDFを生成する

処理フロー:
1. リクエストJSONを読み込み、検証
2. 明細を10行ずつページ分割
3. 各ページを控え/本紙の2面で描画
4. 1つのPDFに結合して出力

使用方法:
    python -m sales_app.main request.json
    python -m sales_app.main request.json -o output/納品書.pdf
    python -m sales_app.main requests/*.json --strategy merge
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from . import config
from .delivery_note_generator import DeliveryNoteGenerator, get_assembler
from .errors import DeliveryNoteError, FontInitError
from .fonts import initialize_fonts
from .logging_config import setup_logging
from .validation import validate_bulk_request, validate_single_request


def process_request_file(
    request_path: Path,
    generator: DeliveryNoteGenerator,
    output_path: Optional[Path] = None,
    single: bool = False,
) -> Path:
    """リクエストJSONを処理して納品書PDFを生成

    Args:
        request_path: リクエストJSONのパス
        generator: PDF生成クラス
        output_path: 出力パス（省略時は OUTPUT_DIR/納品書_<番号>.pdf）
        single: 個別生成形式（{"delivery": {...}, "customer": {...}}）の場合True

    Returns:
        生成された納品書PDFのパス
    """
    logger.info("処理中: {}", request_path)

    with open(request_path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    request = validate_single_request(payload) if single else validate_bulk_request(payload)
    result = generator.generate(request)

    if output_path is None:
        output_path = config.OUTPUT_DIR / result.filename
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.content)

    logger.info("  明細数: {} / ページ数: {} / 出力: {}", len(request.items), result.total_pages, output_path)
    return output_path


def main(argv: Optional[list[str]] = None) -> int:
    """メイン関数"""
    parser = argparse.ArgumentParser(description="納品データ(JSON)から納品書PDFを生成")
    parser.add_argument("request_files", nargs="+", help="処理するリクエストJSONファイル")
    parser.add_argument(
        "-o",
        "--output",
        help="出力PDFパス（リクエストが1件の場合のみ有効）",
    )
    parser.add_argument(
        "--strategy",
        choices=["compose", "merge"],
        default=config.PDF_ASSEMBLY_STRATEGY,
        help="ページ結合方式",
    )
    parser.add_argument(
        "--single",
        action="store_true",
        help="個別生成形式のリクエストとして扱う",
    )
    parser.add_argument("--font", default=None, help="日本語TrueTypeフォントのパス")

    args = parser.parse_args(argv)
    setup_logging()

    if args.output and len(args.request_files) > 1:
        parser.error("--output はリクエストが1件の場合のみ指定できます")

    try:
        initialize_fonts(args.font)
    except FontInitError as e:
        logger.error("フォントを初期化できません: {}", e)
        return 2

    generator = DeliveryNoteGenerator(assembler=get_assembler(args.strategy))

    success_count = 0
    error_count = 0
    for request_file in args.request_files:
        request_path = Path(request_file)
        if not request_path.exists():
            logger.error("ファイルが見つかりません: {}", request_path)
            error_count += 1
            continue

        try:
            output_path = Path(args.output) if args.output else None
            process_request_file(request_path, generator, output_path, single=args.single)
            success_count += 1
        except (DeliveryNoteError, json.JSONDecodeError, OSError) as e:
            logger.error("{} の処理中にエラーが発生しました: {}", request_path, e)
            error_count += 1

    logger.info("処理完了: 成功 {}, エラー {}", success_count, error_count)
    return 0 if error_count == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
