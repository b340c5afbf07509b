"""ログ設定"""
import logging
import sys

from loguru import logger

from . import config


def setup_logging(level: str = "") -> None:
    """標準loggingとloguruのシンクを設定"""
    level = level or config.LOG_LEVEL

    logging.basicConfig(level=logging.INFO)
    # pypdf は軽微な構造警告を大量に出すため抑制
    logging.getLogger("pypdf").setLevel(logging.ERROR)

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        backtrace=False,
        diagnose=False,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    )
