# src/pytrips/utils/dev.py
"""Volcados de depuración (solo con DEBUG y el flag SAVE_* correspondiente)."""
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pytrips.utils.logger import logger
from ..config.settings import config

UNSAFE_FILENAME_RE = re.compile(r"[^\w.-]+")


def _stamped(filename: str) -> str:
    """'detail 1.html' -> '20991231-235959_detail_1.html'"""
    return f"{datetime.now():%Y%m%d-%H%M%S}_{UNSAFE_FILENAME_RE.sub('_', filename)}"


def save_html_debug(html_content: Optional[str], filename: str) -> Optional[Path]:
    """Captura del documento en BASE_DIR/html, sin líneas vacías."""
    if not (config.DEBUG and config.SAVE_HTML) or not html_content:
        return None

    file_path = config.get_html_path() / _stamped(filename)
    compact = "\n".join(line.strip() for line in html_content.splitlines() if line.strip())
    try:
        file_path.write_text(compact, encoding="utf-8")
    except OSError as e:
        logger.error(f"No se pudo guardar la captura {file_path.name}: {e}")
        return None

    logger.debug(f"Captura HTML: {file_path}")
    return file_path


def save_json(data: Any, filename: str) -> Optional[Path]:
    """Registros (o cualquier estructura serializable) en BASE_DIR/data."""
    if not (config.DEBUG and config.SAVE_JSON):
        return None

    if isinstance(data, list):
        data = [item.to_message() if hasattr(item, "to_message") else item for item in data]

    data_path = config.get_data_path(filename)
    try:
        with open(data_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
    except OSError as e:
        logger.error(f"No se pudo guardar {data_path.name}: {e}")
        return None

    logger.info(f"Datos guardados en: {data_path}")
    return data_path
