import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Tuple

MONTHS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?"

# Orden de búsqueda de una fecha dentro de un texto libre
DATE_SEARCH_PATTERNS = [
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(rf"\b{MONTHS}\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}", re.IGNORECASE),
    re.compile(rf"\b\d{{1,2}}(?:st|nd|rd|th)?\s+{MONTHS},?\s+\d{{4}}", re.IGNORECASE),
    re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}"),
]

DATE_PATTERNS = [
    "%Y-%m-%d",
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%m/%d/%Y",
]

CURRENCY_CODES = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}

AMOUNT_RE = re.compile(
    r"(?P<cur>[$€£¥]|\b(?:USD|EUR|GBP|JPY|CAD|MXN)\b)?\s*"
    r"(?P<num>\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"
)


def _clean_date_text(text: str) -> str:
    text = re.sub(r"(\d)(?:st|nd|rd|th)\b", r"\1", text)
    text = text.replace(",", " ").replace(".", " ")
    text = re.sub(r"\bSept\b", "Sep", text, flags=re.IGNORECASE)
    return " ".join(text.split())


def parse_date(value: Optional[str]) -> Optional[date]:
    """Intenta convertir un texto con fecha a `date`. Devuelve None si no se puede."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value)
    for pattern in DATE_SEARCH_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        candidate = match.group(0)
        if pattern is not DATE_SEARCH_PATTERNS[0]:
            candidate = _clean_date_text(candidate)
        for fmt in DATE_PATTERNS:
            try:
                return datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue
    return None


def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Normaliza una fecha libre ("Fri, Mar 14, 2025") a ISO-8601 ("2025-03-14").
    Si no se puede interpretar devuelve el texto original sin cambios.
    """
    if not value:
        return value

    parsed = parse_date(value)
    if parsed is None:
        return value
    return parsed.isoformat()


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Solo acepta fechas ya normalizadas (YYYY-MM-DD)."""
    if not value or not re.fullmatch(r"\d{4}-\d{2}-\d{2}", str(value).strip()):
        return None
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def compute_nights(check_in: Optional[str], check_out: Optional[str]) -> Optional[int]:
    """
    ceil((check_out - check_in) / 1 día). Sin recorte: si la salida es anterior
    a la entrada el resultado es 0 o negativo.
    """
    start = parse_iso_date(check_in)
    end = parse_iso_date(check_out)
    if start is None or end is None:
        return None
    return math.ceil((end - start).total_seconds() / 86400)


def split_amount(value: Optional[str]) -> Optional[Tuple[str, Decimal]]:
    """Separa símbolo de moneda y valor numérico de un texto con importe."""
    if not value:
        return None

    matches = list(AMOUNT_RE.finditer(str(value)))
    if not matches:
        return None

    # Preferimos el primer importe que venga con moneda explícita
    match = next((m for m in matches if m.group("cur")), matches[0])
    currency = match.group("cur") or "$"
    currency = CURRENCY_CODES.get(currency, currency if len(currency) == 1 else f"{currency} ")

    try:
        amount = Decimal(match.group("num").replace(",", ""))
    except InvalidOperation:
        return None
    return currency, amount


def normalize_amount(value: Optional[str]) -> Optional[str]:
    """'Total: $1,234.56' -> '$1234.56'"""
    parts = split_amount(value)
    if parts is None:
        return None
    currency, amount = parts
    return f"{currency}{amount}"


def per_night_amount(total: Optional[str], nights: Optional[int]) -> Optional[str]:
    """Tarifa por noche a partir del total; None si falta algún dato o nights <= 0."""
    if not total or not nights or nights <= 0:
        return None

    parts = split_amount(total)
    if parts is None:
        return None
    currency, amount = parts
    per_night = (amount / Decimal(nights)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{currency}{per_night}"


def normalize_points(value: Optional[str]) -> Optional[str]:
    """'12,500 points' -> '12500'"""
    if not value:
        return None
    match = re.search(r"\d[\d,]*", str(value))
    if not match:
        return None
    return match.group(0).replace(",", "")


def normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = " ".join(str(value).split())
    return cleaned or None
