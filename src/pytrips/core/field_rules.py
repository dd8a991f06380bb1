# src/pytrips/core/field_rules.py
"""
Reglas declarativas por campo: selectores estructurales (en orden de prioridad)
y patrones de texto libre (patrón, grupo). Se pueden extender sin tocar el
flujo de control del extractor.
"""
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pytrips.core.enums import CancellationPolicy
from pytrips.core.strategies import CategoryPattern, FieldPattern, fp
from pytrips.utils.normalizations import normalize_amount, normalize_points, normalize_text

MONTHS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?"
MONTH_DAY_YEAR = rf"{MONTHS}\s+\d{{1,2}},?\s+\d{{4}}"
AMOUNT = r"((?:[$€£¥]|USD|EUR|GBP)?\s*\d[\d,]*(?:\.\d{1,2})?)"
STRICT_AMOUNT = r"((?:[$€£¥]|USD|EUR|GBP)\s*\d[\d,]*(?:\.\d{1,2})?|\d[\d,]*\.\d{2})"

CURRENCY_MARK_RE = re.compile(r"[$€£¥]|\b(?:USD|EUR|GBP|JPY|CAD|MXN)\b")

# Patrón genérico "Mes Día, Año": se necesitan al menos dos coincidencias
GENERIC_DATE_RE = re.compile(rf"\b({MONTH_DAY_YEAR})", re.IGNORECASE)


def normalize_money(text: str) -> Optional[str]:
    """Importe desde un elemento estructural: exige símbolo o código de moneda."""
    if not CURRENCY_MARK_RE.search(text):
        return None
    return normalize_amount(text)


def clean_confirmation(text: str) -> Optional[str]:
    """'Confirmation #: 81234567' -> '81234567'"""
    match = re.search(r"([A-Z0-9]{5,})\s*$", text)
    if match:
        return match.group(1)
    return normalize_text(text)


@dataclass(frozen=True)
class FieldRule:
    name: str
    selectors: Tuple[str, ...] = ()
    patterns: Tuple[FieldPattern, ...] = ()
    categories: Tuple[CategoryPattern, ...] = ()
    clean_selector: Optional[Callable[[str], Optional[str]]] = normalize_text
    clean_pattern: Optional[Callable[[str], Optional[str]]] = normalize_text
    detail_only: bool = False

    def with_selectors(self, *selectors: str) -> "FieldRule":
        """Copia con selectores adicionales al frente (mayor prioridad)."""
        return replace(self, selectors=tuple(selectors) + self.selectors)


def hotel_name_patterns(brands: Iterable[str]) -> Tuple[FieldPattern, ...]:
    brand_words = [re.escape(brand.title()) for brand in brands if brand]
    keywords = "|".join(["Hotel", "Resort", "Inn", "Suites"] + brand_words)
    return (
        # Línea completa que parece un nombre propio con palabra de marca
        fp(rf"^((?:[A-Z][\w'&.-]*[ \t]+)*?(?:{keywords})\b[^\n,]{{0,60}})$", flags=re.MULTILINE),
        fp(r"Hotel\s+([^,\n]+)"),
        fp(r"([^,\n]+)\s+Hotel"),
        fp(r"Marriott\s+([^,\n]+)"),
        fp(r"([^,\n]+)\s+Marriott"),
    )


HOTEL_NAME = FieldRule(
    name="hotel_name",
    selectors=(
        ".hotel-name",
        ".property-name",
        "h1, h2, h3, h4",
        '[data-testid*="hotel"]',
        '[data-testid*="property"]',
    ),
)

CONFIRMATION_NUMBER = FieldRule(
    name="confirmation_number",
    selectors=(
        ".confirmation-number",
        ".confirmation",
        '[data-testid*="confirmation"]',
        '[data-testid*="number"]',
    ),
    patterns=(
        fp(r"(?i:confirmation)(?:\s+(?i:number|no\.?|code))?\s*[:#]{0,2}\s*([A-Z0-9]{5,})\b", flags=0),
        fp(r"(?i:reference)(?:\s+(?i:number|no\.?))?\s*[:#]{0,2}\s*([A-Z0-9]{5,})\b", flags=0),
        fp(r"#\s*((?=[A-Z0-9]*\d)[A-Z0-9]{6,})\b", flags=0),
    ),
    clean_selector=clean_confirmation,
)

CHECK_IN = FieldRule(
    name="check_in_date",
    selectors=(
        ".check-in-date",
        ".checkin-date",
        '[data-testid*="checkin"]',
        '[data-testid*="check-in"]',
    ),
    patterns=(
        fp(rf"Check[- ]?in(?:\s+date)?[:\s]+(?:[A-Za-z]+,?\s+)?({MONTH_DAY_YEAR})"),
        fp(r"Check[- ]?in(?:\s+date)?[:\s]+(\d{4}-\d{2}-\d{2})"),
    ),
)

CHECK_OUT = FieldRule(
    name="check_out_date",
    selectors=(
        ".check-out-date",
        ".checkout-date",
        '[data-testid*="checkout"]',
        '[data-testid*="check-out"]',
    ),
    patterns=(
        fp(rf"Check[- ]?out(?:\s+date)?[:\s]+(?:[A-Za-z]+,?\s+)?({MONTH_DAY_YEAR})"),
        fp(r"Check[- ]?out(?:\s+date)?[:\s]+(\d{4}-\d{2}-\d{2})"),
    ),
)

TOTAL_COST = FieldRule(
    name="total_cost",
    selectors=(
        ".total-cost",
        ".total-price",
        ".grand-total",
        '[data-testid*="total"]',
    ),
    patterns=(
        fp(rf"(?<!sub-)(?<!sub )\bTotal(?:\s+(?:cost|price|charges|for stay|for this stay))?[:\s]*{AMOUNT}"),
    ),
    clean_selector=normalize_money,
    clean_pattern=normalize_amount,
)

PRICE_PER_NIGHT = FieldRule(
    name="price_per_night",
    selectors=(
        ".per-night",
        ".nightly-rate",
        '[data-testid*="night"]',
    ),
    patterns=(
        fp(rf"{AMOUNT}\s*(?:/|per|a)\s*night"),
        fp(rf"(?:average nightly rate|nightly rate|avg\.?\s*(?:/|per)\s*night|rate per night)[:\s]*{AMOUNT}"),
    ),
    clean_selector=normalize_money,
    clean_pattern=normalize_amount,
)

BASE_RATE = FieldRule(
    name="base_rate",
    selectors=(
        ".base-rate",
        ".room-rate",
        '[data-testid*="base-rate"]',
        '[data-testid*="room-rate"]',
    ),
    patterns=(
        fp(rf"(?:base|room)\s+rate[:\s]*{STRICT_AMOUNT}"),
        fp(rf"Room\s+charges?[:\s]*{STRICT_AMOUNT}"),
    ),
    clean_selector=normalize_money,
    clean_pattern=normalize_amount,
    detail_only=True,
)

TAXES = FieldRule(
    name="taxes",
    selectors=(
        ".taxes",
        ".tax-amount",
        '[data-testid*="tax"]',
    ),
    patterns=(
        fp(rf"Tax(?:es)?(?:\s+and\s+fees|\s*&\s*fees)?[:\s]*{STRICT_AMOUNT}"),
    ),
    clean_selector=normalize_money,
    clean_pattern=normalize_amount,
    detail_only=True,
)

FEES = FieldRule(
    name="fees",
    selectors=(
        ".fees",
        ".resort-fee",
        '[data-testid*="fee"]',
    ),
    patterns=(
        fp(rf"(?:resort|destination|service|amenity|hotel)\s+fees?[:\s]*{STRICT_AMOUNT}"),
        fp(rf"\bFees?[:\s]*{STRICT_AMOUNT}"),
    ),
    clean_selector=normalize_money,
    clean_pattern=normalize_amount,
    detail_only=True,
)

POINTS_USED = FieldRule(
    name="points_used",
    patterns=(
        fp(r"Points\s+(?:used|redeemed)[:\s]*(\d[\d,]*)"),
        fp(r"Redeemed(?:\s+points)?[:\s]*(\d[\d,]*)"),
        fp(r"(\d[\d,]*)\s+points\s+(?:used|redeemed)"),
        fp(r"(\d[\d,]*)\s*points\b(?!\s+earned)"),
        fp(r"\bpoints(?!\s+earned)[:\s]+(\d[\d,]*)"),
    ),
    clean_pattern=normalize_points,
)

POINTS_EARNED = FieldRule(
    name="points_earned",
    patterns=(
        fp(r"Points\s+earned[:\s]*(\d[\d,]*)"),
        fp(r"(?:will earn|earned|earn)\s+(\d[\d,]*)\s+(?:bonus\s+)?points"),
        fp(r"(\d[\d,]*)\s+points\s+earned"),
    ),
    clean_pattern=normalize_points,
    detail_only=True,
)

PROMO_CODE = FieldRule(
    name="promo_code",
    patterns=(
        fp(r"(?i:promo(?:tion)?(?:\s+code)?)[:\s]+([A-Z0-9]{3,})\b", flags=0),
        fp(r"(?i:\bcode):\s*([A-Z0-9]{3,})\b", flags=0),
    ),
)

ROOM_TYPE = FieldRule(
    name="room_type",
    selectors=(
        ".room-type",
        ".room-name",
        '[data-testid*="room-type"]',
        '[data-testid*="room"]',
    ),
    patterns=(
        fp(r"Room\s+type[:\s]+([^\n]+)"),
        fp(r"^((?:\d+[ \t]+)?(?:King|Queen|Double|Twin|Suite|Studio)\b[^\n]{0,60})$", flags=re.MULTILINE),
    ),
)

PAYMENT_METHOD = FieldRule(
    name="payment_method",
    patterns=(
        fp(r"(?:paid with|payment method|charged to)[:\s]+([^\n]+)"),
        fp(r"\b((?:Visa|Mastercard|MasterCard|American Express|Amex|Discover|JCB)"
           r"(?:\s+(?:card\s+)?ending(?:\s+in)?\s+\d{4}|\s*[x*•]+\s*\d{4})?)", flags=0),
    ),
    detail_only=True,
)

CANCELLATION_POLICY = FieldRule(
    name="cancellation_policy",
    categories=(
        CategoryPattern(re.compile(r"free cancellation|cancel for free|cancel free of charge", re.IGNORECASE),
                        CancellationPolicy.FREE.value),
        CategoryPattern(re.compile(r"non[- ]?refundable", re.IGNORECASE),
                        CancellationPolicy.NON_REFUNDABLE.value),
        CategoryPattern(re.compile(r"cancellation (?:fee|charge|penalty)", re.IGNORECASE),
                        CancellationPolicy.FEE.value),
    ),
    detail_only=True,
)

ADDRESS = FieldRule(
    name="address",
    selectors=(
        ".property-address",
        ".hotel-address",
        ".address",
        '[data-testid*="address"]',
        "address",
    ),
    patterns=(
        fp(r"(?<![\d.,])(\d+[ \t]+[A-Za-z0-9 .'-]+?\s(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Way"
           r"|Place|Pl|Parkway|Pkwy)\b\.?[^\n]*)"),
    ),
)

# Campos directos (las fechas se resuelven aparte)
DETAIL_RULES: List[FieldRule] = [
    CONFIRMATION_NUMBER,
    TOTAL_COST,
    PRICE_PER_NIGHT,
    BASE_RATE,
    TAXES,
    FEES,
    POINTS_USED,
    POINTS_EARNED,
    PROMO_CODE,
    ROOM_TYPE,
    PAYMENT_METHOD,
    CANCELLATION_POLICY,
    ADDRESS,
]

BASIC_RULES: List[FieldRule] = [rule for rule in DETAIL_RULES if not rule.detail_only]

# En la vista de detalle los selectores son de página, no de región
DETAIL_SELECTOR_OVERRIDES: Dict[str, Tuple[str, ...]] = {
    "hotel_name": ('[data-testid*="property-name"]', '[data-testid*="hotel-name"]', "main h1"),
    "confirmation_number": ('[data-testid*="confirmation-number"]', ".reservation-confirmation"),
    "room_type": ('[data-testid*="room-description"]', ".room-description"),
    "total_cost": ('[data-testid*="total-cost"]', ".summary-total"),
}
