from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pytrips.core.enums import DebugLevel

# --- Registro de salida ---


class ReservationRecord(BaseModel):
    """Una estadía de hotel extraída de la página (lista o detalle)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    hotel_name: Optional[str] = None
    confirmation_number: Optional[str] = None
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    nights: Optional[int] = None

    total_cost: Optional[str] = None
    price_per_night: Optional[str] = None
    base_rate: Optional[str] = None
    taxes: Optional[str] = None
    fees: Optional[str] = None

    points_used: Optional[str] = None
    points_earned: Optional[str] = None
    promo_code: Optional[str] = None
    room_type: Optional[str] = None
    payment_method: Optional[str] = None
    cancellation_policy: Optional[str] = None
    address: Optional[str] = None

    extracted_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    source: Optional[str] = None
    detailed_page: bool = False

    @field_validator("hotel_name", "confirmation_number", "room_type", "address", "payment_method")
    @classmethod
    def _collapse_whitespace(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = " ".join(value.split())
        return cleaned or None

    def to_message(self) -> dict:
        """Forma serializada (camelCase) que consume el popup/almacenamiento."""
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Eventos ---


class ProgressEvent(BaseModel):
    percent: int = Field(ge=0, le=100)
    message: str

    def to_message(self) -> dict:
        return {"action": "progress", "percent": self.percent, "text": self.message}


class DebugEvent(BaseModel):
    level: DebugLevel = DebugLevel.INFO
    message: str
    timestamp: str = Field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))

    def to_message(self) -> dict:
        return {"action": "debug", "type": self.level.value, "message": self.message}


class ExtractionAck(BaseModel):
    """Respuesta inmediata a startExtraction."""
    success: bool
    status: str = "started"


# --- Regiones candidatas ---


@dataclass
class CandidateRegion:
    """
    Handle a una sección del documento que se cree representa una sola reserva.
    `selector` re-ubica la misma región en la página viva.
    """
    index: int
    element: Tag
    strategy: str
    selector: str
    refreshed: bool = field(default=False)

    @property
    def text(self) -> str:
        return self.element.get_text("\n", strip=True)

    @property
    def flat_text(self) -> str:
        return self.element.get_text(" ", strip=True)

    def refresh(self, outer_html: Optional[str]) -> None:
        """Reemplaza el subárbol por una nueva captura (p.ej. tras expandir el panel)."""
        if not outer_html:
            return
        soup = BeautifulSoup(outer_html, "html.parser")
        new_element = next((child for child in soup.children if isinstance(child, Tag)), None)
        if new_element is not None:
            self.element = new_element
            self.refreshed = True
