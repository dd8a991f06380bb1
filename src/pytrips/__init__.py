from .config.settings import config, settings
from .browser import TripBrowser
from .core.discovery import DiscoveryEngine
from .core.events import DebugBuffer, ExtractionEvents
from .core.field_extractor import ReservationFieldExtractor
from .core.models import CandidateRegion, ExtractionAck, ReservationRecord
from .core.navigation import NavigationController
from .core.pipeline import RecordPipeline
from .core.session import SessionChecker
from .exceptions import (TripExtractorError, AuthenticationError, NetworkError, ParsingError, DataNotFoundError)
from .services.extraction_service import ReservationExtractionService
from .services.storage import ReservationStore

__all__ = [
    "ReservationExtractionService",
    "ReservationStore",
    "TripBrowser",
    "NavigationController",
    "DiscoveryEngine",
    "ReservationFieldExtractor",
    "RecordPipeline",
    "SessionChecker",
    "ExtractionEvents",
    "DebugBuffer",
    "ReservationRecord",
    "CandidateRegion",
    "ExtractionAck",
    "config",
    "settings",
    "TripExtractorError",
    "AuthenticationError",
    "NetworkError",
    "ParsingError",
    "DataNotFoundError"
]
