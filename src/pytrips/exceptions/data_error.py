from pytrips.exceptions.base_error import TripExtractorError


class DataNotFoundError(TripExtractorError):
    """Ninguna estrategia encontró regiones de reserva en la página."""
    pass
