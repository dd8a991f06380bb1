from pytrips.exceptions.base_error import TripExtractorError


class NetworkError(TripExtractorError):
    """Problemas de navegación, conexión o timeouts del navegador."""
    pass
