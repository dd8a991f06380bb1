from pytrips.exceptions.base_error import TripExtractorError


class ParsingError(TripExtractorError):
    """Error al procesar el HTML (cambios en la estructura de la web)."""
    pass
