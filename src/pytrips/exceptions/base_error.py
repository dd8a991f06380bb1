class TripExtractorError(Exception):
    """Excepción base para la librería pytrips."""
    pass
