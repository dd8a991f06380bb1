from pytrips.exceptions.base_error import TripExtractorError


class AuthenticationError(TripExtractorError):
    """No hay sesión iniciada en la cuenta (se ven accesos de 'Sign In')."""
    pass
