from .authentication_error import AuthenticationError
from .base_error import TripExtractorError
from .data_error import DataNotFoundError
from .network_error import NetworkError
from .parsing_error import ParsingError

__all__ = ['TripExtractorError', 'AuthenticationError', 'DataNotFoundError', 'ParsingError', 'NetworkError']
