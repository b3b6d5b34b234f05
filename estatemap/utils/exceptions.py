"""Custom exceptions for the estate map API"""

class EstateMapException(Exception):
    """Base exception for the estate map API"""
    status_code = 500

    @property
    def kind(self) -> str:
        return type(self).__name__

class InvalidArgument(EstateMapException):
    """Raised when a request parameter is missing or malformed"""
    status_code = 400

class NotFound(EstateMapException):
    """Raised when the requested data does not exist"""
    status_code = 404

class RetrievalFailure(EstateMapException):
    """Raised when the property store cannot be queried"""
    status_code = 500

class DirectionsAPIError(EstateMapException):
    """Raised when the Google Directions API fails"""
    status_code = 502

class ConfigurationError(EstateMapException):
    """Raised when configuration is invalid"""
    status_code = 500
