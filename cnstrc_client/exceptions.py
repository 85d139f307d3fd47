class ConstructorIOException(Exception):
    """Base exception for Constructor.io client errors"""
    pass

class ValidationError(ConstructorIOException, ValueError):
    """Invalid or missing request parameters, raised before any request is sent"""
    pass

class TransportError(ConstructorIOException):
    """The HTTP transport could not complete the request"""
    pass

class HttpError(ConstructorIOException):
    """Non-2xx response from the API"""

    def __init__(self, message, status=None, status_text=None, url=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.url = url

class AuthenticationError(HttpError):
    """Authentication related errors"""
    pass

class MalformedResponseError(ConstructorIOException):
    """Successful response whose body is missing expected fields"""
    pass
