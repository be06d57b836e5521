"""
Core Exceptions
"""


class BaseCoreException(Exception):
    """Base exception for core modules"""
    pass


class ClientSecretsError(BaseCoreException):
    """Raised when the OAuth2 client secrets cannot be loaded"""
    pass


class AuthenticationExpiredError(BaseCoreException):
    """Raised when stored credentials have expired and cannot be refreshed (invalid_grant)"""
    pass


class ServiceUnavailableError(BaseCoreException):
    """Raised when a Google API service could not be built for the given credentials"""
    pass
