"""Service-level exceptions raised by storage, rendering and AI helpers"""


class ValuationAppError(Exception):
    """Base class for errors raised by the services layer"""


class NotFoundError(ValuationAppError, FileNotFoundError):
    """A document or blob does not exist"""


class ValidationError(ValuationAppError, ValueError):
    """A JSON document or payload does not match its expected shape"""


class InvalidInputError(ValuationAppError, ValueError):
    """Caller-supplied input rejected before any storage access"""


class RenderError(ValuationAppError):
    """Template rendering failed after every fallback attempt"""

    def __init__(self, message: str, attempts=None):
        super().__init__(message)
        self.attempts = attempts or []


class ExternalServiceError(ValuationAppError):
    """Geocoding, search or generative AI call failed"""


class StorageError(ValuationAppError, IOError):
    """Object storage operation failed for a reason other than a missing blob"""
