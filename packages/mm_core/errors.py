from typing import Optional, Dict, Any


class MockMateError(Exception):
    """
    Top-level exception for the MockMate project.
    Every custom exception must inherit from this class.

    Attributes:
        code (str): error identifier (e.g. 'SCORING_ERROR')
        message (str): human readable message
        status_code (int): HTTP status the API layer responds with
        details (Dict[str, Any]): extra debugging information
    """
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


class ConfigurationError(MockMateError):
    """Raised when loading/validating the environment configuration fails."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONF_ERROR", message=message, status_code=500, details=details)


class TransportError(MockMateError):
    """The realtime voice transport could not open or maintain a session."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="TRANSPORT_ERROR", message=message, status_code=502, details=details)


class ScoringError(MockMateError):
    """Scoring backend failed or returned output that does not match the rubric schema."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="SCORING_ERROR", message=message, status_code=502, details=details)


class PersistenceError(MockMateError):
    """A document store write failed."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="PERSISTENCE_ERROR", message=message, status_code=500, details=details)


class ValidationError(MockMateError):
    """Required fields are missing or malformed. Raised before any write."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="VALIDATION_ERROR", message=message, status_code=422, details=details)


class GenerationError(MockMateError):
    """Interview question generation returned unusable output."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="GENERATION_ERROR", message=message, status_code=502, details=details)


class SessionStateError(MockMateError):
    """An operation was requested that is invalid for the current session status."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="SESSION_STATE_ERROR", message=message, status_code=409, details=details)


class NotFoundError(MockMateError):
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="NOT_FOUND", message=message, status_code=404, details=details)


class AuthenticationError(MockMateError):
    def __init__(self, message: str = "Not authenticated", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="AUTH_REQUIRED", message=message, status_code=401, details=details)


class PermissionDeniedError(MockMateError):
    def __init__(self, message: str = "Permission denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="PERMISSION_DENIED", message=message, status_code=403, details=details)
