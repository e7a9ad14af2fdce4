from typing import Any, Dict, Optional


class BaseAPIException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        internal_message: Optional[str] = None,
    ):
        self.message = message  # User-facing message
        self.internal_message = internal_message or message  # Logged, never returned
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__.replace("Error", "").upper()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {"error": self.message}


class ValidationError(BaseAPIException):
    """Raised when request input is missing or malformed"""

    def __init__(self, message: str = "Datos de entrada inválidos"):
        super().__init__(message, 400, "VALIDATION_ERROR")


class NotFoundError(BaseAPIException):
    """Raised when a referenced cart, item, variant or product is absent"""

    def __init__(self, message: str):
        super().__init__(message, 404, "NOT_FOUND")


class InsufficientStockError(BaseAPIException):
    """Raised when a requested quantity exceeds the variant's live stock"""

    def __init__(self, available: int, requested: Optional[int] = None):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Stock insuficiente. Solo hay {available} unidades disponibles",
            400,
            "INSUFFICIENT_STOCK",
        )


class StoreError(BaseAPIException):
    """Raised when a call to the backing store fails"""

    def __init__(self, message: str = "Error en la base de datos", operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message, 500, "STORE_ERROR")


class RelayError(BaseAPIException):
    """
    Raised when the chat platform (or the external agent) rejects a call.

    Side-channel callers catch and log it; explicit relay endpoints and
    tools surface it.
    """

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        super().__init__(message, 502, "RELAY_ERROR")


class StoreConflictError(StoreError):
    """Raised when a write violates a uniqueness or check constraint"""

    def __init__(self, message: str = "Conflicto de integridad en la base de datos", operation: Optional[str] = None):
        super().__init__(message, operation)
