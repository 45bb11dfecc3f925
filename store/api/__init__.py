from .client import ApiClient, ApiError, client_for

__all__ = ["ApiClient", "ApiError", "client_for"]
