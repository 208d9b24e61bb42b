class EliteCardsError(Exception):
    """Base exception for all service-related errors."""
    status_code = 500

    def __init__(self, message: str = "", status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

class ConfigurationError(EliteCardsError):
    """Raised when required configuration is missing or unsafe."""
    status_code = 500

class AuthenticationError(EliteCardsError):
    """Raised when a request carries no valid session or bearer secret."""
    status_code = 401

class AuthorizationError(EliteCardsError):
    """Raised when the session role is not allowed to perform an action."""
    status_code = 403

class ValidationError(EliteCardsError):
    """Raised when data validation fails."""
    status_code = 400

class NotFoundError(EliteCardsError):
    """Base exception for missing records."""
    status_code = 404

class ProductNotFoundError(NotFoundError):
    """Raised when product is not found."""
    pass

class UserNotFoundError(NotFoundError):
    """Raised when a merchant is not found."""
    pass

class LinkageNotFoundError(NotFoundError):
    """Raised when a product has not been added to a merchant's store."""
    pass

class ProductAlreadyAddedError(EliteCardsError):
    """Raised when a merchant already has the product in their store."""
    status_code = 400

class PlatformServiceError(EliteCardsError):
    """Base exception for upstream platform errors."""
    status_code = 502

class ShopifyAPIError(PlatformServiceError):
    """Raised when Shopify API calls fail."""

    def __init__(self, message: str = "", http_status: int = None):
        super().__init__(message)
        self.http_status = http_status

class CardAPIError(PlatformServiceError):
    """Base exception for Pokemon TCG API errors."""
    status_code = 500

class CardAPITimeoutError(CardAPIError):
    """Raised when the card data API does not answer in time."""
    status_code = 504

class CardAPIRateLimitError(CardAPIError):
    """Raised when the card data API rate limits us."""
    status_code = 429

class CardAPIUnavailableError(CardAPIError):
    """Raised when the card data API returns an error or cannot be reached."""
    status_code = 503
