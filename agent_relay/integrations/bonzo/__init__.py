from .client import BonzoApiClient, BonzoApiError, BonzoRateLimitedError
from .config import BonzoSettings, get_bonzo_settings

__all__ = [
    "BonzoApiClient",
    "BonzoApiError",
    "BonzoRateLimitedError",
    "BonzoSettings",
    "get_bonzo_settings",
]
