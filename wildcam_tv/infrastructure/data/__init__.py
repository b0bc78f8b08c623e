from .http_data_service import HttpDataService
from .fallback import JsonFileFallbackLoader

__all__ = [
    'HttpDataService',
    'JsonFileFallbackLoader',
]
