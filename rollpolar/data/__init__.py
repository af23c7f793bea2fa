"""Dataset storage and the polar service facade."""

from .store import PolarDataStore, sanitize_path
from .service import PolarLoadResult, PolarService

__all__ = [
    'PolarDataStore',
    'sanitize_path',
    'PolarLoadResult',
    'PolarService',
]
