"""External services module."""

from .classification_service import GatewayClassificationService

__all__ = [
    "GatewayClassificationService",
]
