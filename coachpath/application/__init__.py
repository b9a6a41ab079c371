"""Application layer: DTOs, service interfaces and use cases."""
