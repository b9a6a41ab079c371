"""Infrastructure layer: storage and external service adapters."""
