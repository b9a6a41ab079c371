"""Domain exceptions."""


class CoachPathException(Exception):
    """Base exception for the trajectory engine."""
    
    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidTrajectoryInputError(CoachPathException):
    """Required classification input is missing or malformed."""
    
    def __init__(self, field: str, reason: str = None):
        message = f"Invalid {field}"
        if reason:
            message += f": {reason}"
        
        super().__init__(
            message=message,
            code="VALIDATION_ERROR"
        )


class ClassificationServiceError(CoachPathException):
    """Classification service error."""
    
    def __init__(self, service: str, details: str = None):
        message = f"Classification service error in {service}"
        if details:
            message += f": {details}"
        
        super().__init__(
            message=message,
            code="CLASSIFICATION_SERVICE_ERROR"
        )


class IndicatorPersistenceError(CoachPathException):
    """Progress indicator could not be read from or written to storage."""
    
    def __init__(self, operation: str, details: str = None):
        message = f"Persistence error during {operation}"
        if details:
            message += f": {details}"
        
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR"
        )
