"""
Custom exception hierarchy for labelbag.
"""
from typing import Any, Dict, Optional


class LabelBagError(Exception):
    """Base exception for all labelbag errors."""
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'details': self.details
        }


# Core Engine Exceptions
class CoreEngineError(LabelBagError):
    """Base exception for core engine errors."""
    pass


class LossLayerError(CoreEngineError):
    """Raised when a loss layer receives input it cannot handle."""
    pass


# Data Exceptions
class DataError(LabelBagError):
    """Base exception for data errors."""
    pass


class ValidationError(DataError):
    """Raised when data validation fails."""
    pass


class LoadingError(DataError):
    """Raised when persisted state cannot be restored."""
    pass


# Configuration Exceptions
class ConfigurationError(LabelBagError):
    """Raised when configuration is invalid."""
    pass
