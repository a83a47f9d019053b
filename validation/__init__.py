"""
Validation utilities for labelbag.
"""
from .validators import (
    Validator,
    TypeValidator,
    RangeValidator,
    ChoiceValidator,
    CompositeValidator,
    validate_positive,
)

__all__ = [
    'Validator',
    'TypeValidator',
    'RangeValidator',
    'ChoiceValidator',
    'CompositeValidator',
    'validate_positive',
]
