"""
Utility modules for labelbag.
"""
from .logging_config import get_logger, LoggerFactory, LogContext
from .exceptions import *

__all__ = [
    'get_logger',
    'LoggerFactory',
    'LogContext',
    'LabelBagError',
    'CoreEngineError',
    'LossLayerError',
    'DataError',
    'ValidationError',
    'LoadingError',
    'ConfigurationError',
]
