"""
Design pattern implementations for labelbag.
"""
from .factory import (
    Factory,
    LossLayerFactory,
    register_loss_layer,
    loss_layer_factory,
    build_loss_layer,
    available_loss_layers,
    ENSEMBLE_TAG,
)

__all__ = [
    'Factory',
    'LossLayerFactory',
    'register_loss_layer',
    'loss_layer_factory',
    'build_loss_layer',
    'available_loss_layers',
    'ENSEMBLE_TAG',
]
