from .trainer import Trainer
from .checkpoint import CheckpointManager

__all__ = [
    'Trainer',
    'CheckpointManager'
]
