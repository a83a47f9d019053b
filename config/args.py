"""Run configuration shared by the model, the loss layers and the trainer."""
from dataclasses import dataclass, asdict, fields, replace
from typing import Dict, Any
import yaml
import json

from utils.exceptions import ConfigurationError, ValidationError
from validation.validators import (
    TypeValidator,
    RangeValidator,
    ChoiceValidator,
    CompositeValidator,
    validate_positive,
)


@dataclass(frozen=True)
class Args:
    """
    Immutable configuration for a training or inference run.

    Components receive the same ``Args`` value and never modify it; a
    component that needs different settings derives a new value with
    :meth:`replace`.
    """
    # Loss layer
    loss: str = "softmax"  # member algorithm: softmax, ova
    ensemble: bool = False  # wrap nbase members of `loss` in a bagging layer
    nbase: int = 1
    bagging: float = 1.0  # member dropout probability, >= 1.0 disables it
    random_tree: bool = False

    # Model
    dim: int = 16
    lr: float = 0.1
    epoch: int = 5
    thread: int = 1
    seed: int = 0

    # Inference
    top_k: int = 5

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    def validate(self) -> 'Args':
        """Check value ranges; returns ``self`` so calls can be chained."""
        from patterns.factory import ENSEMBLE_TAG, available_loss_layers

        member_tags = [t for t in available_loss_layers() if t != ENSEMBLE_TAG]

        checks = [
            ('loss', ChoiceValidator(member_tags, name='loss')),
            ('ensemble', TypeValidator(bool, name='ensemble')),
            ('nbase', CompositeValidator(
                TypeValidator(int, name='nbase'),
                RangeValidator(min_value=0, inclusive=False, name='nbase'),
            )),
            ('bagging', CompositeValidator(
                TypeValidator((int, float), name='bagging'),
                RangeValidator(min_value=0.0, name='bagging'),
            )),
            ('random_tree', TypeValidator(bool, name='random_tree')),
            ('dim', TypeValidator(int, name='dim')),
            ('lr', TypeValidator((int, float), name='lr')),
            ('epoch', TypeValidator(int, name='epoch')),
            ('thread', TypeValidator(int, name='thread')),
            ('top_k', TypeValidator(int, name='top_k')),
            ('seed', TypeValidator(int, name='seed')),
            ('log_level', ChoiceValidator(
                ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], name='log_level'
            )),
        ]
        try:
            for key, validator in checks:
                validator(getattr(self, key))
            for key in ('dim', 'lr', 'epoch', 'thread', 'top_k'):
                validate_positive(getattr(self, key), name=key)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.message}",
                details={'error': e.message, **e.details}
            )
        return self

    def replace(self, **changes) -> 'Args':
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def to_yaml(self, filepath: str):
        """Save config to YAML file."""
        with open(filepath, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def to_json(self, filepath: str):
        """Save config to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'Args':
        """Create config from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {unknown}",
                details={'unknown': unknown, 'allowed': sorted(known)}
            )
        return cls(**config_dict)

    @classmethod
    def from_yaml(cls, filepath: str) -> 'Args':
        """Load config from YAML file."""
        with open(filepath, 'r') as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.from_dict(config_dict)

    @classmethod
    def from_json(cls, filepath: str) -> 'Args':
        """Load config from JSON file."""
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)
