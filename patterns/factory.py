"""
Factory pattern implementation for selecting loss layers by tag.
"""
from abc import ABC
from typing import Any, Dict, Type
from utils.logging_config import get_logger
from utils.exceptions import ConfigurationError

logger = get_logger(__name__)

ENSEMBLE_TAG = "bagging"


class Factory(ABC):
    """Abstract factory base class."""
    
    _registry: Dict[str, Type] = {}
    
    @classmethod
    def register(cls, name: str, implementation: Type):
        """Register an implementation with a name."""
        cls._registry[name] = implementation
        logger.debug(f"Registered {name} in {cls.__name__}")
    
    @classmethod
    def create(cls, name: str, *args, **kwargs) -> Any:
        """Create an instance by name."""
        if name not in cls._registry:
            raise ConfigurationError(
                f"Unknown type: {name}",
                details={'available_types': list(cls._registry.keys())}
            )
        
        implementation = cls._registry[name]
        return implementation(*args, **kwargs)
    
    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check whether a name has an implementation."""
        return name in cls._registry
    
    @classmethod
    def list_available(cls) -> list:
        """List all registered implementations."""
        return list(cls._registry.keys())


class LossLayerFactory(Factory):
    """Factory for creating loss layers."""
    _registry: Dict[str, Type] = {}


def register_loss_layer(name: str):
    """Decorator for registering loss layers."""
    def decorator(cls):
        LossLayerFactory.register(name, cls)
        return cls
    return decorator


def loss_layer_factory(args, tag: str):
    """Build an empty loss layer of the given tag bound to ``args``."""
    if not LossLayerFactory.is_registered(tag):
        _import_builtin_layers()
    return LossLayerFactory.create(tag, args)


def build_loss_layer(args):
    """Build the top-level loss layer a model trains: the ensemble or a single member."""
    return loss_layer_factory(args, ENSEMBLE_TAG if args.ensemble else args.loss)


def available_loss_layers() -> list:
    """List loss layer tags, importing the built-in layers first."""
    _import_builtin_layers()
    return LossLayerFactory.list_available()


def _import_builtin_layers():
    # registration happens as a side effect of importing the layer modules
    import core_engine  # noqa: F401
    import ensemble  # noqa: F401
