"""
Predefined configuration presets for common use cases.
"""
from typing import Dict, Any


class ConfigPresets:
    """Collection of predefined configuration presets."""

    @staticmethod
    def single_softmax() -> Dict[str, Any]:
        """One flat softmax layer, the baseline."""
        return {
            'loss': 'softmax',
            'dim': 16,
            'lr': 0.1,
            'epoch': 5,
        }

    @staticmethod
    def bagging_softmax() -> Dict[str, Any]:
        """Ensemble of softmax members with member dropout."""
        return {
            'loss': 'softmax',
            'ensemble': True,
            'nbase': 5,
            'bagging': 0.5,
            'dim': 16,
            'lr': 0.1,
            'epoch': 5,
        }

    @staticmethod
    def bagging_ova() -> Dict[str, Any]:
        """Multilabel ensemble of one-vs-all members, dropout disabled."""
        return {
            'loss': 'ova',
            'ensemble': True,
            'nbase': 3,
            'bagging': 1.0,
            'dim': 32,
            'lr': 0.05,
            'epoch': 10,
        }

    @staticmethod
    def get_preset(name: str) -> Dict[str, Any]:
        """Get preset by name."""
        presets = {
            'single_softmax': ConfigPresets.single_softmax,
            'bagging_softmax': ConfigPresets.bagging_softmax,
            'bagging_ova': ConfigPresets.bagging_ova,
        }

        if name not in presets:
            raise ValueError(f"Unknown preset: {name}. Available: {list(presets.keys())}")

        return presets[name]()
