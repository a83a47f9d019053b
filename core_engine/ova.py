# core_engine/ova.py

import numpy as np

from patterns.factory import register_loss_layer
from .loss_layer import FlatLossLayer, sigmoid


@register_loss_layer("ova")
class OneVsAllLossLayer(FlatLossLayer):
    """Multilabel output layer: an independent binary classifier per label."""
    tag = "ova"

    def __init__(self, args):
        super().__init__(args)
        self.multilabel = True

    def _probabilities(self, scores):
        return sigmoid(scores)

    def _target(self, labels):
        target = np.zeros(self.nlabels, dtype=np.float32)
        target[list(labels)] = 1.0
        return target

    def _loss_value(self, probs, target):
        epsilon = 1e-15
        return float(-np.sum(
            target * np.log(probs + epsilon) + (1.0 - target) * np.log(1.0 - probs + epsilon)
        ))
