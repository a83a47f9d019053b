# core_engine/softmax.py

import numpy as np

from patterns.factory import register_loss_layer
from .loss_layer import FlatLossLayer, softmax


@register_loss_layer("softmax")
class SoftmaxLossLayer(FlatLossLayer):
    """
    Multiclass output layer: one softmax over all labels.

    An example with several labels is trained towards the uniform
    distribution over them.
    """
    tag = "softmax"

    def _probabilities(self, scores):
        return softmax(scores)

    def _target(self, labels):
        target = np.zeros(self.nlabels, dtype=np.float32)
        target[list(labels)] = 1.0
        return target / np.sum(target)

    def _loss_value(self, probs, target):
        epsilon = 1e-15
        return float(-np.sum(target * np.log(probs + epsilon)))
