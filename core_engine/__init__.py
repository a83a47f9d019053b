from .loss_layer import LossLayer, FlatLossLayer, NO_LABEL, softmax, sigmoid, top_k_pairs
from .softmax import SoftmaxLossLayer
from .ova import OneVsAllLossLayer
from .dictionary import Dictionary
from .model import Model

__all__ = [
    'LossLayer', 'FlatLossLayer', 'NO_LABEL', 'softmax', 'sigmoid', 'top_k_pairs',
    'SoftmaxLossLayer', 'OneVsAllLossLayer',
    'Dictionary', 'Model'
]
