# core_engine/loss_layer.py

import pickle
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

import numpy as np

from utils.exceptions import LoadingError, LossLayerError

# Label id of a padding entry in a shortlist that has fewer candidates than requested.
NO_LABEL = -1

Shortlist = List[Tuple[float, int]]


def softmax(scores: np.ndarray) -> np.ndarray:
    """Numerically stable softmax over a 1-d score vector."""
    exp_scores = np.exp(scores - np.max(scores))
    return exp_scores / np.sum(exp_scores)


def sigmoid(scores: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-scores))


def top_k_pairs(probs: np.ndarray, k: int) -> Shortlist:
    """
    Returns the k most probable ``(prob, label)`` pairs, highest first.
    Equal probabilities are ordered by ascending label id.
    """
    labels = np.arange(len(probs))
    order = np.lexsort((labels, -probs))[:max(k, 0)]
    return [(float(probs[i]), int(i)) for i in order]


class LossLayer(ABC):
    """
    Base class of the output layers a model trains against.

    A loss layer owns a contiguous block of rows in the model's output
    matrix, starting at ``shift``. It computes the loss of one example and
    applies the update itself, and answers top-k and single-label probability
    queries at inference time. Implementations must tolerate concurrent
    ``loss`` calls from several threads sharing the same model matrices.
    """
    tag = None

    def __init__(self, args):
        self.args = args
        self.shift = 0
        self.multilabel = False

    @abstractmethod
    def setup(self, args, dictionary):
        """Size the layer for the dictionary's labels."""

    @abstractmethod
    def loss(self, input_ids: Sequence[int], labels: Sequence[int], lr: float, model) -> float:
        """Compute the example loss and update the model in place."""

    @abstractmethod
    def find_k_best(self, k: int, heap: Shortlist, hidden: np.ndarray, model):
        """Overwrite ``heap`` with the top k ``(prob, label)`` pairs, highest first."""

    @abstractmethod
    def get_label_p(self, label: int, hidden: np.ndarray, model) -> float:
        """Probability of ``label``; 0.0 for labels the layer does not contain."""

    def get_labels_p(self, labels: Sequence[int], hidden: np.ndarray, model) -> List[float]:
        """Probabilities of several labels for the same ``hidden``."""
        return [self.get_label_p(label, hidden, model) for label in labels]

    @abstractmethod
    def get_size(self) -> int:
        """Number of output matrix rows the layer uses."""

    @abstractmethod
    def save(self, stream):
        pass

    @abstractmethod
    def load(self, stream):
        pass

    def set_shift(self, shift: int):
        self.shift = shift

    def get_shift(self) -> int:
        return self.shift

    def is_multilabel(self) -> bool:
        return self.multilabel


class FlatLossLayer(LossLayer):
    """
    One output row per label, scored directly against the hidden vector.

    Subclasses choose how scores become probabilities and which loss is
    minimised.
    """

    def __init__(self, args):
        super().__init__(args)
        self.nlabels = 0

    def setup(self, args, dictionary):
        self.args = args
        self.nlabels = dictionary.nlabels

    def get_size(self) -> int:
        return self.nlabels

    @abstractmethod
    def _probabilities(self, scores: np.ndarray) -> np.ndarray:
        pass

    @abstractmethod
    def _loss_value(self, probs: np.ndarray, target: np.ndarray) -> float:
        pass

    @abstractmethod
    def _target(self, labels: Sequence[int]) -> np.ndarray:
        pass

    def _weights(self, model) -> np.ndarray:
        # a view: in-place updates land in the shared output matrix
        return model.wo[self.shift:self.shift + self.nlabels]

    def _check_labels(self, labels: Sequence[int]):
        for label in labels:
            if not 0 <= label < self.nlabels:
                raise LossLayerError(
                    f"Label {label} outside of layer with {self.nlabels} labels",
                    details={'label': int(label), 'nlabels': self.nlabels}
                )

    def predict_probs(self, hidden: np.ndarray, model) -> np.ndarray:
        return self._probabilities(self._weights(model) @ hidden)

    def loss(self, input_ids, labels, lr, model) -> float:
        if len(labels) == 0:
            return 0.0
        self._check_labels(labels)

        weights = self._weights(model)
        probs = self._probabilities(weights @ model.hidden)
        target = self._target(labels)

        alpha = lr * (target - probs)
        model.grad += alpha @ weights
        weights += np.outer(alpha, model.hidden)

        return self._loss_value(probs, target)

    def find_k_best(self, k, heap, hidden, model):
        heap.clear()
        heap.extend(top_k_pairs(self.predict_probs(hidden, model), min(k, self.nlabels)))

    def get_label_p(self, label, hidden, model) -> float:
        if not 0 <= label < self.nlabels:
            return 0.0
        return float(self.predict_probs(hidden, model)[label])

    def get_labels_p(self, labels, hidden, model):
        probs = self.predict_probs(hidden, model)
        return [float(probs[label]) if 0 <= label < self.nlabels else 0.0 for label in labels]

    def save(self, stream):
        pickle.dump(
            {'layer': self.tag, 'nlabels': self.nlabels, 'shift': self.shift},
            stream
        )

    def load(self, stream):
        try:
            record = pickle.load(stream)
        except (EOFError, pickle.UnpicklingError) as e:
            raise LoadingError(
                f"Could not read {self.tag} layer record: {e}",
                details={'layer': self.tag}
            )

        if not isinstance(record, dict) or record.get('layer') != self.tag:
            found = record.get('layer') if isinstance(record, dict) else type(record).__name__
            raise LoadingError(
                f"Expected a {self.tag} layer record, found {found}",
                details={'layer': self.tag, 'found': found}
            )

        self.nlabels = record['nlabels']
        self.shift = record['shift']
