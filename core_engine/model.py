# core_engine/model.py

from typing import List, Optional, Sequence

import numpy as np

from patterns.factory import build_loss_layer
from utils.exceptions import LoadingError
from utils.logging_config import get_logger
from .loss_layer import NO_LABEL, Shortlist

logger = get_logger(__name__)


class Model:
    """
    Bag-of-words text model: the hidden vector is the mean of the input
    embedding rows, and the loss layer scores it against its rows of the
    output matrix.

    Models returned by :meth:`shared_copy` share ``wi``, ``wo`` and the loss
    layer with the original but own their ``hidden`` and ``grad`` buffers, so
    each training thread works on its own copy while updates go to the shared
    matrices without locking.
    """
    def __init__(
        self,
        args,
        loss_layer,
        nwords: int,
        wi: Optional[np.ndarray] = None,
        wo: Optional[np.ndarray] = None
    ):
        self.args = args
        self.loss_layer = loss_layer

        if wi is None:
            rng = np.random.default_rng(args.seed)
            limit = 1.0 / args.dim
            wi = rng.uniform(-limit, limit, size=(nwords, args.dim)).astype(np.float32)
        if wo is None:
            wo = np.zeros((loss_layer.get_size(), args.dim), dtype=np.float32)

        self.wi = wi
        self.wo = wo
        self.hidden = np.zeros(self.wi.shape[1], dtype=np.float32)
        self.grad = np.zeros(self.wi.shape[1], dtype=np.float32)

    def shared_copy(self) -> 'Model':
        return Model(self.args, self.loss_layer, self.wi.shape[0], wi=self.wi, wo=self.wo)

    def compute_hidden(self, input_ids: Sequence[int]) -> np.ndarray:
        if len(input_ids) == 0:
            self.hidden.fill(0.0)
        else:
            self.hidden[:] = self.wi[np.asarray(input_ids, dtype=np.int64)].mean(axis=0)
        return self.hidden

    def update(self, input_ids: Sequence[int], labels: Sequence[int], lr: float) -> float:
        """Run one training step; returns the example loss."""
        if len(input_ids) == 0:
            return 0.0

        self.compute_hidden(input_ids)
        self.grad.fill(0.0)
        loss = self.loss_layer.loss(input_ids, labels, lr, self)

        self.grad /= len(input_ids)
        np.add.at(self.wi, np.asarray(input_ids, dtype=np.int64), self.grad)
        return loss

    def predict(self, input_ids: Sequence[int], k: int, threshold: float = 0.0) -> Shortlist:
        """Top k ``(prob, label)`` pairs with probability at least ``threshold``."""
        hidden = self.compute_hidden(input_ids).copy()
        heap: List = []
        self.loss_layer.find_k_best(k, heap, hidden, self)
        return [(p, label) for p, label in heap if label != NO_LABEL and p >= threshold]

    def save(self, stream):
        np.save(stream, self.wi, allow_pickle=False)
        np.save(stream, self.wo, allow_pickle=False)
        self.loss_layer.save(stream)

    @classmethod
    def load(cls, stream, args) -> 'Model':
        """
        Restore a model written by :meth:`save`.

        The loss layer is rebuilt from ``args``, which must describe the same
        layer (and the same ensemble size) the model was saved with.
        """
        try:
            wi = np.load(stream, allow_pickle=False)
            wo = np.load(stream, allow_pickle=False)
        except (EOFError, ValueError) as e:
            raise LoadingError(f"Could not read model matrices: {e}")

        loss_layer = build_loss_layer(args)
        loss_layer.load(stream)

        if wo.shape[0] != loss_layer.get_size():
            raise LoadingError(
                f"Output matrix has {wo.shape[0]} rows but the loss layer expects "
                f"{loss_layer.get_size()}",
                details={'rows': int(wo.shape[0]), 'layer_size': loss_layer.get_size()}
            )
        if wi.shape[1] != args.dim or wo.shape[1] != args.dim:
            raise LoadingError(
                f"Matrix dimension {wi.shape[1]} does not match configured dim {args.dim}",
                details={'dim': int(wi.shape[1]), 'configured_dim': args.dim}
            )

        logger.info(f"Loaded model: {wi.shape[0]} words, {wo.shape[0]} output rows")
        return cls(args, loss_layer, wi.shape[0], wi=wi, wo=wo)
