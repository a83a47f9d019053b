"""Multi-threaded training and evaluation of a text model."""
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Any, List, Optional, Sequence, Tuple

from core_engine.dictionary import Dictionary
from core_engine.model import Model
from patterns.factory import build_loss_layer
from utils.logging_config import get_logger

logger = get_logger(__name__)

Example = Tuple[Sequence[int], Sequence[int]]


class Trainer:
    """
    Builds the configured loss layer and model for a dictionary and trains it.

    Examples are ``(input_ids, label_ids)`` pairs. Each of the ``args.thread``
    workers trains on its own shard through a shared copy of the model, so
    all workers update the same matrices without locking.
    """

    def __init__(self, args, dictionary: Dictionary):
        self.args = args
        self.dictionary = dictionary

        self.loss_layer = build_loss_layer(args)
        self.loss_layer.setup(args, dictionary)
        self.model = Model(args, self.loss_layer, dictionary.nwords)

        self.results: Dict[str, Any] = {
            'train_losses': [],
            'examples_seen': 0
        }

    def train(self, examples: List[Example]) -> float:
        """
        Train for ``args.epoch`` epochs.

        Returns:
            Mean example loss of the last epoch
        """
        examples = [(list(input_ids), list(labels)) for input_ids, labels in examples]
        nthreads = min(self.args.thread, max(len(examples), 1))
        shards = [examples[t::nthreads] for t in range(nthreads)]

        logger.info(
            f"Training {type(self.loss_layer).__name__} on {len(examples)} examples, "
            f"{self.args.epoch} epochs, {nthreads} threads"
        )

        epoch_loss = 0.0
        with ThreadPoolExecutor(max_workers=nthreads, thread_name_prefix="trainer") as pool:
            for epoch in range(self.args.epoch):
                futures = [pool.submit(self._train_shard, shard, epoch) for shard in shards]
                totals = [future.result() for future in futures]

                loss_sum = sum(loss for loss, _ in totals)
                count = sum(n for _, n in totals)
                epoch_loss = loss_sum / count if count else 0.0

                self.results['train_losses'].append(epoch_loss)
                self.results['examples_seen'] += count
                logger.info(f"Epoch {epoch + 1}/{self.args.epoch} - Loss: {epoch_loss:.4f}")

        return epoch_loss

    def _train_shard(self, shard: List[Example], epoch: int) -> Tuple[float, int]:
        model = self.model.shared_copy()
        total_steps = self.args.epoch * len(shard)
        loss_sum = 0.0

        for step, (input_ids, labels) in enumerate(shard):
            progress = (epoch * len(shard) + step) / total_steps
            lr = self.args.lr * (1.0 - progress)
            loss_sum += model.update(input_ids, labels, lr)

        return loss_sum, len(shard)

    def predict(self, input_ids: Sequence[int], k: Optional[int] = None) -> List[Tuple[float, int]]:
        return self.model.predict(input_ids, k or self.args.top_k)

    def test(self, examples: List[Example], k: int = 1) -> Dict[str, float]:
        """
        Precision and recall at ``k`` over labelled examples.

        Returns:
            Dictionary with ``precision_at_{k}``, ``recall_at_{k}`` and ``examples``
        """
        hits = 0
        predicted = 0
        gold = 0
        model = self.model.shared_copy()

        for input_ids, labels in examples:
            if len(labels) == 0:
                continue
            predictions = model.predict(input_ids, k)
            label_set = set(labels)
            hits += sum(1 for _, label in predictions if label in label_set)
            predicted += k
            gold += len(label_set)

        metrics = {
            f'precision_at_{k}': hits / predicted if predicted else 0.0,
            f'recall_at_{k}': hits / gold if gold else 0.0,
            'examples': predicted // k if k else 0
        }
        logger.info(f"Test: {metrics}")
        return metrics
