"""Checkpoint management for trained models."""
import os
import json
from pathlib import Path
from typing import Dict, Any, Optional

from config.args import Args
from core_engine.dictionary import Dictionary
from core_engine.model import Model
from utils.exceptions import LoadingError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class CheckpointManager:
    """
    Saves and restores models together with the configuration that built
    them.

    A checkpoint for epoch ``n`` is ``args_epoch_n.yaml`` plus
    ``model_epoch_n.bin``, and optionally ``dictionary_epoch_n.json`` and
    ``metrics_epoch_n.json``. The model file does not record the loss layer
    layout, so loading always reads the configuration first.
    """

    def __init__(self, checkpoint_dir: str, experiment_name: str, metric: str = 'precision_at_1'):
        self.checkpoint_dir = Path(checkpoint_dir) / experiment_name
        self.checkpoint_dir.mkdir(parents=True, exist_ok=True)
        self.metric = metric
        self.best_metric = -float('inf')
        self.best_epoch: Optional[int] = None
        self._load_best()

    def save_checkpoint(
        self,
        epoch: int,
        args: Args,
        model: Model,
        dictionary: Optional[Dictionary] = None,
        metrics: Optional[Dict[str, float]] = None
    ) -> str:
        """
        Save a checkpoint.

        Args:
            epoch: Current epoch number
            args: Configuration the model was built with
            model: Trained model
            dictionary: Vocabulary used to encode the examples
            metrics: Evaluation metrics

        Returns:
            Path to saved model file
        """
        args.to_yaml(str(self.checkpoint_dir / f"args_epoch_{epoch}.yaml"))

        model_path = self.checkpoint_dir / f"model_epoch_{epoch}.bin"
        with open(model_path, 'wb') as f:
            model.save(f)

        if dictionary is not None:
            with open(self.checkpoint_dir / f"dictionary_epoch_{epoch}.json", 'w') as f:
                json.dump(dictionary.to_dict(), f)

        if metrics:
            with open(self.checkpoint_dir / f"metrics_epoch_{epoch}.json", 'w') as f:
                json.dump(metrics, f, indent=2)

            if self.metric in metrics and metrics[self.metric] > self.best_metric:
                self.best_metric = metrics[self.metric]
                self.best_epoch = epoch
                with open(self.checkpoint_dir / "best.json", 'w') as f:
                    json.dump({'epoch': epoch, self.metric: self.best_metric}, f, indent=2)

        logger.info(f"Saved checkpoint for epoch {epoch} to {model_path}")
        return str(model_path)

    def load_checkpoint(self, epoch: Optional[int] = None) -> Dict[str, Any]:
        """
        Load a checkpoint.

        Args:
            epoch: Epoch to load. If None, loads the best checkpoint, or the
                latest one when no metrics were recorded.

        Returns:
            Dictionary with ``epoch``, ``args``, ``model``, ``dictionary`` and ``metrics``
        """
        if epoch is None:
            epoch = self._default_epoch()

        args_path = self.checkpoint_dir / f"args_epoch_{epoch}.yaml"
        model_path = self.checkpoint_dir / f"model_epoch_{epoch}.bin"
        if not args_path.exists() or not model_path.exists():
            raise LoadingError(
                f"No checkpoint for epoch {epoch} in {self.checkpoint_dir}",
                details={'epoch': epoch, 'checkpoint_dir': str(self.checkpoint_dir)}
            )

        args = Args.from_yaml(str(args_path)).validate()
        with open(model_path, 'rb') as f:
            model = Model.load(f, args)

        dictionary = None
        dictionary_path = self.checkpoint_dir / f"dictionary_epoch_{epoch}.json"
        if dictionary_path.exists():
            with open(dictionary_path, 'r') as f:
                dictionary = Dictionary.from_dict(json.load(f))

        metrics = {}
        metrics_path = self.checkpoint_dir / f"metrics_epoch_{epoch}.json"
        if metrics_path.exists():
            with open(metrics_path, 'r') as f:
                metrics = json.load(f)

        return {
            'epoch': epoch,
            'args': args,
            'model': model,
            'dictionary': dictionary,
            'metrics': metrics
        }

    def list_checkpoints(self) -> list:
        """List model files of all available checkpoints, oldest epoch first."""
        checkpoints = sorted(
            self.checkpoint_dir.glob("model_epoch_*.bin"),
            key=self._epoch_of
        )
        return [str(cp) for cp in checkpoints]

    def cleanup_old_checkpoints(self, keep_last_n: int = 5):
        """Remove old checkpoints, keeping only the last N and the best one."""
        checkpoints = self.list_checkpoints()

        if len(checkpoints) > keep_last_n:
            for checkpoint_path in checkpoints[:-keep_last_n]:
                epoch = self._epoch_of(Path(checkpoint_path))
                if epoch == self.best_epoch:
                    continue
                for prefix, suffix in (('model', 'bin'), ('args', 'yaml'),
                                       ('dictionary', 'json'), ('metrics', 'json')):
                    path = self.checkpoint_dir / f"{prefix}_epoch_{epoch}.{suffix}"
                    if path.exists():
                        os.remove(path)

    def _load_best(self):
        best_path = self.checkpoint_dir / "best.json"
        if not best_path.exists():
            return
        with open(best_path, 'r') as f:
            best = json.load(f)
        # a best recorded under another metric cannot be compared
        if self.metric in best:
            self.best_metric = best[self.metric]
            self.best_epoch = best['epoch']
            logger.info(f"Resuming with best epoch {self.best_epoch} ({self.metric}={self.best_metric})")

    def _default_epoch(self) -> int:
        best_path = self.checkpoint_dir / "best.json"
        if best_path.exists():
            with open(best_path, 'r') as f:
                return json.load(f)['epoch']

        checkpoints = self.list_checkpoints()
        if not checkpoints:
            raise LoadingError(
                f"No checkpoints in {self.checkpoint_dir}",
                details={'checkpoint_dir': str(self.checkpoint_dir)}
            )
        return self._epoch_of(Path(checkpoints[-1]))

    @staticmethod
    def _epoch_of(path: Path) -> int:
        return int(path.stem.rsplit('_', 1)[1])
