"""Tests for training and checkpoint management."""
import math
from pathlib import Path

import pytest
from config import Args
from core_engine import Dictionary
from experiments import CheckpointManager, Trainer
from utils.exceptions import LoadingError

CORPUS = [
    "__label__sports the match ended with a late goal",
    "__label__sports the team won the league title",
    "__label__politics parliament passed the new budget",
    "__label__politics the minister announced an election",
    "__label__science researchers observed a distant galaxy",
    "__label__science the experiment confirmed the theory",
]


@pytest.fixture
def dictionary():
    return Dictionary.from_examples(CORPUS)


@pytest.fixture
def examples(dictionary):
    return [dictionary.encode(line.split()) for line in CORPUS]


@pytest.fixture
def trained(dictionary, examples):
    args = Args(ensemble=True, nbase=3, bagging=0.3, dim=8, lr=0.5, epoch=20, thread=2)
    trainer = Trainer(args, dictionary)
    trainer.train(examples)
    return trainer


class TestTrainer:
    """Tests for Trainer."""
    
    def test_train_records_losses(self, trained, examples):
        """Test each epoch reports a finite, decreasing loss."""
        losses = trained.results['train_losses']
        assert len(losses) == 20
        assert all(math.isfinite(loss) for loss in losses)
        assert losses[-1] < losses[0]
        assert trained.results['examples_seen'] == 20 * len(examples)
    
    def test_test_metrics(self, trained, examples):
        """Test precision and recall are reported at k."""
        metrics = trained.test(examples, k=1)
        assert 0.0 <= metrics['precision_at_1'] <= 1.0
        assert 0.0 <= metrics['recall_at_1'] <= 1.0
        assert metrics['examples'] == len(examples)
    
    def test_predict_uses_top_k(self, trained, examples):
        """Test predictions default to the configured shortlist size."""
        predictions = trained.predict(examples[0][0])
        assert len(predictions) == 3
    
    def test_more_threads_than_examples(self, dictionary, examples):
        """Test a tiny dataset still trains with many threads."""
        trainer = Trainer(Args(dim=4, epoch=2, thread=16), dictionary)
        assert math.isfinite(trainer.train(examples[:2]))
    
    def test_empty_dataset(self, dictionary):
        """Test training on nothing returns zero loss."""
        trainer = Trainer(Args(dim=4, epoch=2), dictionary)
        assert trainer.train([]) == 0.0


class TestCheckpointManager:
    """Tests for checkpoint manager."""
    
    def test_save_checkpoint(self, tmp_path, trained):
        """Test saving writes the configuration and model files."""
        manager = CheckpointManager(str(tmp_path), "test_experiment")
        
        model_path = manager.save_checkpoint(
            epoch=1,
            args=trained.args,
            model=trained.model,
            metrics={'precision_at_1': 0.5}
        )
        
        assert Path(model_path).exists()
        assert (Path(model_path).parent / "args_epoch_1.yaml").exists()
    
    def test_load_checkpoint_round_trip(self, tmp_path, trained, dictionary, examples):
        """Test a reloaded checkpoint predicts like the trained model."""
        manager = CheckpointManager(str(tmp_path), "test_experiment")
        manager.save_checkpoint(1, trained.args, trained.model, dictionary, {'precision_at_1': 0.4})
        manager.save_checkpoint(2, trained.args, trained.model, dictionary, {'precision_at_1': 0.9})
        manager.save_checkpoint(3, trained.args, trained.model, dictionary, {'precision_at_1': 0.7})
        
        checkpoint = manager.load_checkpoint()
        
        assert checkpoint['epoch'] == 2
        assert checkpoint['args'] == trained.args
        assert checkpoint['metrics']['precision_at_1'] == 0.9
        assert checkpoint['dictionary'].labels == dictionary.labels
        for input_ids, _ in examples:
            assert checkpoint['model'].predict(input_ids, 2) == trained.model.predict(input_ids, 2)
    
    def test_latest_without_metrics(self, tmp_path, trained):
        """Test the latest epoch is loaded when no metrics were recorded."""
        manager = CheckpointManager(str(tmp_path), "test_experiment")
        manager.save_checkpoint(2, trained.args, trained.model)
        manager.save_checkpoint(10, trained.args, trained.model)
        
        assert manager.load_checkpoint()['epoch'] == 10
        assert [Path(p).name for p in manager.list_checkpoints()] == [
            "model_epoch_2.bin", "model_epoch_10.bin"
        ]
    
    def test_missing_checkpoint(self, tmp_path):
        """Test loading from an empty directory fails."""
        manager = CheckpointManager(str(tmp_path), "test_experiment")
        with pytest.raises(LoadingError):
            manager.load_checkpoint()
        with pytest.raises(LoadingError):
            manager.load_checkpoint(epoch=4)
    
    def test_cleanup_keeps_best(self, tmp_path, trained):
        """Test old checkpoints are removed except the best one."""
        manager = CheckpointManager(str(tmp_path), "test_experiment")
        manager.save_checkpoint(1, trained.args, trained.model, metrics={'precision_at_1': 0.9})
        for epoch in range(2, 6):
            manager.save_checkpoint(epoch, trained.args, trained.model, metrics={'precision_at_1': 0.1})
        
        manager.cleanup_old_checkpoints(keep_last_n=2)
        
        assert [Path(p).name for p in manager.list_checkpoints()] == [
            "model_epoch_1.bin", "model_epoch_4.bin", "model_epoch_5.bin"
        ]
    
    def test_recorded_best_survives_new_manager(self, tmp_path, trained):
        """Test a new manager on the same directory keeps the better recorded best."""
        first = CheckpointManager(str(tmp_path), "test_experiment")
        first.save_checkpoint(1, trained.args, trained.model, metrics={'precision_at_1': 0.9})
        
        resumed = CheckpointManager(str(tmp_path), "test_experiment")
        assert resumed.best_epoch == 1
        assert resumed.best_metric == 0.9
        resumed.save_checkpoint(2, trained.args, trained.model, metrics={'precision_at_1': 0.3})
        
        assert resumed.load_checkpoint()['epoch'] == 1
        resumed.save_checkpoint(3, trained.args, trained.model, metrics={'precision_at_1': 0.95})
        assert resumed.load_checkpoint()['epoch'] == 3
