"""Example script: train a bagging ensemble on a toy corpus and reload it."""
import tempfile

from config import ConfigManager, ConfigPresets
from core_engine import Dictionary
from experiments import CheckpointManager, Trainer
from utils import LoggerFactory

CORPUS = [
    "__label__sports the match ended with a late goal",
    "__label__sports the team won the league title",
    "__label__politics parliament passed the new budget",
    "__label__politics the minister announced an election",
    "__label__science researchers observed a distant galaxy",
    "__label__science the experiment confirmed the theory",
    "__label__sports __label__politics the minister attended the final match",
]


def run_bagging_experiment(preset: str = 'bagging_softmax'):
    """Train, evaluate, checkpoint and reload an ensemble model."""
    manager = ConfigManager(ConfigPresets.get_preset(preset))
    manager.load_from_env()
    args = manager.build_args()
    LoggerFactory.configure_from_args(args)

    dictionary = Dictionary.from_examples(CORPUS)
    examples = [dictionary.encode(line.split()) for line in CORPUS]

    trainer = Trainer(args, dictionary)
    trainer.train(examples)
    metrics = trainer.test(examples, k=1)

    with tempfile.TemporaryDirectory() as tmpdir:
        checkpoints = CheckpointManager(tmpdir, preset)
        checkpoints.save_checkpoint(args.epoch, args, trainer.model, dictionary, metrics)
        restored = checkpoints.load_checkpoint()

    input_ids, _ = dictionary.encode("the minister watched the match".split())
    for prob, label in restored['model'].predict(input_ids, k=args.top_k):
        print(f"{dictionary.get_label(label):>10s}  {prob:.4f}")

    return metrics


if __name__ == "__main__":
    print("=" * 60)
    print("Bagging ensemble of softmax members")
    print("=" * 60)
    run_bagging_experiment('bagging_softmax')

    print("\n" + "=" * 60)
    print("Bagging ensemble of one-vs-all members")
    print("=" * 60)
    run_bagging_experiment('bagging_ova')
