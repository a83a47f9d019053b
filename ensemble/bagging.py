"""
Bagging ensemble of independently structured loss layers.

The ensemble trains ``nbase`` members side by side, each on its own block of
the model's output matrix. During training every example skips a
deterministic subset of the members (see :mod:`ensemble.dropout`); at
inference the members' shortlists are merged and re-ranked by the
probability averaged over all members.
"""
from typing import Dict, List, Set

from core_engine.loss_layer import NO_LABEL, LossLayer, Shortlist
from patterns.factory import ENSEMBLE_TAG, loss_layer_factory, register_loss_layer
from utils.exceptions import ConfigurationError, LoadingError
from utils.logging_config import get_logger
from .dropout import included_members

logger = get_logger(__name__)


@register_loss_layer(ENSEMBLE_TAG)
class BaggingLossLayer(LossLayer):
    """
    Ensemble loss layer over ``args.nbase`` members built from ``args.loss``.

    Member ``i`` starts at row ``shift + sum(size of members 0..i-1)`` and
    the ensemble's size is the sum of the member sizes.
    """
    tag = ENSEMBLE_TAG

    def __init__(self, args):
        super().__init__(self.member_args(args))
        self.members: List[LossLayer] = []
        self.size_sum = 0

    @staticmethod
    def member_args(args):
        """
        Configuration the members are built with: ``args`` with randomized
        tree structure switched on, so members do not share a tree. The
        given ``args`` is left untouched.
        """
        return args.replace(random_tree=True)

    def setup(self, args, dictionary):
        logger.info("Setting up bagging layer")
        self.args = self.member_args(args)
        self._check_member_config()

        self.members = []
        self.size_sum = 0
        for _ in range(self.args.nbase):
            member = loss_layer_factory(self.args, self.args.loss)
            member.setup(self.args, dictionary)
            member.set_shift(self.shift + self.size_sum)
            self.size_sum += member.get_size()
            self.members.append(member)
        self.multilabel = self._members_multilabel()

        logger.info(
            f"N base: {self.args.nbase}, output matrix size: {self.size_sum}, "
            f"multilabel: {self.multilabel}"
        )

    def loss(self, input_ids, labels, lr, model) -> float:
        """
        Train the members that keep this example.

        The summed member loss is divided by the configured member count even
        when some members skipped the example.
        """
        loss_sum = 0.0
        for i in included_members(len(self.members), input_ids, self.args.bagging):
            loss_sum += self.members[i].loss(input_ids, labels, lr, model)
        return loss_sum / self.args.nbase

    def find_k_best(self, k: int, heap: Shortlist, hidden, model):
        """
        Overwrite ``heap`` with exactly ``k`` entries ranked by ensemble
        probability.

        Candidates are the union of every member's own top k. Each candidate
        is scored by the mean of all members' probabilities for it, whether
        or not a member proposed it. Ties go to the lower label id. When
        there are fewer than ``k`` candidates the list is padded with
        ``(0.0, NO_LABEL)``.
        """
        candidates: Set[int] = set()
        shortlist: Shortlist = []
        for member in self.members:
            shortlist.clear()
            member.find_k_best(k, shortlist, hidden, model)
            candidates.update(label for _, label in shortlist)

        labels = sorted(candidates)
        label_freq: Dict[int, float] = dict.fromkeys(labels, 0.0)
        for member in self.members:
            for label, p in zip(labels, member.get_labels_p(labels, hidden, model)):
                label_freq[label] += p

        nbase = self.args.nbase
        ranked = sorted(
            ((freq / nbase, label) for label, freq in label_freq.items()),
            key=lambda entry: (-entry[0], entry[1])
        )

        heap.clear()
        heap.extend(ranked[:max(k, 0)])
        heap.extend([(0.0, NO_LABEL)] * (k - len(heap)))

    def get_label_p(self, label: int, hidden, model) -> float:
        total = sum(member.get_label_p(label, hidden, model) for member in self.members)
        return total / self.args.nbase

    def get_size(self) -> int:
        return self.size_sum

    def set_shift(self, shift: int):
        super().set_shift(shift)
        self._assign_shifts()

    def save(self, stream):
        logger.info("Saving bagging layer")
        for member in self.members:
            member.save(stream)

    def load(self, stream):
        """
        Rebuild ``args.nbase`` members and let each read its own record.

        The stream carries no member count. A member whose stored offset does
        not continue where the previous member ended, or a stream that ends
        early, means it was written with more or fewer members. Records left
        over after the last member are not detected here: the layer stops
        reading after ``nbase`` members, and only ``Model.load`` catches the
        extra rows by comparing the output matrix against ``get_size()``.
        """
        logger.info("Loading bagging layer")
        self._check_member_config()

        self.members = []
        self.size_sum = 0
        for i in range(self.args.nbase):
            member = loss_layer_factory(self.args, self.args.loss)
            member.load(stream)
            expected_shift = self.shift + self.size_sum
            if member.get_shift() != expected_shift:
                raise LoadingError(
                    f"Member {i} starts at row {member.get_shift()}, expected {expected_shift}; "
                    f"the saved ensemble does not have {self.args.nbase} members",
                    details={
                        'member': i,
                        'shift': member.get_shift(),
                        'expected_shift': expected_shift,
                        'nbase': self.args.nbase,
                    }
                )
            self.members.append(member)
            self.size_sum += member.get_size()

        self.multilabel = self._members_multilabel()

    def _check_member_config(self):
        if self.args.nbase <= 0:
            raise ConfigurationError(
                f"Bagging needs at least one member, got nbase={self.args.nbase}",
                details={'nbase': self.args.nbase}
            )
        if self.args.loss == ENSEMBLE_TAG:
            raise ConfigurationError(
                "Bagging members cannot themselves be bagging layers",
                details={'loss': self.args.loss}
            )

    def _assign_shifts(self):
        self.size_sum = 0
        for member in self.members:
            member.set_shift(self.shift + self.size_sum)
            self.size_sum += member.get_size()

    def _members_multilabel(self) -> bool:
        modes = [member.is_multilabel() for member in self.members]
        if len(set(modes)) > 1:
            raise ConfigurationError(
                "Bagging members disagree on multilabel mode",
                details={'multilabel': modes}
            )
        return modes[0]
