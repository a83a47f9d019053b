# core_engine/dictionary.py

from typing import Dict, Iterable, List, Sequence, Tuple, Any


class Dictionary:
    """
    Word and label vocabularies. Raw examples are whitespace separated
    tokens; tokens starting with ``__label__`` are labels.
    """
    LABEL_PREFIX = "__label__"

    def __init__(self):
        self.words: List[str] = []
        self.labels: List[str] = []
        self._word2id: Dict[str, int] = {}
        self._label2id: Dict[str, int] = {}

    @property
    def nwords(self) -> int:
        return len(self.words)

    @property
    def nlabels(self) -> int:
        return len(self.labels)

    def add_word(self, word: str) -> int:
        if word not in self._word2id:
            self._word2id[word] = len(self.words)
            self.words.append(word)
        return self._word2id[word]

    def add_label(self, label: str) -> int:
        if label.startswith(self.LABEL_PREFIX):
            label = label[len(self.LABEL_PREFIX):]
        if label not in self._label2id:
            self._label2id[label] = len(self.labels)
            self.labels.append(label)
        return self._label2id[label]

    def get_word_id(self, word: str) -> int:
        return self._word2id.get(word, -1)

    def get_label_id(self, label: str) -> int:
        if label.startswith(self.LABEL_PREFIX):
            label = label[len(self.LABEL_PREFIX):]
        return self._label2id.get(label, -1)

    def get_label(self, label_id: int) -> str:
        return self.labels[label_id]

    def encode(self, tokens: Sequence[str]) -> Tuple[List[int], List[int]]:
        """Map tokens to ``(input_ids, label_ids)``, dropping unknown ones."""
        input_ids, label_ids = [], []
        for token in tokens:
            if token.startswith(self.LABEL_PREFIX):
                label_id = self.get_label_id(token)
                if label_id >= 0:
                    label_ids.append(label_id)
            else:
                word_id = self.get_word_id(token)
                if word_id >= 0:
                    input_ids.append(word_id)
        return input_ids, label_ids

    @classmethod
    def from_examples(cls, lines: Iterable[str]) -> 'Dictionary':
        """Build vocabularies from raw example lines."""
        dictionary = cls()
        for line in lines:
            for token in line.split():
                if token.startswith(cls.LABEL_PREFIX):
                    dictionary.add_label(token)
                else:
                    dictionary.add_word(token)
        return dictionary

    def to_dict(self) -> Dict[str, Any]:
        return {'words': list(self.words), 'labels': list(self.labels)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Dictionary':
        dictionary = cls()
        for word in data['words']:
            dictionary.add_word(word)
        for label in data['labels']:
            dictionary.add_label(label)
        return dictionary
