"""Label alphabet for character-level CTC output."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable

# Trie branching factor: 26 letters plus the apostrophe.
VOCABULARY_SIZE = 27
_APOSTROPHE_SLOT = 26


class InvalidLabel(ValueError):
    pass


class InvalidVocabulary(ValueError):
    pass


class LabelKind(enum.Enum):
    LETTER = "letter"
    APOSTROPHE = "apostrophe"
    SPACE = "space"
    BLANK = "blank"


@dataclass(frozen=True)
class LabelConfig:
    """Reserved labels of the network output alphabet.

    Letters occupy ``0 .. num_letters - 1`` and map onto ``a``, ``b``, ...
    """

    num_letters: int = 26
    apostrophe: int = 26
    space: int = 27
    blank: int = 28
    alphabet_size: int = 29

    def __post_init__(self) -> None:
        if not 1 <= self.num_letters <= 26:
            raise ValueError(f"num_letters must lie in [1, 26]; got {self.num_letters}")
        reserved = (self.apostrophe, self.space, self.blank)
        if len(set(reserved)) != len(reserved):
            raise ValueError(f"Reserved labels must be distinct; got {reserved}")
        for label in reserved:
            if label < self.num_letters or label >= self.alphabet_size:
                raise ValueError(
                    f"Reserved label {label} must lie in [{self.num_letters}, {self.alphabet_size})"
                )


class LabelTranslator:
    """Stateless label -> character mapping.

    The blank label has no character, the space label is the word boundary.
    """

    def __init__(self, config: LabelConfig | None = None):
        self.config = config or LabelConfig()

    def __len__(self) -> int:
        return self.config.alphabet_size

    def _check(self, label: int) -> int:
        if not 0 <= label < self.config.alphabet_size:
            raise InvalidLabel(f"Label {label} outside alphabet of size {self.config.alphabet_size}")
        return label

    def kind(self, label: int) -> LabelKind:
        label = self._check(label)
        if label == self.config.blank:
            return LabelKind.BLANK
        if label == self.config.space:
            return LabelKind.SPACE
        if label == self.config.apostrophe:
            return LabelKind.APOSTROPHE
        if label >= self.config.num_letters:
            raise InvalidLabel(f"Label {label} is neither a letter nor a reserved label")
        return LabelKind.LETTER

    def is_blank(self, label: int) -> bool:
        return self._check(label) == self.config.blank

    def is_space(self, label: int) -> bool:
        return self._check(label) == self.config.space

    def is_apostrophe(self, label: int) -> bool:
        return self._check(label) == self.config.apostrophe

    def character(self, label: int) -> str:
        kind = self.kind(label)
        if kind is LabelKind.BLANK:
            return ""
        if kind is LabelKind.SPACE:
            return " "
        if kind is LabelKind.APOSTROPHE:
            return "'"
        return chr(ord("a") + label)

    def label_of(self, char: str) -> int:
        if char == " ":
            return self.config.space
        if char == "'":
            return self.config.apostrophe
        offset = ord(char) - ord("a") if len(char) == 1 else -1
        if not 0 <= offset < self.config.num_letters:
            raise InvalidLabel(f"Character {char!r} has no label")
        return offset

    def encode(self, text: str) -> list[int]:
        """Encode text as labels, inserting a blank between doubled characters."""
        labels: list[int] = []
        for ch in text:
            label = self.label_of(ch)
            if labels and labels[-1] == label:
                labels.append(self.config.blank)
            labels.append(label)
        return labels

    def decode(self, labels: Iterable[int]) -> str:
        """Collapse repeats, drop blanks and translate the rest."""
        chars: list[str] = []
        prev = None
        for label in labels:
            if label != prev and not self.is_blank(label):
                chars.append(self.character(label))
            prev = label
        return "".join(chars)


def vocabulary_slot(char: str) -> int:
    """Trie slot of a word character."""
    if char == "'":
        return _APOSTROPHE_SLOT
    slot = ord(char) - ord("a") if len(char) == 1 else -1
    if not 0 <= slot < 26:
        raise InvalidVocabulary(f"Character {char!r} is not in the allowed vocabulary range")
    return slot


def label_config_from_mapping(raw: dict) -> LabelConfig:
    """Build a ``LabelConfig`` from a config mapping, keeping defaults for absent keys."""
    known = {"num_letters", "apostrophe", "space", "blank", "alphabet_size"}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown label keys: {sorted(unknown)}")
    for k, v in raw.items():
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"Label key {k!r} must be an integer; got {v!r}")
    return LabelConfig(**raw)
