from __future__ import annotations

from pathlib import Path

import pytest

from ctclm.data.labels import LabelTranslator
from ctclm.decoding.kenlm_scorer import KenLMBeamScorer

# log10 probability and back-off weight. Only words that start a bigram carry
# a back-off, matching what KenLM keeps for words without extensions.
UNIGRAMS = {
    "<unk>": (-6.0, 0.0),
    "<s>": (-99.0, -0.5),
    "</s>": (-1.0, 0.0),
    "tomorrow": (-2.0, -0.3),
    "it": (-1.5, -0.2),
    "will": (-1.6, -0.25),
    "rain": (-2.2, -0.1),
    "the": (-1.2, 0.0),
    "don't": (-2.5, 0.0),
}

BIGRAMS = {
    ("<s>", "tomorrow"): -0.8,
    ("tomorrow", "it"): -0.6,
    ("it", "will"): -0.5,
    ("will", "rain"): -0.7,
    ("rain", "</s>"): -0.4,
}

# "tomorrow it will rain" with a=0 .. z=25, apostrophe=26, space=27, blank=28.
TEST_SENTENCE = "tomorrow it will rain"
TEST_LABELS = [
    19, 19, 19, 19, 28, 28, 14, 28, 28, 12, 12, 12, 28, 14, 14, 14, 14, 28,
    28, 17, 17, 28, 28, 28, 17, 17, 17, 17, 28, 14, 14, 14, 28, 28, 28, 28,
    22, 22, 22, 22, 28, 28, 28, 27, 27, 27, 27, 28, 28, 28, 28, 8, 8, 28, 28,
    28, 19, 19, 19, 28, 28, 28, 27, 28, 22, 22, 22, 28, 28, 28, 8, 28, 28, 28,
    11, 11, 11, 11, 28, 11, 11, 28, 28, 27, 27, 27, 28, 28, 17, 28, 28, 28,
    28, 0, 0, 28, 28, 28, 8, 8, 28, 28, 28, 13, 13, 13, 13, 28,
]
# Same path with "th" spelled after "rain" and no closing space.
TEST_LABELS_INCOMPLETE = TEST_LABELS + [19, 7]
# "tomorow it will rain"
TEST_LABELS_TYPO = TEST_LABELS[:18] + [28, 28, 28, 28] + TEST_LABELS[24:]

# -0.8 - 0.6 - 0.5 - 0.7 for the words, -0.4 for </s> after "rain".
REFERENCE_LOG10_PROB = -3.0


class BigramLM:
    """Back-off bigram model over a fixed table, scored the way KenLM scores ARPA files."""

    def __init__(self, unigrams=UNIGRAMS, bigrams=BIGRAMS):
        self.unigrams = dict(unigrams)
        self.bigrams = dict(bigrams)
        self.words = list(self.unigrams)
        self.index = {w: i for i, w in enumerate(self.words)}
        self.calls = 0

    def begin_sentence_context(self):
        return ("<s>",)

    def null_context(self):
        return ()

    def end_sentence_index(self):
        return self.index["</s>"]

    def vocabulary_index(self, word):
        return self.index.get(word, self.index["<unk>"])

    def score(self, context, index):
        self.calls += 1
        word = self.words[index]
        prob = self.unigrams[word][0]
        if context:
            prev = context[-1]
            if (prev, word) in self.bigrams:
                prob = self.bigrams[(prev, word)]
            else:
                prob += self.unigrams[prev][1]
        next_context = () if word == "<unk>" else (word,)
        return prob, next_context

    def to_arpa(self) -> str:
        lines = ["\\data\\", f"ngram 1={len(self.unigrams)}", f"ngram 2={len(self.bigrams)}", "", "\\1-grams:"]
        for w, (p, bo) in self.unigrams.items():
            lines.append(f"{p}\t{w}\t{bo}" if bo else f"{p}\t{w}")
        lines += ["", "\\2-grams:"]
        for (a, b), p in self.bigrams.items():
            lines.append(f"{p}\t{a} {b}")
        lines += ["", "\\end\\", ""]
        return "\n".join(lines)


@pytest.fixture
def lm() -> BigramLM:
    return BigramLM()


@pytest.fixture
def translator() -> LabelTranslator:
    return LabelTranslator()


@pytest.fixture
def scorer(lm, translator) -> KenLMBeamScorer:
    return KenLMBeamScorer(lm, translator)


@pytest.fixture
def arpa_path(tmp_path: Path) -> Path:
    p = tmp_path / "bigram.arpa"
    p.write_text(BigramLM().to_arpa(), encoding="utf-8")
    return p
