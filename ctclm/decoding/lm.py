"""Word-level n-gram language model seen by the beam scorer."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Hashable, Protocol

logger = logging.getLogger(__name__)

UNKNOWN_INDEX = 0
BEGIN_SENTENCE_INDEX = 1
END_SENTENCE_INDEX = 2

UNKNOWN_WORD = "<unk>"
BEGIN_SENTENCE = "<s>"
END_SENTENCE = "</s>"


class LanguageModelLoadFailure(RuntimeError):
    pass


class LanguageModel(Protocol):
    """Context-threading n-gram model.

    Contexts are immutable values; ``score`` never modifies its input context.
    Scores are log10 probabilities.
    """

    def begin_sentence_context(self) -> Hashable: ...

    def null_context(self) -> Hashable: ...

    def end_sentence_index(self) -> int: ...

    def vocabulary_index(self, word: str) -> int: ...

    def score(self, context: Hashable, index: int) -> tuple[float, Hashable]: ...


@dataclass(frozen=True)
class KenLMContext:
    # Owned by this value; kenlm only ever writes into freshly created states.
    state: Any


class KenLMLanguageModel:
    """Adapter exposing a ``kenlm.Model`` through integer vocabulary indices.

    The Python binding scores strings, so indices are interned here in
    first-seen order. Out-of-vocabulary words all share ``UNKNOWN_INDEX``.
    """

    def __init__(self, model: Any, state_factory: Callable[[], Any], path: str | Path | None = None):
        self._model = model
        self._state_factory = state_factory
        self.path = None if path is None else Path(path)
        self._words = [UNKNOWN_WORD, BEGIN_SENTENCE, END_SENTENCE]
        self._index = {w: i for i, w in enumerate(self._words)}
        self._lock = threading.Lock()

    @property
    def order(self) -> int:
        return int(self._model.order)

    def _new_state(self) -> Any:
        return self._state_factory()

    def begin_sentence_context(self) -> KenLMContext:
        state = self._new_state()
        self._model.BeginSentenceWrite(state)
        return KenLMContext(state)

    def null_context(self) -> KenLMContext:
        state = self._new_state()
        self._model.NullContextWrite(state)
        return KenLMContext(state)

    def end_sentence_index(self) -> int:
        return END_SENTENCE_INDEX

    def vocabulary_index(self, word: str) -> int:
        idx = self._index.get(word)
        if idx is not None:
            return idx
        if word not in self._model:
            return UNKNOWN_INDEX
        with self._lock:
            idx = self._index.get(word)
            if idx is None:
                idx = len(self._words)
                self._words.append(word)
                self._index[word] = idx
        return idx

    def word_at(self, index: int) -> str:
        try:
            return self._words[index]
        except IndexError:
            raise KeyError(f"Unknown vocabulary index: {index}") from None

    def score(self, context: KenLMContext, index: int) -> tuple[float, KenLMContext]:
        out = self._new_state()
        prob = self._model.BaseScore(context.state, self.word_at(index), out)
        return float(prob), KenLMContext(out)


def load_kenlm_model(path: str | Path) -> KenLMLanguageModel:
    """Load an ARPA or binary KenLM model.

    Requires the optional ``kenlm`` dependency.
    """

    p = Path(path)
    if not p.exists():
        raise LanguageModelLoadFailure(f"Language model not found: {p}")

    try:
        import kenlm
    except ImportError as exc:
        raise LanguageModelLoadFailure("The kenlm package is required to load language models") from exc

    config = kenlm.Config()
    config.load_method = kenlm.LoadMethod.POPULATE_OR_READ
    try:
        model = kenlm.Model(str(p), config)
    except (OSError, RuntimeError) as exc:
        raise LanguageModelLoadFailure(f"Cannot load language model {p}: {exc}") from exc

    logger.info("Loaded %d-gram language model from %s", model.order, p)
    return KenLMLanguageModel(model, kenlm.State, path=p)
