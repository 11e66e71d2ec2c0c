"""Beam scorer that rewards beams spelling likely word sequences."""
from __future__ import annotations

import logging
from typing import Hashable

from ctclm.config import ScorerConfig
from ctclm.data.labels import LabelTranslator
from ctclm.decoding.lm import LanguageModel, load_kenlm_model
from ctclm.decoding.scorer import BaseBeamScorer, BeamState

logger = logging.getLogger(__name__)


class KenLMBeamScorer(BaseBeamScorer):
    """Word-level n-gram scoring of the label stream.

    Characters are accumulated until a space label closes the word. While a
    word is still being spelled, its score against the current sentence
    context is recomputed after every new character so that partial words
    already bias the beam.
    """

    def __init__(self, model: LanguageModel, translator: LabelTranslator | None = None):
        self.model = model
        self.translator = translator or LabelTranslator()

    @classmethod
    def from_config(cls, cfg: ScorerConfig) -> "KenLMBeamScorer":
        model = load_kenlm_model(cfg.lm_path)
        return cls(model, LabelTranslator(cfg.labels()))

    def initialize_state(self) -> BeamState:
        return BeamState(
            completed_words_score=0.0,
            incomplete_word_score=0.0,
            incomplete_word="",
            model_context=self.model.begin_sentence_context(),
        )

    def expand_state(self, from_state: BeamState, from_label: int | None, to_label: int) -> BeamState:
        # Repeats collapse before anything else, so they are never validated.
        if from_label == to_label or self.translator.is_blank(to_label):
            return from_state.copy()

        is_space = self.translator.is_space(to_label)
        word = from_state.incomplete_word
        if not is_space:
            word += self.translator.character(to_label)

        prob, next_context = self._score_word(from_state.model_context, word)

        if is_space:
            return from_state.copy(
                completed_words_score=from_state.completed_words_score + prob,
                incomplete_word_score=0.0,
                incomplete_word="",
                model_context=next_context,
            )
        return from_state.copy(incomplete_word=word, incomplete_word_score=prob)

    def expand_state_end(self, state: BeamState) -> BeamState:
        completed = state.completed_words_score
        context = state.model_context
        if state.incomplete_word:
            prob, context = self._score_word(context, state.incomplete_word)
            completed += prob

        eos_prob, context = self.model.score(context, self.model.end_sentence_index())
        return state.copy(
            completed_words_score=completed + eos_prob,
            incomplete_word_score=0.0,
            incomplete_word="",
            model_context=context,
        )

    def get_state_expansion_score(self, state: BeamState, previous_score: float) -> float:
        return previous_score + state.completed_words_score + state.incomplete_word_score

    def get_state_end_expansion_score(self, state: BeamState) -> float:
        return state.completed_words_score

    def _score_word(self, context: Hashable, word: str) -> tuple[float, Hashable]:
        return self.model.score(context, self.model.vocabulary_index(word))
