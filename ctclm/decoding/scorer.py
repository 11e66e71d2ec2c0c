"""Beam scoring strategies pluggable into a CTC beam-search decoder.

The decoder owns the beams and calls into a scorer whenever a beam is
created, extended or finished. A scorer never keeps per-beam data itself;
everything lives in the ``BeamState`` value that travels with each beam.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Hashable


@dataclass(frozen=True)
class BeamState:
    """Language-model bookkeeping for one beam hypothesis."""

    completed_words_score: float = 0.0
    incomplete_word_score: float = 0.0
    incomplete_word: str = ""
    model_context: Hashable = None

    def copy(self, **changes) -> "BeamState":
        return replace(self, **changes)


class BaseBeamScorer:
    """Plain CTC scoring: no state expansion, no extra score."""

    def initialize_state(self) -> BeamState:
        return BeamState()

    def expand_state(self, from_state: BeamState, from_label: int | None, to_label: int) -> BeamState:
        """Called at most once per parent -> child beam transition."""
        return from_state.copy()

    def expand_state_end(self, state: BeamState) -> BeamState:
        """Called at most once per beam, after the last time step."""
        return state.copy()

    def get_state_expansion_score(self, state: BeamState, previous_score: float) -> float:
        """Cheap read of the cached expansion score, layered on ``previous_score``."""
        return previous_score

    def get_state_end_expansion_score(self, state: BeamState) -> float:
        return 0.0
