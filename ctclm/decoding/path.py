from __future__ import annotations

from typing import Iterable

import numpy as np

from ctclm.decoding.scorer import BaseBeamScorer, BeamState


def greedy_labels(log_probs: np.ndarray) -> list[int]:
    """Best-path labels of a single utterance.

    Args:
      log_probs: (T, V) or (1, T, V)
    """

    arr = np.asarray(log_probs)
    if arr.ndim == 3:
        arr = arr.squeeze(0)
    if arr.ndim != 2:
        raise ValueError(f"Expected a (T, V) array; got shape {arr.shape}")
    return [int(i) for i in arr.argmax(axis=-1)]


def expand_label_path(scorer: BaseBeamScorer, labels: Iterable[int]) -> BeamState:
    """Run a scorer along one label path, as a single-beam decoder would."""
    state = scorer.initialize_state()
    # None never equals a label, so the first label is always validated.
    from_label: int | None = None
    for to_label in labels:
        state = scorer.expand_state(state, from_label, int(to_label))
        from_label = int(to_label)
    return scorer.expand_state_end(state)


def score_label_path(scorer: BaseBeamScorer, labels: Iterable[int]) -> float:
    return scorer.get_state_end_expansion_score(expand_label_path(scorer, labels))
