from __future__ import annotations

import argparse
import json
import logging

import numpy as np

from ctclm.config import ConfigError, load_config
from ctclm.data.labels import InvalidLabel
from ctclm.decoding.kenlm_scorer import KenLMBeamScorer
from ctclm.decoding.lm import LanguageModelLoadFailure
from ctclm.decoding.path import expand_label_path, greedy_labels
from ctclm.utils.io import read_labels
from ctclm.utils.logging import setup_logging

logger = logging.getLogger("score_path")


def main() -> int:
    ap = argparse.ArgumentParser(description="Score one CTC label path with the language model.")
    ap.add_argument("--config", required=True)
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--labels", help="file of integer labels")
    src.add_argument("--text", help="text to encode as a label path")
    src.add_argument("--log-probs", help=".npy array of (T, V) network output; best path is scored")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    setup_logging(args.log_level)
    try:
        cfg = load_config(args.config)
        scorer = KenLMBeamScorer.from_config(cfg)
        if args.labels:
            labels = read_labels(args.labels)
        elif args.log_probs:
            labels = greedy_labels(np.load(args.log_probs))
        else:
            labels = scorer.translator.encode(args.text)
        state = expand_label_path(scorer, labels)
        text = scorer.translator.decode(labels)
    except (ConfigError, FileNotFoundError, LanguageModelLoadFailure, InvalidLabel, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    out = {
        "text": text,
        "num_labels": len(labels),
        "log10_prob": scorer.get_state_end_expansion_score(state),
    }
    print(json.dumps(out, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
