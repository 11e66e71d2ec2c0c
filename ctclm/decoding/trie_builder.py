from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Iterable, Sequence

from tqdm import tqdm

from ctclm.data.labels import VOCABULARY_SIZE, InvalidVocabulary, vocabulary_slot
from ctclm.decoding import trie
from ctclm.decoding.lm import LanguageModel, LanguageModelLoadFailure, load_kenlm_model
from ctclm.decoding.trie import TrieNode
from ctclm.utils.io import iter_words, write_text
from ctclm.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_trie(
    model: LanguageModel,
    words: Iterable[str],
    *,
    alphabet_size: int = VOCABULARY_SIZE,
    translate: Callable[[str], int] = vocabulary_slot,
    progress: bool = False,
) -> TrieNode:
    """Insert every word with its vocabulary index and unigram score.

    A word outside the alphabet raises ``InvalidVocabulary`` and aborts the
    build; a trie missing part of the vocabulary would prune valid beams.
    """

    root = TrieNode(alphabet_size)
    null_context = model.null_context()
    for word in tqdm(words, desc="trie", unit="word", disable=not progress, file=sys.stderr):
        idx = model.vocabulary_index(word)
        score, _ = model.score(null_context, idx)
        root.insert(word, idx, score, translate)

    logger.info("Built trie from %d words", root.prefix_count)
    return root


def _parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="generate_trie",
        usage="%(prog)s [--output PATH] [--log-level LEVEL] <kenlm_file_path> < words.txt",
        description="Build a vocabulary prefix trie from words on stdin.",
    )
    ap.add_argument("lm_path", nargs="*", help="KenLM model (ARPA or binary)")
    ap.add_argument("--output", default=None, help="write the trie here instead of stdout")
    ap.add_argument("--log-level", default="WARNING")
    return ap


def main(argv: Sequence[str] | None = None) -> int:
    ap = _parser()
    args = ap.parse_args(argv)
    if len(args.lm_path) != 1:
        ap.print_usage(sys.stderr)
        return 1

    setup_logging(args.log_level)
    try:
        model = load_kenlm_model(args.lm_path[0])
        root = build_trie(model, iter_words(sys.stdin), progress=sys.stderr.isatty())
    except (LanguageModelLoadFailure, InvalidVocabulary) as exc:
        logger.error("%s", exc)
        return 1

    if args.output is None:
        trie.dump(root, sys.stdout)
    else:
        write_text(args.output, trie.dumps(root))
    return 0


if __name__ == "__main__":
    sys.exit(main())
