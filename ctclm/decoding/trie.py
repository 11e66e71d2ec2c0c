"""Prefix trie over the vocabulary alphabet.

Every node aggregates the words passing through it: how many there are and
which of them has the best unigram score. A decoder can therefore drop a
beam as soon as its partial word leaves the trie, and bound the score a
partial word can still reach.

On disk the trie is a text stream written in pre-order, one value per line::

    prefix_count
    min_score_word_index
    min_unigram_score
    <child 0> ... <child alphabet_size - 1>

An absent child is the single line ``-1``. There is no header; readers must
use the alphabet size the writer used.

``min_score_word_index`` comes from the index table of the process that built
the trie; see ``KenLMLanguageModel`` for how those indices are assigned.
"""
from __future__ import annotations

import io
import math
from typing import Callable, Iterator, Optional, TextIO

from ctclm.data.labels import VOCABULARY_SIZE, InvalidVocabulary, vocabulary_slot

ABSENT = -1


class MalformedTrieStream(ValueError):
    pass


class TrieNode:
    __slots__ = ("prefix_count", "min_score_word_index", "min_unigram_score", "children")

    def __init__(self, alphabet_size: int = VOCABULARY_SIZE):
        self.prefix_count = 0
        self.min_score_word_index = 0
        self.min_unigram_score = math.inf
        self.children: list[Optional[TrieNode]] = [None] * alphabet_size

    @property
    def alphabet_size(self) -> int:
        return len(self.children)

    def frequency(self) -> int:
        return self.prefix_count

    def child_at(self, index: int) -> Optional["TrieNode"]:
        return self.children[index]

    def _slots(self, word: str, translate: Callable[[str], int]) -> list[int]:
        slots = [translate(ch) for ch in word]
        for ch, slot in zip(word, slots):
            if not 0 <= slot < self.alphabet_size:
                raise InvalidVocabulary(f"Character {ch!r} maps outside the trie alphabet")
        return slots

    def insert(
        self,
        word: str,
        vocab_index: int,
        unigram_score: float,
        translate: Callable[[str], int] = vocabulary_slot,
    ) -> None:
        # Translate up front so a bad character leaves the trie untouched.
        slots = self._slots(word, translate)
        node = self
        for depth in range(len(slots) + 1):
            node.prefix_count += 1
            if unigram_score < node.min_unigram_score:
                node.min_unigram_score = unigram_score
                node.min_score_word_index = vocab_index
            if depth == len(slots):
                break
            slot = slots[depth]
            child = node.children[slot]
            if child is None:
                child = node.children[slot] = TrieNode(node.alphabet_size)
            node = child

    def find(self, prefix: str, translate: Callable[[str], int] = vocabulary_slot) -> Optional["TrieNode"]:
        node: Optional[TrieNode] = self
        for slot in self._slots(prefix, translate):
            node = node.children[slot]
            if node is None:
                return None
        return node

    def frequency_of(self, prefix: str, translate: Callable[[str], int] = vocabulary_slot) -> int:
        """Number of inserted words starting with ``prefix``."""
        node = self.find(prefix, translate)
        return 0 if node is None else node.prefix_count

    def iter_nodes(self) -> Iterator[tuple[tuple[int, ...], "TrieNode"]]:
        """Pre-order walk yielding ``(slot path, node)`` pairs."""
        stack: list[tuple[tuple[int, ...], TrieNode]] = [((), self)]
        while stack:
            path, node = stack.pop()
            yield path, node
            for slot in range(node.alphabet_size - 1, -1, -1):
                child = node.children[slot]
                if child is not None:
                    stack.append((path + (slot,), child))

    def __repr__(self) -> str:
        return (
            f"TrieNode(prefix_count={self.prefix_count}, "
            f"min_score_word_index={self.min_score_word_index}, "
            f"min_unigram_score={self.min_unigram_score!r})"
        )


def dump(root: TrieNode, fp: TextIO) -> None:
    stack: list[Optional[TrieNode]] = [root]
    while stack:
        node = stack.pop()
        if node is None:
            fp.write(f"{ABSENT}\n")
            continue
        fp.write(f"{node.prefix_count}\n{node.min_score_word_index}\n{node.min_unigram_score!r}\n")
        stack.extend(reversed(node.children))


def dumps(root: TrieNode) -> str:
    buf = io.StringIO()
    dump(root, buf)
    return buf.getvalue()


def _next_token(tokens: Iterator[str]) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise MalformedTrieStream("Unexpected end of trie stream") from None


def _read_int(tokens: Iterator[str]) -> int:
    tok = _next_token(tokens)
    try:
        return int(tok)
    except ValueError:
        raise MalformedTrieStream(f"Expected an integer, got {tok!r}") from None


def _read_float(tokens: Iterator[str]) -> float:
    tok = _next_token(tokens)
    try:
        return float(tok)
    except ValueError:
        raise MalformedTrieStream(f"Expected a float, got {tok!r}") from None


def _read_node(tokens: Iterator[str], alphabet_size: int) -> Optional[TrieNode]:
    count = _read_int(tokens)
    if count == ABSENT:
        return None
    if count < 0:
        raise MalformedTrieStream(f"Negative prefix count: {count}")
    node = TrieNode(alphabet_size)
    node.prefix_count = count
    node.min_score_word_index = _read_int(tokens)
    node.min_unigram_score = _read_float(tokens)
    return node


def loads(text: str, alphabet_size: int = VOCABULARY_SIZE) -> TrieNode:
    tokens = iter(text.split())
    root = _read_node(tokens, alphabet_size)
    if root is None:
        raise MalformedTrieStream("Trie stream has no root node")

    # Each frame is [node, index of the next child to read].
    stack: list[list] = [[root, 0]]
    while stack:
        frame = stack[-1]
        node, i = frame
        if i == alphabet_size:
            stack.pop()
            continue
        frame[1] = i + 1
        child = _read_node(tokens, alphabet_size)
        node.children[i] = child
        if child is not None:
            stack.append([child, 0])

    extra = next(tokens, None)
    if extra is not None:
        raise MalformedTrieStream(f"Trailing data after trie: {extra!r}")
    return root


def load(fp: TextIO, alphabet_size: int = VOCABULARY_SIZE) -> TrieNode:
    return loads(fp.read(), alphabet_size)
