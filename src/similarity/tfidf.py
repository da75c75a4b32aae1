"""
TF-IDF Similarity Engine.

Vectorizes short text snippets (recommended fixes) against a small shared
corpus and scores them with cosine similarity. Everything here is pure and
deterministic: the same corpus always yields the same vectors.
"""

import math
import re
from collections.abc import Iterable, Sequence

import numpy as np

# Numbers are never stop words: "$55" vs "$50" is exactly what we look for
STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "and", "the", "in", "is", "it", "to", "of", "for", "on", "with",
    "as", "by", "that", "this", "was", "were", "be", "been", "being", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should", "may",
    "might", "must", "can", "shall", "or", "but", "if", "then", "else", "when",
    "at", "from", "up", "out", "over", "under", "again", "further", "too", "very",
    "show", "shows", "says", "said",
    "br",  # leftover of <br> line-break markers
})

# Hyphens survive so dates like 2024-01-15 stay one token
_NON_TOKEN_CHARS = re.compile(r"[^\w\s\-]")


def tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation (not hyphens) and drop stop words."""
    cleaned = _NON_TOKEN_CHARS.sub(" ", text.lower())
    return [token for token in cleaned.split() if token not in STOP_WORDS]


def build_vocabulary(documents: Iterable[str]) -> list[str]:
    """Union of tokens across documents, in first-seen order."""
    seen: dict[str, None] = {}
    for document in documents:
        for token in tokenize(document):
            seen.setdefault(token, None)
    return list(seen)


def term_frequency(tokens: Sequence[str], term: str) -> float:
    if not tokens:
        return 0.0
    return tokens.count(term) / len(tokens)


def inverse_document_frequency(documents: Sequence[str], term: str) -> float:
    """
    Smoothed IDF: ln(N / (1 + docs containing term)).

    A term found in every document gets a small negative weight.
    """
    if not documents:
        return 0.0
    containing = sum(1 for document in documents if term in tokenize(document))
    return math.log(len(documents) / (1 + containing))


def compute_idf_scores(documents: Sequence[str], vocabulary: Sequence[str]) -> dict[str, float]:
    """IDF for every vocabulary term, tokenizing each document once."""
    token_sets = [set(tokenize(document)) for document in documents]
    total = len(documents)
    return {
        term: math.log(total / (1 + sum(1 for tokens in token_sets if term in tokens)))
        for term in vocabulary
    }


def vectorize(
    document: str,
    vocabulary: Sequence[str],
    idf_scores: dict[str, float],
) -> np.ndarray:
    """TF-IDF vector of a document over the vocabulary, in vocabulary order."""
    tokens = tokenize(document)
    return np.array(
        [term_frequency(tokens, term) * idf_scores.get(term, 0.0) for term in vocabulary],
        dtype=float,
    )


def cosine_similarity(vector_a: np.ndarray, vector_b: np.ndarray) -> float:
    """
    Cosine of the angle between two vectors.

    Returns exactly 0.0 when either vector has zero magnitude (empty or
    all-stop-word text) instead of NaN.
    """
    norm_a = float(np.linalg.norm(vector_a))
    norm_b = float(np.linalg.norm(vector_b))

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(vector_a, vector_b) / (norm_a * norm_b))


class TfIdfSpace:
    """
    Shared TF-IDF space built once from a corpus.

    Usage:
        space = TfIdfSpace(fixes_a + fixes_b)
        score = space.similarity(fixes_a[0], fixes_b[0])
    """

    def __init__(self, corpus: Sequence[str]) -> None:
        self.corpus = list(corpus)
        self.vocabulary = build_vocabulary(self.corpus)
        self.idf_scores = compute_idf_scores(self.corpus, self.vocabulary)

    def vectorize(self, document: str) -> np.ndarray:
        return vectorize(document, self.vocabulary, self.idf_scores)

    def similarity(self, document_a: str, document_b: str) -> float:
        return cosine_similarity(self.vectorize(document_a), self.vectorize(document_b))
