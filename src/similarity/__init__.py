"""
Similarity Engine - TF-IDF vectors and cosine similarity.
"""

from src.similarity.tfidf import (
    STOP_WORDS,
    TfIdfSpace,
    build_vocabulary,
    compute_idf_scores,
    cosine_similarity,
    inverse_document_frequency,
    term_frequency,
    tokenize,
    vectorize,
)

__all__ = [
    "STOP_WORDS",
    "TfIdfSpace",
    "tokenize",
    "build_vocabulary",
    "term_frequency",
    "inverse_document_frequency",
    "compute_idf_scores",
    "vectorize",
    "cosine_similarity",
]
