"""
Text Processing Service
=======================

Sentence splitting, term normalisation and keyword tokenisation shared by
the segmenter, the learner and the keyword extractor.
"""

import re
from typing import List, Iterable


_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+|\n+")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")

# Basic English stop words
STOPWORDS = frozenset({
    "a", "about", "above", "after", "again", "against", "all", "also", "am",
    "an", "and", "any", "are", "as", "at", "be", "because", "been", "before",
    "being", "below", "between", "both", "but", "by", "can", "could", "did",
    "do", "does", "doing", "down", "during", "each", "even", "few", "for",
    "from", "further", "had", "has", "have", "having", "he", "her", "here",
    "hers", "herself", "him", "himself", "his", "how", "i", "if", "in", "into",
    "is", "it", "its", "itself", "just", "like", "many", "may", "me", "might",
    "more", "most", "much", "must", "my", "myself", "new", "no", "nor", "not",
    "now", "of", "off", "on", "once", "one", "only", "or", "other", "our",
    "ours", "ourselves", "out", "over", "own", "same", "she", "should", "so",
    "some", "such", "than", "that", "the", "their", "theirs", "them",
    "themselves", "then", "there", "these", "they", "this", "those", "through",
    "to", "too", "under", "until", "up", "us", "very", "was", "we", "were",
    "what", "when", "where", "which", "while", "who", "whom", "why", "will",
    "with", "would", "you", "your", "yours", "yourself", "yourselves",
})


class TextProcessor:
    """Text normalisation and tokenisation helpers"""

    @staticmethod
    def split_sentences(content: str) -> List[str]:
        """
        Split content into sentence-like units.

        Units end at sentence-terminal punctuation followed by whitespace, or
        at newlines. Units are trimmed and empty ones dropped.
        """
        if not content:
            return []
        parts = _SENTENCE_BOUNDARY.split(content)
        return [p.strip() for p in parts if p and p.strip()]

    @staticmethod
    def normalize_term(term: str) -> str:
        """Lowercase and trim a tag synonym"""
        return term.strip().lower()

    @classmethod
    def normalize_terms(cls, terms: Iterable[str]) -> List[str]:
        """Normalise terms and drop blanks and duplicates, keeping first-seen order"""
        seen = {}
        for term in terms:
            normalized = cls.normalize_term(term)
            if normalized:
                seen.setdefault(normalized, None)
        return list(seen)

    @staticmethod
    def tokenize(content: str, stopwords: Iterable[str] = STOPWORDS) -> List[str]:
        """Lowercase, strip non-alphanumerics and drop stopwords"""
        stop = stopwords if isinstance(stopwords, (set, frozenset)) else set(stopwords)
        cleaned = _NON_ALPHANUMERIC.sub(" ", content.lower())
        return [tok for tok in cleaned.split() if tok and tok not in stop]

    @classmethod
    def ngrams(cls, content: str) -> List[str]:
        """Every unigram followed by every adjacent bigram of the filtered tokens"""
        tokens = cls.tokenize(content)
        bigrams = [f"{a} {b}" for a, b in zip(tokens, tokens[1:])]
        return tokens + bigrams
