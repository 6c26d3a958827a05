"""Tokenization and keyword signatures for lexical topic clustering."""

from __future__ import annotations

from collections import Counter
import re
from typing import Iterable, List, Sequence


MAX_TOKENS = 80
SIGNATURE_SIZE = 12
MIN_TOKEN_LEN = 3

_URL_RE = re.compile(r"https?://\S+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WS_RE = re.compile(r"\s+")

STOPWORDS = frozenset(
    {
        "a", "about", "after", "again", "all", "also", "an", "and", "any", "are",
        "as", "at", "be", "been", "before", "being", "breaking", "but", "by",
        "can", "could", "did", "does", "done", "else", "for", "from", "had",
        "has", "have", "here", "his", "her", "how", "if", "in", "into", "is",
        "it", "its", "just", "latest", "live", "more", "most", "new", "no",
        "not", "now", "of", "on", "only", "or", "our", "out", "over", "says",
        "she", "should", "some", "than", "that", "the", "their", "them", "then",
        "there", "these", "they", "this", "those", "through", "to", "today",
        "under", "until", "update", "very", "was", "watch", "we", "were", "what",
        "when", "where", "which", "while", "who", "why", "will", "with",
        "without", "would", "yes", "you", "your",
    }
)

# plural endings that should not be folded
_KEEP_S_SUFFIXES = ("ss", "us", "is", "ous", "ics")


def normalize_text(text: str) -> str:
    lowered = str(text or "").lower()
    lowered = _URL_RE.sub(" ", lowered)
    lowered = _NON_ALNUM_RE.sub(" ", lowered)
    return _WS_RE.sub(" ", lowered).strip()


def fold_plural(token: str) -> str:
    """Fold simple English plurals so 'rates' and 'rate' share a token."""
    if len(token) <= 3 or not token.endswith("s") or token.isdigit():
        return token
    if token.endswith(_KEEP_S_SUFFIXES):
        return token
    if token.endswith("ies") and len(token) > 4:
        return token[:-3] + "y"
    return token[:-1]


def tokenize(title: str, summary: str = "") -> List[str]:
    """Content tokens of title+summary, stopwords and short tokens removed, capped at 80."""
    tokens: List[str] = []
    for part in normalize_text(f"{title} {summary}").split(" "):
        if not part or part in STOPWORDS:
            continue
        token = fold_plural(part)
        if token in STOPWORDS:
            # "news" must not fold into the stopword "new"
            token = part
        if len(token) < MIN_TOKEN_LEN:
            continue
        tokens.append(token)
        if len(tokens) >= MAX_TOKENS:
            break
    return tokens


def top_keywords(tokens: Iterable[str], k: int = SIGNATURE_SIZE) -> List[str]:
    """Most frequent tokens first; equal counts keep first-seen order."""
    counts = Counter(tokens)
    ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return [token for token, _ in ranked[:k]]


def signature_for(title: str, summary: str = "") -> List[str]:
    return top_keywords(tokenize(title, summary), SIGNATURE_SIZE)


def jaccard(a: Sequence[str] | set, b: Sequence[str] | set) -> float:
    left = set(a)
    right = set(b)
    union = len(left | right)
    if union == 0:
        return 0.0
    return len(left & right) / union
