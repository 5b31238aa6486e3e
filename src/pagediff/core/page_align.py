"""Text based page alignment for documents with different page counts.

When content is inserted or removed, pagination shifts and pairing pages by
index would compare every later page against the wrong counterpart. Pages are
instead matched on the similarity of their text, searching a small window of
neighbouring pages.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Set

from ..errors import PageCountMismatchError
from .types import PageMapping

logger = logging.getLogger(__name__)

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
        "been", "being", "have", "has", "had", "do", "does", "did", "will",
        "would", "should", "could", "may", "might", "can", "shall",
    }
)

JACCARD_WEIGHT = 0.7
LENGTH_WEIGHT = 0.3

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize_text(text: str) -> str:
    """Lower-case ``text`` and collapse runs of whitespace."""

    return _WHITESPACE.sub(" ", (text or "").lower()).strip()


def tokenize(text: str) -> List[str]:
    words = _PUNCTUATION.sub(" ", text.lower()).split()
    return [word for word in words if len(word) > 2 and word not in STOPWORDS]


def text_similarity(text1: str, text2: str) -> float:
    """Score how alike two page texts are, between 0 and 1.

    Combines the Jaccard index of the token sets (weight 0.7) with the ratio
    of the text lengths (weight 0.3). Two empty texts are identical; one empty
    text matches nothing.
    Two empty token sets count as equal.
    """

    if not text1 and not text2:
        return 1.0
    if not text1 or not text2:
        return 0.0

    set1 = set(tokenize(text1))
    set2 = set(tokenize(text2))
    union = set1 | set2
    jaccard = len(set1 & set2) / len(union) if union else 1.0

    length_ratio = min(len(text1), len(text2)) / max(len(text1), len(text2))
    return jaccard * JACCARD_WEIGHT + length_ratio * LENGTH_WEIGHT


def direct_mappings(page_count: int) -> List[PageMapping]:
    return [PageMapping(page_a=i, page_b=i, similarity=1.0) for i in range(page_count)]


def find_page_mappings(
    texts_a: Sequence[str],
    texts_b: Sequence[str],
    *,
    tolerance: int = 2,
    similarity_threshold: float = 0.3,
    fallback_to_same_index: bool = True,
) -> List[PageMapping]:
    """Greedily pair pages of A with unclaimed pages of B.

    Pages of A are visited in order. Each one takes the best scoring B page
    within ``tolerance`` pages of its own index that scores at least
    ``similarity_threshold``. Without such a candidate it falls back to the
    B page with the same index, when ``fallback_to_same_index`` is set and
    that page is still free. A page that finds nothing is left out of the
    result. The assignment is order dependent and not globally optimal.
    """

    norm_a = [normalize_text(text) for text in texts_a]
    norm_b = [normalize_text(text) for text in texts_b]
    claimed: Set[int] = set()
    mappings: List[PageMapping] = []

    for page_a, text_a in enumerate(norm_a):
        best_match: Optional[int] = None
        best_similarity = 0.0

        start = max(0, page_a - tolerance)
        end = min(len(norm_b) - 1, page_a + tolerance)
        for page_b in range(start, end + 1):
            if page_b in claimed:
                continue
            similarity = text_similarity(text_a, norm_b[page_b])
            if similarity > best_similarity and similarity >= similarity_threshold:
                best_similarity = similarity
                best_match = page_b

        if (
            best_match is None
            and fallback_to_same_index
            and page_a < len(norm_b)
            and page_a not in claimed
        ):
            best_match = page_a
            best_similarity = text_similarity(text_a, norm_b[page_a])
            logger.debug(
                "Page %d: no candidate above %.2f, falling back to same index (%.3f)",
                page_a,
                similarity_threshold,
                best_similarity,
            )

        if best_match is None:
            logger.warning("Page %d of document A has no counterpart in document B; skipped", page_a)
            continue

        claimed.add(best_match)
        mappings.append(PageMapping(page_a=page_a, page_b=best_match, similarity=best_similarity))

    return mappings


def plan_page_mappings(
    texts_a: Sequence[str],
    texts_b: Sequence[str],
    *,
    smart_alignment: bool = True,
    tolerance: int = 2,
    similarity_threshold: float = 0.3,
    fallback_to_same_index: bool = True,
) -> List[PageMapping]:
    """Decide which page pairs to compare.

    Equal page counts pair pages by index with similarity 1.0. Different
    counts use :func:`find_page_mappings`, or raise
    :class:`PageCountMismatchError` when ``smart_alignment`` is off.
    """

    if len(texts_a) == len(texts_b):
        return direct_mappings(len(texts_a))
    if not smart_alignment:
        raise PageCountMismatchError(len(texts_a), len(texts_b))
    return find_page_mappings(
        texts_a,
        texts_b,
        tolerance=tolerance,
        similarity_threshold=similarity_threshold,
        fallback_to_same_index=fallback_to_same_index,
    )
