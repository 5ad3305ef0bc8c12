"""
Candidate Scorer - deterministic relevance scoring for stock-photo candidates.

Instead of blindly taking the first search result, every candidate is scored:

  ✅ PLUS:
  1. text relevance   (50) matched keywords / all keywords, substring in alt text
  2. orientation       (6) portrait full, square 1/2, landscape 0.4
  3. resolution        (6) linear between minimum_width and ideal_width
  4. position          (4) earlier search results rank higher (-20% per slot)

  ❌ MINUS:
  5. generic penalty (-20) alt text looks like boilerplate stock imagery

HARD GATE: text relevance < min_text_relevance -> score 0, no matter how
nice the picture is. Selection is absolute: nothing above the minimum means
"no image", never "least-bad image".
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

from visual_config import DEFAULT_SCORING_WEIGHTS, ScoringWeights


# Boilerplate stock imagery (robots, circuits, glowing abstract renders ...)
GENERIC_PENALTY_PATTERNS: Tuple[Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\brobot\b",
        r"\bcircuit\b",
        r"\bfuturist",
        r"\babstract\b",
        r"\bcyber",
        r"\bneon\b",
        r"\bhologram",
        r"\bdigital brain",
        r"\bai concept",
        r"\btechnology background",
        r"\bmatrix\b",
        r"\bvirtual reality\b",
        r"\bdata stream",
        r"\bglowing\b",
        r"\b3d render",
    )
)


@dataclass(frozen=True)
class ImageCandidate:
    url: str
    alt_text: str = ""
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class ScoredSelection:
    url: str
    score: float
    alt: str
    position: int


def text_relevance(alt_text: str, keywords: Sequence[str], weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> float:
    kws = [str(k).lower() for k in (keywords or []) if str(k).strip()]
    if not kws or not alt_text:
        return 0.0
    alt = alt_text.lower()
    matched = sum(1 for kw in kws if kw in alt)
    return (matched / len(kws)) * weights.text_relevance


def is_generic(alt_text: str, patterns: Sequence[Pattern] = GENERIC_PENALTY_PATTERNS) -> bool:
    return any(p.search(alt_text or "") for p in patterns)


def score_candidate(
    candidate: ImageCandidate,
    keywords: Sequence[str],
    position: int,
    weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
) -> float:
    """Score 0..66 (see module docstring). Irrelevant candidates score exactly 0."""
    relevance = text_relevance(candidate.alt_text, keywords, weights)
    if relevance < weights.min_text_relevance:
        return 0.0

    score = relevance

    if candidate.height > candidate.width:
        score += weights.orientation_bonus
    elif candidate.height == candidate.width:
        score += weights.orientation_bonus * 0.5
    else:
        score += weights.orientation_bonus * 0.4

    if candidate.width >= weights.ideal_width:
        score += weights.resolution
    elif candidate.width >= weights.minimum_width:
        ratio = (candidate.width - weights.minimum_width) / (weights.ideal_width - weights.minimum_width)
        score += ratio * weights.resolution

    score += max(0.0, 1.0 - position * 0.2) * weights.position_bonus

    if is_generic(candidate.alt_text):
        score -= weights.generic_penalty

    return max(0.0, score)


def minimum_score_for(segment_index: int, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> float:
    # Opening image sets the tone of the video: stricter threshold
    if segment_index == 0:
        return weights.first_image_min_score
    return weights.minimum_score


def select_best(
    candidates: Sequence[ImageCandidate],
    keywords: Sequence[str],
    segment_index: int = 1,
    weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
    verbose: bool = False,
) -> Optional[ScoredSelection]:
    if not candidates:
        return None

    best: Optional[ScoredSelection] = None
    for i, cand in enumerate(candidates):
        s = score_candidate(cand, keywords, i, weights)
        # strict > keeps the earliest candidate on ties
        if best is None or s > best.score:
            best = ScoredSelection(url=cand.url, score=s, alt=cand.alt_text, position=i)

    threshold = minimum_score_for(segment_index, weights)
    if best is None or best.score < threshold:
        if verbose:
            top = best.score if best else 0.0
            print(f"  ❌ Scoring: no candidate above threshold (best={top:.0f}, min={threshold:.0f})")
        return None

    if verbose:
        print(f"  🏆 Scoring: best={best.score:.0f} @{best.position} ({best.alt[:40]})")
    return best
