"""
Transition / Keyword Analyzer - pure text functions for scene segmentation

1. KEYWORDS: normalize -> tokenize -> drop stopwords -> technical terms first,
   then frequency-ranked remaining tokens (max 5), context entity always kept.
2. TRANSITION MARKERS: Spanish discourse markers ("sin embargo", "por otro lado",
   "en resumen", ...) with a weight in (0, 1] = how strongly they signal a topic change.
3. TOPIC BOUNDARIES: pick the best marker near 1/3 and 2/3 of the narration so that
   image changes coincide with topic shifts instead of fixed intervals.

Char offsets are converted to seconds assuming uniform reading speed across the
whole script (known approximation, not validated against real speech timing).

All lookup tables are immutable and can be swapped per instance (KeywordAnalyzer).
"""

import math
import re
import unicodedata
from collections import Counter
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Pattern, Sequence, Tuple


# ============================================================================
# CONSTANTS
# ============================================================================

MAX_KEYWORDS = 5

# Fraction of total duration a marker may sit away from a target (15%)
MARKER_PROXIMITY_TOLERANCE = 0.15

# Minimum segment length in seconds (avoids abrupt image swaps)
MIN_SEGMENT_DURATION_S = 8

# Minimum weighted score for a marker to become a cut point
MIN_CUT_SCORE = 0.3

# Boundaries are quantized to whole seconds
BOUNDARY_QUANTIZE_STEP = 1.0


SPANISH_STOPWORDS: FrozenSet[str] = frozenset({
    # articles
    "el", "la", "los", "las", "un", "una", "unos", "unas",
    # prepositions
    "a", "ante", "bajo", "con", "contra", "de", "desde", "en", "entre",
    "hacia", "hasta", "para", "por", "segun", "sin", "sobre", "tras",
    # conjunctions
    "y", "e", "ni", "o", "u", "pero", "sino", "aunque", "porque", "que",
    "si", "como", "cuando", "donde", "mientras",
    # pronouns
    "yo", "tu", "ella", "nosotros", "ustedes", "ellos", "ellas",
    "me", "te", "se", "nos", "les", "lo",
    "mi", "su", "sus", "nuestro", "este", "esta", "estos", "estas",
    "ese", "esa", "esos", "esas", "aquel", "aquella",
    # auxiliaries
    "es", "son", "estan", "ser", "estar", "ha", "han", "hay",
    "fue", "fueron", "era", "eran", "sido", "siendo",
    # common adverbs
    "no", "muy", "mas", "menos", "ya", "aun", "tambien", "solo",
    "bien", "mal", "aqui", "ahi", "alli", "hoy", "ayer", "manana",
    # generic words
    "esto", "eso", "algo", "nada", "todo", "cada", "otro", "otra",
    "mismo", "misma", "cual", "quien", "cuyo", "del", "al",
})

# High-value terms for image search; these always rank before frequent words
TECH_KEYWORDS: FrozenSet[str] = frozenset({
    # AI/ML
    "ai", "ia", "inteligencia", "artificial", "machine", "learning",
    "deep", "neural", "network", "modelo", "algoritmo", "datos",
    "entrenamiento", "inferencia", "transformer", "llm", "gpt",
    # gaming
    "gaming", "videojuegos", "juegos", "virtual", "3d", "mundo",
    "interactivo", "simulacion", "render", "graficos",
    # tech general
    "tecnologia", "tech", "digital", "software", "hardware",
    "cloud", "nube", "api", "plataforma", "sistema",
    # companies
    "google", "deepmind", "openai", "anthropic", "microsoft",
    "meta", "apple", "nvidia", "amazon", "tesla",
})


def _marker(pattern: str, weight: float) -> Tuple[Pattern, float]:
    return re.compile(pattern, re.IGNORECASE), weight


TRANSITION_MARKERS: Tuple[Tuple[Pattern, float], ...] = (
    # strong (1.0) - explicit topic change
    _marker(r"\bpor otro lado\b", 1.0),
    _marker(r"\bpor otra parte\b", 1.0),
    _marker(r"\ben cambio\b", 1.0),
    _marker(r"\bsin embargo\b", 1.0),
    _marker(r"\bahora bien\b", 1.0),
    _marker(r"\bno obstante\b", 1.0),
    # medium (0.7) - topic progression
    _marker(r"\bahora\b", 0.7),
    _marker(r"\badem[aá]s\b", 0.7),
    _marker(r"\blo interesante\b", 0.7),
    _marker(r"\blo fascinante\b", 0.7),
    _marker(r"\bmientras tanto\b", 0.7),
    # conclusion / opinion (0.8) - section change
    _marker(r"\ben resumen\b", 0.8),
    _marker(r"\bfinalmente\b", 0.8),
    _marker(r"\ben conclusi[oó]n\b", 0.8),
    _marker(r"\bpersonalmente\b", 0.8),
    _marker(r"\ben mi opini[oó]n\b", 0.8),
    _marker(r"\bcreo que\b", 0.6),
    _marker(r"\bme parece\b", 0.6),
)


@dataclass(frozen=True)
class TransitionMarker:
    char_index: int
    weight: float
    phrase: str


# ============================================================================
# HELPERS
# ============================================================================

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (18.5 -> 19), unlike round()."""
    return int(math.floor(float(value) + 0.5))


def quantize_boundary(seconds: float, lo: float, hi: float) -> float:
    """Snap to BOUNDARY_QUANTIZE_STEP and clamp into [lo, hi] (lo wins if lo > hi)."""
    q = round_half_up(seconds / BOUNDARY_QUANTIZE_STEP) * BOUNDARY_QUANTIZE_STEP
    return max(lo, min(hi, q))


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text or "")
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def normalize_text(text: str) -> str:
    """lowercase, no accents, punctuation -> space, single spaces."""
    s = strip_diacritics(str(text or "").lower())
    s = re.sub(r"[^\w\s]", " ", s)
    return re.sub(r"\s+", " ", s).strip()


# ============================================================================
# ANALYZER
# ============================================================================

class KeywordAnalyzer:
    """
    Keyword extraction + transition detection over injectable lookup tables.

    Default tables are Spanish (narration language); tests or other locales
    can pass their own stopwords / technical terms / markers.
    """

    def __init__(
        self,
        stopwords: Optional[FrozenSet[str]] = None,
        tech_keywords: Optional[FrozenSet[str]] = None,
        markers: Optional[Sequence[Tuple[Pattern, float]]] = None,
        max_keywords: int = MAX_KEYWORDS,
        proximity_tolerance: float = MARKER_PROXIMITY_TOLERANCE,
        min_segment_duration: float = MIN_SEGMENT_DURATION_S,
        min_cut_score: float = MIN_CUT_SCORE,
        verbose: bool = False,
    ):
        self.stopwords = frozenset(stopwords if stopwords is not None else SPANISH_STOPWORDS)
        self.tech_keywords = frozenset(tech_keywords if tech_keywords is not None else TECH_KEYWORDS)
        self.markers = tuple(markers if markers is not None else TRANSITION_MARKERS)
        for _, weight in self.markers:
            if not (0.0 < float(weight) <= 1.0):
                raise ValueError(f"marker weight must be in (0, 1], got {weight}")
        self.max_keywords = int(max_keywords)
        self.proximity_tolerance = float(proximity_tolerance)
        self.min_segment_duration = float(min_segment_duration)
        self.min_cut_score = float(min_cut_score)
        self.verbose = verbose

    def extract_keywords(self, text: str, context_entity: Optional[str] = None) -> List[str]:
        words = [w for w in normalize_text(text).split(" ") if len(w) > 2]

        tech_matches: List[str] = []
        counts: Counter = Counter()
        for word in words:
            if word in self.stopwords:
                continue
            if word in self.tech_keywords and word not in tech_matches:
                tech_matches.append(word)
            counts[word] += 1

        # Counter.most_common keeps first-seen order for equal counts
        frequent = [w for w, _ in counts.most_common() if w not in tech_matches]
        keywords = (tech_matches + frequent)[: self.max_keywords]

        entity = str(context_entity or "").strip().lower()
        if entity and entity not in keywords:
            keywords.insert(0, entity)
            keywords = keywords[: self.max_keywords]

        return keywords

    def find_transition_markers(self, full_text: str) -> List[TransitionMarker]:
        found: List[TransitionMarker] = []
        for pattern, weight in self.markers:
            for m in pattern.finditer(full_text or ""):
                found.append(TransitionMarker(char_index=m.start(), weight=float(weight), phrase=m.group(0)))
        found.sort(key=lambda mk: mk.char_index)
        return found

    def locate_topic_boundaries(self, full_text: str, total_duration: float) -> Optional[Tuple[int, int]]:
        """
        Two cut points (seconds) near 1/3 and 2/3 of the narration, or None.

        None means "use uniform division": no text, no markers, a target without
        a qualifying marker, or a resulting segment shorter than the floor.
        """
        text = full_text or ""
        if not text or total_duration <= 0:
            return None

        markers = self.find_transition_markers(text)
        if not markers:
            if self.verbose:
                print("ℹ️  SceneSegmenter: no transition markers found")
            return None

        if self.verbose:
            found = ", ".join(f'"{m.phrase}"@{m.char_index}' for m in markers)
            print(f"🔎 SceneSegmenter: {len(markers)} markers: {found}")

        target1 = total_duration / 3.0
        target2 = 2.0 * total_duration / 3.0
        tolerance = total_duration * self.proximity_tolerance

        best1: Optional[Tuple[float, float]] = None  # (seconds, score)
        best2: Optional[Tuple[float, float]] = None
        for marker in markers:
            t = (marker.char_index / len(text)) * total_duration

            dist1 = abs(t - target1)
            if dist1 <= tolerance:
                s1 = marker.weight * (1.0 - dist1 / tolerance)
                if s1 >= self.min_cut_score and (best1 is None or s1 > best1[1]):
                    best1 = (t, s1)

            dist2 = abs(t - target2)
            if dist2 <= tolerance:
                s2 = marker.weight * (1.0 - dist2 / tolerance)
                if s2 >= self.min_cut_score and (best2 is None or s2 > best2[1]):
                    best2 = (t, s2)

        if best1 is None or best2 is None:
            if self.verbose:
                print(
                    f"ℹ️  SceneSegmenter: not enough cuts "
                    f"(target1={'OK' if best1 else 'MISS'}, target2={'OK' if best2 else 'MISS'})"
                )
            return None

        end = round_half_up(total_duration)
        floor = self.min_segment_duration
        cut1 = quantize_boundary(best1[0], floor, end - 2 * floor)
        cut2 = quantize_boundary(best2[0], cut1 + floor, end - floor)

        spans = (cut1, cut2 - cut1, end - cut2)
        if any(span < floor for span in spans):
            if self.verbose:
                print(f"⚠️  SceneSegmenter: invalid spans {spans} (min {floor}s)")
            return None

        if self.verbose:
            print(
                f"✅ SceneSegmenter: topic-aware cuts {int(cut1)}s (score {best1[1]:.2f}), "
                f"{int(cut2)}s (score {best2[1]:.2f})"
            )
        return int(cut1), int(cut2)


_DEFAULT_ANALYZER = KeywordAnalyzer()


def extract_keywords(text: str, context_entity: Optional[str] = None) -> List[str]:
    return _DEFAULT_ANALYZER.extract_keywords(text, context_entity)


def find_transition_markers(full_text: str) -> List[TransitionMarker]:
    return _DEFAULT_ANALYZER.find_transition_markers(full_text)


def locate_topic_boundaries(full_text: str, total_duration: float) -> Optional[Tuple[int, int]]:
    return _DEFAULT_ANALYZER.locate_topic_boundaries(full_text, total_duration)
