"""
Scene Segmenter - narration script -> 2-3 timed visual segments with search queries

Flow (per run, nothing persisted):
  BoundaryDecision -> SectionMapping -> PerSegmentExtraction -> segments

- 3 segments: topic-aware cuts at transition markers, else uniform thirds
- 2 segments (short narration): always uniform
- each segment gets the text of every script section whose time window overlaps it,
  its keywords and a SceneQuery:
    scene 0 + known entity  -> EntityLogoQuery (logo cascade)
    otherwise               -> KeywordQuery (visual concept phrase or translated keywords,
                               always grounded with entity/headline)
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Sequence, Tuple, Union

from query_translator import QueryTranslator
from transition_analyzer import KeywordAnalyzer, round_half_up, strip_diacritics


# ============================================================================
# CONFIG
# ============================================================================

# Target seconds per image
SEGMENT_DURATION = 15

# Max image changes per video (visual coherence)
MAX_IMAGE_SEGMENTS = 3
MIN_IMAGE_SEGMENTS = 2

# Typical time share of each script section (cumulative end fractions)
SECTION_PROPORTIONS: Tuple[Tuple[str, float], ...] = (
    ("hook", 0.15),
    ("body", 0.55),
    ("opinion", 0.85),
    ("cta", 1.0),
)

MAX_VISUAL_CONCEPTS = 2
MAX_QUERY_KEYWORDS = 3


def _vp(pattern: str, query: str) -> Tuple[Pattern, str]:
    return re.compile(pattern, re.IGNORECASE), query


# Matched against diacritics-free segment text; first hit becomes the query
VISUAL_PATTERNS: Tuple[Tuple[Pattern, str], ...] = (
    # virtual worlds
    _vp(r"mundos?\s+virtuales?", "virtual world 3d environment"),
    _vp(r"entornos?\s+3d|3d\s+interactivos?", "3d interactive environment"),
    _vp(r"realidad\s+virtual|vr\s+headset", "virtual reality headset"),
    _vp(r"metaverso|metaverse", "metaverse digital world"),
    # robots / automation
    _vp(r"robots?\s+(humanoides?|autonomos?)", "humanoid robot technology"),
    _vp(r"automatizacion\s+industrial", "industrial automation robot"),
    _vp(r"drones?\s+(autonomos?|inteligentes?)", "autonomous drone technology"),
    # AI visuals
    _vp(r"redes?\s+neuronales?", "neural network visualization"),
    _vp(r"cerebro\s+(artificial|digital)", "artificial brain technology"),
    _vp(r"deep\s+learning|aprendizaje\s+profundo", "deep learning neural network"),
    # holograms
    _vp(r"holograma|holografico", "hologram technology display"),
    _vp(r"interfaz\s+(futurista|holografica)", "futuristic holographic interface"),
    # hardware
    _vp(r"chips?\s+(neuronales?|cuanticos?)", "neural chip processor"),
    _vp(r"procesador|cpu\s+avanzado", "advanced processor technology"),
    _vp(r"\bgpu\b|tarjeta\s+grafica", "gpu graphics card technology"),
    # data
    _vp(r"big\s+data|datos\s+masivos", "big data visualization"),
    _vp(r"flujo\s+de\s+datos", "data stream visualization"),
    _vp(r"\bnube\b|cloud\s+computing", "cloud computing technology"),
    # vehicles
    _vp(r"vehiculos?\s+autonomos?|coches?\s+autonomos?", "autonomous vehicle self driving car"),
    _vp(r"tesla\s+(model|cybertruck)", "tesla electric vehicle"),
    # space
    _vp(r"satelites?\s+(ia|inteligentes?)", "satellite space technology"),
    _vp(r"exploracion\s+espacial", "space exploration technology"),
    # medicine
    _vp(r"diagnostico\s+(ia|medico)", "medical ai diagnosis technology"),
    _vp(r"cirugia\s+robotica", "robotic surgery medical"),
    # security
    _vp(r"reconocimiento\s+facial", "facial recognition technology"),
    _vp(r"ciberseguridad|seguridad\s+digital", "cybersecurity digital protection"),
    # generated content
    _vp(r"generacion\s+de\s+imagenes", "ai image generation"),
    _vp(r"texto\s+a\s+(imagen|video)", "text to image ai generation"),
    _vp(r"video\s+generado|sintesis\s+de\s+video", "ai video synthesis generation"),
)


# ============================================================================
# TYPES
# ============================================================================

@dataclass(frozen=True)
class NarrationScript:
    hook: str = ""
    body: str = ""
    opinion: str = ""
    cta: str = ""

    def sections(self) -> List[Tuple[str, str]]:
        return [("hook", self.hook), ("body", self.body), ("opinion", self.opinion), ("cta", self.cta)]

    def full_text(self) -> str:
        return " ".join([self.hook or "", self.body or "", self.opinion or "", self.cta or ""])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NarrationScript":
        data = data or {}
        return cls(
            hook=str(data.get("hook") or ""),
            body=str(data.get("body") or ""),
            opinion=str(data.get("opinion") or ""),
            cta=str(data.get("cta") or ""),
        )


@dataclass(frozen=True)
class EntityLogoQuery:
    """Scene query that asks for the entity's logo instead of a photo search."""
    entity: str

    kind = "entity_logo"

    @property
    def text(self) -> str:
        return f"{self.entity} logo"


@dataclass(frozen=True)
class KeywordQuery:
    text: str

    kind = "keywords"


SceneQuery = Union[EntityLogoQuery, KeywordQuery]


@dataclass(frozen=True)
class SceneSegment:
    index: int
    start_second: int
    end_second: int
    text: str
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    search_query: SceneQuery = field(default_factory=lambda: KeywordQuery(""))

    @property
    def duration(self) -> int:
        return self.end_second - self.start_second

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "startSecond": self.start_second,
            "endSecond": self.end_second,
            "text": self.text,
            "keywords": list(self.keywords),
            "searchQuery": self.search_query.text,
            "queryKind": self.search_query.kind,
        }


# ============================================================================
# SEGMENTER
# ============================================================================

def segment_count_for(total_duration: float) -> int:
    return min(MAX_IMAGE_SEGMENTS, max(MIN_IMAGE_SEGMENTS, int(math.ceil(total_duration / SEGMENT_DURATION))))


def uniform_boundaries(total_duration: float, count: int) -> List[int]:
    step = total_duration / count
    return [round_half_up(i * step) for i in range(count)]


def map_sections(script: NarrationScript, total_duration: float) -> List[Dict[str, Any]]:
    """Fixed-proportion time windows for hook/body/opinion/cta."""
    texts = dict(script.sections())
    windows = []
    start: float = 0
    for name, end_frac in SECTION_PROPORTIONS:
        end = total_duration if end_frac >= 1.0 else round_half_up(total_duration * end_frac)
        windows.append({"section": name, "start": start, "end": end, "text": texts.get(name, "")})
        start = end
    return windows


def text_for_range(windows: Sequence[Dict[str, Any]], start: float, end: float) -> str:
    parts = []
    for w in windows:
        if start < w["end"] and end > w["start"]:
            t = str(w.get("text") or "").strip()
            if t:
                parts.append(t)
    return " ".join(parts)


class SceneSegmenter:
    def __init__(
        self,
        analyzer: Optional[KeywordAnalyzer] = None,
        translator: Optional[QueryTranslator] = None,
        visual_patterns: Optional[Sequence[Tuple[Pattern, str]]] = None,
        verbose: bool = False,
    ):
        self.analyzer = analyzer or KeywordAnalyzer(verbose=verbose)
        self.translator = translator or QueryTranslator(verbose=verbose)
        self.visual_patterns = tuple(visual_patterns if visual_patterns is not None else VISUAL_PATTERNS)
        self.verbose = verbose

    def segment_script(
        self,
        script: NarrationScript,
        total_duration: float,
        entity: Optional[str] = None,
        headline: Optional[str] = None,
    ) -> List[SceneSegment]:
        duration = float(total_duration)
        if not math.isfinite(duration) or duration <= 0:
            raise ValueError(f"total_duration must be a positive number, got {total_duration!r}")

        entity = str(entity or "").strip() or None
        count = segment_count_for(duration)

        if self.verbose:
            print(f"🎞️  SceneSegmenter: {duration:.1f}s narration -> {count} segments (max {MAX_IMAGE_SEGMENTS})")

        boundaries: Optional[List[int]] = None
        if count == 3:
            cuts = self.analyzer.locate_topic_boundaries(script.full_text(), duration)
            if cuts:
                boundaries = [0, cuts[0], cuts[1]]
            elif self.verbose:
                print("ℹ️  SceneSegmenter: fallback to uniform division")
        if boundaries is None:
            boundaries = uniform_boundaries(duration, count)

        # Sub-second/very short narrations: keep every span >= 1s
        for i in range(1, len(boundaries)):
            if boundaries[i] <= boundaries[i - 1]:
                boundaries[i] = boundaries[i - 1] + 1
        timeline_end = max(round_half_up(duration), boundaries[-1] + 1)

        windows = map_sections(script, duration)
        segments: List[SceneSegment] = []
        for i, start in enumerate(boundaries):
            end = boundaries[i + 1] if i + 1 < len(boundaries) else timeline_end
            text = text_for_range(windows, start, end)
            keywords = self.analyzer.extract_keywords(text, entity)
            query = self.build_search_query(keywords, i, entity, text, headline)

            segments.append(SceneSegment(
                index=i,
                start_second=int(start),
                end_second=int(end),
                text=text,
                keywords=tuple(keywords),
                search_query=query,
            ))
            if self.verbose:
                print(f"   Segment {i}: {start}-{end}s, {query.kind} query: '{query.text}'")

        return segments

    def extract_visual_concepts(self, text: str) -> List[str]:
        plain = strip_diacritics(text or "")
        concepts: List[str] = []
        for pattern, query in self.visual_patterns:
            if pattern.search(plain) and query not in concepts:
                concepts.append(query)
                if len(concepts) >= MAX_VISUAL_CONCEPTS:
                    break
        return concepts

    def build_search_query(
        self,
        keywords: Sequence[str],
        segment_index: int,
        entity: Optional[str] = None,
        text: str = "",
        headline: Optional[str] = None,
    ) -> SceneQuery:
        if segment_index == 0 and entity:
            return EntityLogoQuery(entity)

        concepts = self.extract_visual_concepts(text)
        if concepts:
            if self.verbose:
                print(f"   🎨 visual concepts: {concepts}")
            return KeywordQuery(f"{entity} {concepts[0]}" if entity else concepts[0])

        # Headline keywords carry the central topic; segment keywords add specificity
        title_keywords = self.analyzer.extract_keywords(headline, entity)[:2] if headline else []
        combined: List[str] = []
        for kw in list(title_keywords) + list(keywords):
            if kw not in combined:
                combined.append(kw)

        query_keywords = self.translator.translate(combined[:5])[:MAX_QUERY_KEYWORDS]

        if entity and not any(k.lower() == entity.lower() for k in query_keywords):
            query_keywords.insert(0, entity.lower())
            query_keywords = query_keywords[:MAX_QUERY_KEYWORDS]

        return KeywordQuery(" ".join(query_keywords))
