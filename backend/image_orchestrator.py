"""
Image Orchestrator - one image per scene segment via an ordered source cascade.

The cascade is data: a list of CascadeStep values tried in order, first hit wins.

Logo cascade (EntityLogoQuery, scene 0 with a known company):
  clearbit -> logodev -> google ("<entity> logo high quality", logo mode)
  -> pexels (entity name, first result) -> none

Content cascade (KeywordQuery):
  pexels scored (primary) -> unsplash (primary) -> google (primary)
  -> pexels scored (each alternative query) -> pexels scored (simplified query)
  -> none

- unconfigured source -> step skipped silently
- source exception    -> treated as "no result", next step
- exhausted cascade   -> SceneImage(image_url=None, source="none"), never a placeholder
"""

import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from candidate_scorer import select_best
from image_sources import CandidateSource, SourceRegistry
from query_translator import QueryTranslator
from scene_segmenter import EntityLogoQuery, SceneSegment
from visual_config import DEFAULT_SCORING_WEIGHTS, RATE_LIMIT_DELAY_SEC, ScoringWeights


SOURCE_NONE = "none"


@dataclass
class SceneImage:
    scene_index: int
    start_second: int
    end_second: int
    image_url: Optional[str]
    query: str
    source: str
    cached: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sceneIndex": self.scene_index,
            "startSecond": self.start_second,
            "endSecond": self.end_second,
            "imageUrl": self.image_url,
            "query": self.query,
            "source": self.source,
            "cached": self.cached,
        }


@dataclass(frozen=True)
class CascadeStep:
    """
    One attempt in the cascade.

    source: registry tag, also reported as SceneImage.source on success
    query: string sent to the provider
    scored: True -> fetch candidates and gate them through the scorer
    label: query reported in SceneImage (defaults to `query`)
    options: extra provider kwargs (e.g. google mode)
    """
    source: str
    query: str
    scored: bool = False
    label: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def reported_query(self) -> str:
        return self.label if self.label is not None else self.query


@dataclass
class StepOutcome:
    source: str
    status: str  # "hit" | "miss" | "skipped" | "error"
    url: Optional[str] = None
    score: Optional[float] = None


class ImageOrchestrator:
    def __init__(
        self,
        sources: SourceRegistry,
        translator: Optional[QueryTranslator] = None,
        weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
        rate_limit_delay_sec: float = RATE_LIMIT_DELAY_SEC,
        sleep: Callable[[float], None] = time.sleep,
        verbose: bool = False,
    ):
        self.sources = sources
        self.translator = translator or QueryTranslator(verbose=verbose)
        self.weights = weights
        self.rate_limit_delay_sec = max(0.0, float(rate_limit_delay_sec))
        self.sleep = sleep
        self.verbose = verbose

    # ------------------------------------------------------------------
    # cascade definitions
    # ------------------------------------------------------------------

    def logo_steps(self, entity: str) -> List[CascadeStep]:
        logo_query = f"{entity} logo"
        return [
            CascadeStep("clearbit", entity, label=logo_query),
            CascadeStep("logodev", entity, label=logo_query),
            CascadeStep("google", f"{entity} logo high quality", label=logo_query, options={"mode": "logo"}),
            CascadeStep("pexels", entity),
        ]

    def content_steps(self, segment: SceneSegment) -> List[CascadeStep]:
        primary = segment.search_query.text
        steps = [
            CascadeStep("pexels", primary, scored=True),
            CascadeStep("unsplash", primary),
            CascadeStep("google", primary, options={"mode": "photo"}),
        ]

        smart = self.translator.build_queries(list(segment.keywords), segment.text)
        for alt in smart.alternatives:
            steps.append(CascadeStep("pexels", alt, scored=True))

        simplified = self.translator.simplify(list(segment.keywords))
        if simplified != primary:
            steps.append(CascadeStep("pexels", simplified, scored=True))
        return steps

    def steps_for(self, segment: SceneSegment) -> List[CascadeStep]:
        query = segment.search_query
        if isinstance(query, EntityLogoQuery):
            return self.logo_steps(query.entity)
        return self.content_steps(segment)

    # ------------------------------------------------------------------
    # execution
    # ------------------------------------------------------------------

    def _run_step(self, step: CascadeStep, segment: SceneSegment) -> StepOutcome:
        source = self.sources.get(step.source)
        if source is None or not step.query.strip():
            return StepOutcome(step.source, "skipped")

        try:
            if step.scored:
                if not isinstance(source, CandidateSource):
                    raise TypeError(f"source '{step.source}' cannot return scorable candidates")
                candidates = source.search_candidates(step.query, self.weights.candidate_count)
                best = select_best(
                    candidates,
                    step.query.split(),
                    segment_index=segment.index,
                    weights=self.weights,
                    verbose=self.verbose,
                )
                if best:
                    return StepOutcome(step.source, "hit", url=best.url, score=round(best.score, 2))
                return StepOutcome(step.source, "miss")

            url = source.find_url(step.query, **step.options)
            if url:
                return StepOutcome(step.source, "hit", url=url)
            return StepOutcome(step.source, "miss")
        except Exception as e:
            if self.verbose:
                print(f"⚠️  ImageOrchestrator: {step.source} failed for '{step.query[:60]}': {e}")
            return StepOutcome(step.source, "error")

    def resolve_segment(self, segment: SceneSegment) -> SceneImage:
        steps = self.steps_for(segment)
        attempts: List[Dict[str, Any]] = []
        image: Optional[SceneImage] = None

        for step in steps:
            outcome = self._run_step(step, segment)
            if outcome.status != "skipped":
                attempts.append({"source": step.source, "query": step.query[:80], "status": outcome.status})
            if outcome.status == "hit":
                image = SceneImage(
                    scene_index=segment.index,
                    start_second=segment.start_second,
                    end_second=segment.end_second,
                    image_url=outcome.url,
                    query=step.reported_query,
                    source=step.source,
                )
                if outcome.score is not None:
                    attempts[-1]["score"] = outcome.score
                break

        if image is None:
            image = SceneImage(
                scene_index=segment.index,
                start_second=segment.start_second,
                end_second=segment.end_second,
                image_url=None,
                query=segment.search_query.text,
                source=SOURCE_NONE,
            )

        telemetry = {
            "scene_index": segment.index,
            "query_kind": segment.search_query.kind,
            "query": segment.search_query.text[:80],
            "steps_total": len(steps),
            "attempts": attempts,
            "resolved_source": image.source,
        }
        print(f"SCENE_IMAGE_TELEMETRY: {json.dumps(telemetry, ensure_ascii=False)}")
        return image

    def search_by_segments(self, segments: Sequence[SceneSegment]) -> List[SceneImage]:
        if self.verbose:
            print(f"🖼️  ImageOrchestrator: searching images for {len(segments)} segments")

        results: List[SceneImage] = []
        for segment in segments:
            if results and self.rate_limit_delay_sec > 0:
                self.sleep(self.rate_limit_delay_sec)

            if self.verbose:
                print(f"   Segment {segment.index}: '{segment.search_query.text}'")
            image = self.resolve_segment(segment)
            results.append(image)
            if self.verbose:
                mark = "✓" if image.image_url else "∅"
                print(f"   Segment {segment.index}: {image.source} {mark}")

        return results

    def orchestrate(self, segments: Sequence[SceneSegment]) -> Dict[str, Any]:
        scenes = self.search_by_segments(segments)
        return {
            "scenes": [s.to_dict() for s in scenes],
            "totalSegments": len(segments),
            "generatedAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
