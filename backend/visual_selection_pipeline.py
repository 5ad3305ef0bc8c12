"""
Visual Selection Pipeline - entry point: narration script -> one SceneImage per segment

Sequence:
1. validate duration (the only hard failure, raised before any work)
2. entity: explicit, or detected from the headline (optional)
3. Scene Segmenter -> 2-3 segments with queries
4. Image Orchestrator -> source cascade per segment (never raises)
"""

import math
from typing import Any, Dict, List, Optional, Tuple, Union

from entity_mapping import detect_entity as detect_known_entity
from image_orchestrator import ImageOrchestrator, SceneImage
from image_sources import SourceRegistry, create_image_sources
from query_translator import QueryTranslator
from scene_segmenter import NarrationScript, SceneSegment, SceneSegmenter
from visual_config import VisualSettings, load_settings


class VisualSelectionError(ValueError):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = str(code or "VISUAL_SELECTION_ERROR")
        self.details = details or {}
        super().__init__(f"{self.code}: {message}")


def _validate_duration(total_duration: Any) -> float:
    try:
        duration = float(total_duration)
    except (TypeError, ValueError):
        raise VisualSelectionError(
            "INVALID_DURATION",
            "total_duration must be a number",
            {"total_duration": repr(total_duration)},
        )
    if not math.isfinite(duration) or duration <= 0:
        raise VisualSelectionError(
            "INVALID_DURATION",
            "total_duration must be a positive finite number of seconds",
            {"total_duration": duration},
        )
    return duration


def _resolve_entity(entity: Optional[str], headline: Optional[str], detect_entity: bool) -> Optional[str]:
    ent = str(entity or "").strip()
    if ent:
        return ent
    if detect_entity and headline:
        return detect_known_entity(headline)
    return None


def _build(
    sources: Optional[SourceRegistry],
    settings: Optional[VisualSettings],
    translator: Optional[QueryTranslator],
    verbose: bool,
) -> Tuple[SceneSegmenter, ImageOrchestrator]:
    settings = settings or load_settings()
    if sources is None:
        sources = create_image_sources(settings, verbose=verbose)
        if verbose:
            print(f"🔌 Visual selection: configured sources {sources.configured_names()}")
    translator = translator or QueryTranslator(verbose=verbose)
    segmenter = SceneSegmenter(translator=translator, verbose=verbose)
    orchestrator = ImageOrchestrator(
        sources,
        translator=translator,
        weights=settings.scoring,
        rate_limit_delay_sec=settings.rate_limit_delay_sec,
        verbose=verbose,
    )
    return segmenter, orchestrator


def _prepare(
    script: Union[NarrationScript, Dict[str, Any]],
    duration: float,
    entity: Optional[str],
    headline: Optional[str],
    detect_entity: bool,
    segmenter: SceneSegmenter,
) -> List[SceneSegment]:
    if not isinstance(script, NarrationScript):
        script = NarrationScript.from_dict(script)
    resolved_entity = _resolve_entity(entity, headline, detect_entity)
    return segmenter.segment_script(script, duration, entity=resolved_entity, headline=headline)


def run_visual_selection(
    script: Union[NarrationScript, Dict[str, Any]],
    total_duration: float,
    entity: Optional[str] = None,
    headline: Optional[str] = None,
    sources: Optional[SourceRegistry] = None,
    detect_entity: bool = False,
    verbose: bool = False,
    settings: Optional[VisualSettings] = None,
    translator: Optional[QueryTranslator] = None,
) -> List[SceneImage]:
    """
    Segment the narration and resolve one image per segment.

    Raises VisualSelectionError(INVALID_DURATION) for a non-positive / non-numeric
    duration. Every other failure degrades to SceneImage(image_url=None, source="none").
    """
    duration = _validate_duration(total_duration)
    segmenter, orchestrator = _build(sources, settings, translator, verbose)
    segments = _prepare(script, duration, entity, headline, detect_entity, segmenter)
    return orchestrator.search_by_segments(segments)


def build_dynamic_images(
    script: Union[NarrationScript, Dict[str, Any]],
    total_duration: float,
    entity: Optional[str] = None,
    headline: Optional[str] = None,
    sources: Optional[SourceRegistry] = None,
    detect_entity: bool = False,
    verbose: bool = False,
    settings: Optional[VisualSettings] = None,
    translator: Optional[QueryTranslator] = None,
) -> Dict[str, Any]:
    """Same as run_visual_selection() but returns the renderer payload {scenes, totalSegments, generatedAt}."""
    duration = _validate_duration(total_duration)
    segmenter, orchestrator = _build(sources, settings, translator, verbose)
    segments = _prepare(script, duration, entity, headline, detect_entity, segmenter)
    return orchestrator.orchestrate(segments)
