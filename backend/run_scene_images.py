#!/usr/bin/env python3
"""
Minimal runner for the scene image selection step.

Input JSON:
  {"hook": "...", "body": "...", "opinion": "...", "cta": "...",
   "duration": 55.2, "entity": "OpenAI", "headline": "..."}

Usage (from repo root):
  python backend/run_scene_images.py --input script.json --verbose
  python backend/run_scene_images.py --input script.json --output scenes.json --detect-entity
"""

import argparse
import json
from pathlib import Path

from visual_selection_pipeline import VisualSelectionError, build_dynamic_images


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser()
    p.add_argument("--input", required=True, help="Narration script JSON (hook/body/opinion/cta + duration)")
    p.add_argument("--output", help="Write the {scenes, totalSegments, generatedAt} JSON here instead of stdout")
    p.add_argument("--duration", type=float, help="Override narration duration in seconds")
    p.add_argument("--entity", help="Override entity/company name")
    p.add_argument("--detect-entity", action="store_true", help="Detect the entity from the headline if none is given")
    p.add_argument("--verbose", action="store_true", help="Enable verbose per-step logs")
    return p.parse_args()


def main() -> int:
    args = _parse_args()

    in_path = Path(args.input)
    if not in_path.exists():
        print(f"❌ Input not found: {in_path}")
        return 2

    try:
        data = json.loads(in_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"❌ Invalid JSON in {in_path}: {e}")
        return 2
    if not isinstance(data, dict):
        print(f"❌ Expected a JSON object in {in_path}")
        return 2

    duration = args.duration if args.duration is not None else data.get("duration")
    try:
        result = build_dynamic_images(
            data,
            duration,
            entity=args.entity or data.get("entity"),
            headline=data.get("headline"),
            detect_entity=bool(args.detect_entity),
            verbose=bool(args.verbose),
        )
    except VisualSelectionError as e:
        print(f"❌ {e}")
        return 3

    payload = json.dumps(result, ensure_ascii=False, indent=2)
    if args.output:
        out_path = Path(args.output)
        out_path.write_text(payload + "\n", encoding="utf-8")
        resolved = sum(1 for s in result["scenes"] if s.get("imageUrl"))
        print(f"✅ Scene images done: {resolved}/{result['totalSegments']} resolved -> {out_path}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
