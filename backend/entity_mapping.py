"""
Known AI/tech entities (companies, models) with web domains and aliases.

Used for two things:
- detect_entity(): find the company a headline is about (logo lookup for scene 0)
- domain lookup for logo providers (see image_sources.company_to_domain)
"""

import re
from typing import Dict, List, Optional, Tuple


ENTITY_MAP: Dict[str, Dict[str, object]] = {
    # companies
    "openai": {"display_name": "OpenAI", "domain": "openai.com", "aliases": ["open ai", "open-ai"]},
    "anthropic": {"display_name": "Anthropic", "domain": "anthropic.com", "aliases": []},
    "google": {"display_name": "Google", "domain": "google.com", "aliases": ["alphabet"]},
    "deepmind": {"display_name": "DeepMind", "domain": "deepmind.com", "aliases": ["google deepmind"]},
    "microsoft": {"display_name": "Microsoft", "domain": "microsoft.com", "aliases": []},
    "meta": {"display_name": "Meta", "domain": "meta.com", "aliases": ["facebook"]},
    "apple": {"display_name": "Apple", "domain": "apple.com", "aliases": []},
    "nvidia": {"display_name": "NVIDIA", "domain": "nvidia.com", "aliases": []},
    "amazon": {"display_name": "Amazon", "domain": "amazon.com", "aliases": ["aws"]},
    "tesla": {"display_name": "Tesla", "domain": "tesla.com", "aliases": []},
    "xai": {"display_name": "xAI", "domain": "x.ai", "aliases": []},
    "mistral": {"display_name": "Mistral AI", "domain": "mistral.ai", "aliases": ["mistral ai"]},
    "cohere": {"display_name": "Cohere", "domain": "cohere.com", "aliases": []},
    "stability": {"display_name": "Stability AI", "domain": "stability.ai", "aliases": ["stability ai"]},
    "midjourney": {"display_name": "Midjourney", "domain": "midjourney.com", "aliases": []},
    "runway": {"display_name": "Runway", "domain": "runwayml.com", "aliases": ["runwayml"]},
    "perplexity": {"display_name": "Perplexity", "domain": "perplexity.ai", "aliases": ["perplexity ai"]},
    "huggingface": {"display_name": "Hugging Face", "domain": "huggingface.co", "aliases": ["hugging face"]},
    "groq": {"display_name": "Groq", "domain": "groq.com", "aliases": []},
    # models / products
    "chatgpt": {"display_name": "ChatGPT", "domain": "chat.openai.com", "aliases": ["chat gpt", "chat-gpt"]},
    "claude": {"display_name": "Claude", "domain": "claude.ai", "aliases": []},
    "gemini": {"display_name": "Gemini", "domain": "gemini.google.com", "aliases": ["google gemini"]},
    "llama": {"display_name": "Llama", "domain": "llama.meta.com", "aliases": ["meta llama"]},
}


def _entity_patterns() -> List[Tuple[re.Pattern, str]]:
    out = []
    for key, cfg in ENTITY_MAP.items():
        names = [key, str(cfg["display_name"])] + list(cfg.get("aliases") or [])
        for name in names:
            out.append((re.compile(r"\b" + re.escape(name.lower()) + r"\b"), str(cfg["display_name"])))
    return out


_PATTERNS = _entity_patterns()


def detect_entity(text: str) -> Optional[str]:
    """
    Display name of the earliest-mentioned known entity in text, or None.

    Longer names win at the same offset ("google deepmind" -> DeepMind, not Google).
    """
    low = str(text or "").lower()
    if not low.strip():
        return None

    best: Optional[Tuple[int, int, str]] = None  # (offset, -length, display_name)
    for pattern, display_name in _PATTERNS:
        m = pattern.search(low)
        if not m:
            continue
        cand = (m.start(), -(m.end() - m.start()), display_name)
        if best is None or cand < best:
            best = cand
    return best[2] if best else None


def known_domain(name: str) -> Optional[str]:
    """Domain of a known entity by display name, key or alias (case-insensitive)."""
    low = str(name or "").strip().lower()
    if not low:
        return None
    for key, cfg in ENTITY_MAP.items():
        names = {key, str(cfg["display_name"]).lower()} | {a.lower() for a in (cfg.get("aliases") or [])}
        if low in names:
            return str(cfg["domain"])
    return None
