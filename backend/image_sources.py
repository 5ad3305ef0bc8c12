"""
Image Sources - abstract interface + concrete providers for scene image search.

Supported sources:
- Clearbit logos (no key, HEAD lookup by domain)
- Logo.dev logos (LOGODEV_API_KEY)
- Google Custom Search images (GOOGLE_CUSTOM_SEARCH_KEY + GOOGLE_SEARCH_ENGINE_ID)
- Unsplash photos (UNSPLASH_ACCESS_KEY)
- Pexels photos (PEXELS_API_KEY) - the only source returning scorable candidates

Every provider swallows its own transport errors (timeout, non-2xx, bad JSON):
the failure is recorded in last_http_status / last_error and the call returns
an empty result, so the cascade simply moves on to the next step.
"""

import re
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, List, Optional
from urllib.parse import urlencode

import requests

from candidate_scorer import ImageCandidate
from entity_mapping import known_domain
from visual_config import (
    CLEARBIT_BASE_URL,
    GOOGLE_SEARCH_URL,
    LOGO_TIMEOUT_SEC,
    LOGODEV_BASE_URL,
    PEXELS_BASE_URL,
    SEARCH_TIMEOUT_SEC,
    UNSPLASH_BASE_URL,
    VisualSettings,
)


USER_AGENT = "SceneImageBot/1.0 (Short video visuals)"

# Brand names whose domain is not "<name>.com"
COMPANY_DOMAIN_MAP: Dict[str, str] = {
    "OpenAI": "openai.com",
    "Google": "google.com",
    "Google DeepMind": "deepmind.com",
    "DeepMind": "deepmind.com",
    "Anthropic": "anthropic.com",
    "Microsoft": "microsoft.com",
    "Meta": "meta.com",
    "Facebook": "meta.com",
    "Apple": "apple.com",
    "NVIDIA": "nvidia.com",
    "Amazon": "amazon.com",
    "AWS": "aws.amazon.com",
    "xAI": "x.ai",
    "Mistral AI": "mistral.ai",
    "Mistral": "mistral.ai",
    "Cohere": "cohere.com",
    "Stability AI": "stability.ai",
    "Midjourney": "midjourney.com",
    "Runway": "runwayml.com",
    "Scale AI": "scale.com",
    "Databricks": "databricks.com",
    "Perplexity": "perplexity.ai",
    "Perplexity AI": "perplexity.ai",
    "Character AI": "character.ai",
    "Character.AI": "character.ai",
    "Hugging Face": "huggingface.co",
    "Inflection AI": "inflection.ai",
    "Adept": "adept.ai",
    "Replicate": "replicate.com",
    "Together AI": "together.ai",
    "Groq": "groq.com",
    "Cerebras": "cerebras.net",
}


def company_to_domain(company: str) -> str:
    """
    'OpenAI' -> 'openai.com'; unknown names -> lowercase alnum + '.com'
    ('Unknown Company' -> 'unknowncompany.com').
    """
    name = str(company or "").strip()
    if name in COMPANY_DOMAIN_MAP:
        return COMPANY_DOMAIN_MAP[name]
    domain = known_domain(name)
    if domain:
        return domain
    normalized = re.sub(r"[^a-z0-9]", "", name.lower())
    return f"{normalized}.com"


def _status_of(err: Exception) -> Optional[int]:
    return getattr(getattr(err, "response", None), "status_code", None)


def _items_of(payload: Any, key: str) -> List[Dict[str, Any]]:
    """Dict items under `key` of a JSON object response; other shapes raise ValueError."""
    if payload is None:
        return []
    if not isinstance(payload, dict):
        raise ValueError(f"unexpected response shape: {type(payload).__name__}")
    items = payload.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"unexpected '{key}' shape: {type(items).__name__}")
    return [item for item in items if isinstance(item, dict)]


class ImageSource(ABC):
    """
    Abstract base class for image source providers.

    `name` is the tag reported in SceneImage.source when this provider resolves a scene.
    """

    name = "unknown"

    def __init__(self, throttle_delay_sec: float = 0.0, verbose: bool = False, timeout_sec: float = SEARCH_TIMEOUT_SEC):
        self.throttle_delay_sec = throttle_delay_sec
        self.last_request_time = 0.0
        self.verbose = verbose
        self.source_name = self.__class__.__name__
        # Telemetry for diagnostics (set by subclasses)
        self.last_http_status: Optional[int] = None
        self.last_error: Optional[str] = None
        try:
            self.timeout_sec = float(timeout_sec)
        except (TypeError, ValueError):
            self.timeout_sec = SEARCH_TIMEOUT_SEC

    def _throttle(self) -> None:
        """Opt-in spacing between consecutive requests of this provider (0 = off)"""
        now = time.time()
        elapsed = now - self.last_request_time
        if elapsed < self.throttle_delay_sec:
            time.sleep(self.throttle_delay_sec - elapsed)
        self.last_request_time = time.time()

    def _record_success(self, http_status: Optional[int] = None) -> None:
        self.last_http_status = http_status
        self.last_error = None

    def _record_error(self, http_status: Optional[int], err: Exception) -> None:
        self.last_http_status = http_status if isinstance(http_status, int) else None
        self.last_error = str(err)

    def _warn(self, err: Exception) -> None:
        self._record_error(_status_of(err), err)
        if self.verbose:
            print(f"⚠️  {self.source_name} error: {err}")

    def is_configured(self) -> bool:
        """False when credentials are missing; the cascade then skips this source silently."""
        return True

    @abstractmethod
    def find_url(self, query: str) -> Optional[str]:
        """Single best image URL for query, or None."""


class CandidateSource(ImageSource):
    """Provider that can return several scorable candidates (alt text + dimensions)."""

    @abstractmethod
    def search_candidates(self, query: str, count: int = 5) -> List[ImageCandidate]:
        pass

    def find_url(self, query: str) -> Optional[str]:
        candidates = self.search_candidates(query, count=1)
        return candidates[0].url if candidates else None


# ============================================================================
# LOGO PROVIDERS
# ============================================================================

class ClearbitLogoSource(ImageSource):
    """
    Clearbit logo API: https://logo.clearbit.com/<domain>
    No key needed; a HEAD request tells whether the logo exists.
    """

    name = "clearbit"

    def __init__(self, throttle_delay_sec: float = 0.0, verbose: bool = False, timeout_sec: float = LOGO_TIMEOUT_SEC):
        super().__init__(throttle_delay_sec, verbose, timeout_sec=timeout_sec)
        self.base_url = CLEARBIT_BASE_URL

    def logo_url(self, company: str) -> str:
        return f"{self.base_url}/{company_to_domain(company)}"

    def find_url(self, query: str) -> Optional[str]:
        company = str(query or "").strip()
        if not company:
            return None
        url = self.logo_url(company)
        try:
            self._throttle()
            resp = requests.head(url, timeout=self.timeout_sec, allow_redirects=True)
            self._record_success(resp.status_code)
            if resp.status_code == 200:
                return url
            if self.verbose:
                print(f"  ℹ️  {self.source_name}: no logo for {company} (HTTP {resp.status_code})")
            return None
        except requests.RequestException as e:
            self._warn(e)
            return None


class LogoDevSource(ClearbitLogoSource):
    """
    Logo.dev API (alternative logo provider).
    Requires env: LOGODEV_API_KEY
    """

    name = "logodev"

    def __init__(
        self,
        api_key: str,
        throttle_delay_sec: float = 0.0,
        verbose: bool = False,
        timeout_sec: float = LOGO_TIMEOUT_SEC,
        size: int = 400,
    ):
        super().__init__(throttle_delay_sec, verbose, timeout_sec=timeout_sec)
        self.api_key = str(api_key or "").strip()
        self.base_url = LOGODEV_BASE_URL
        self.size = int(size)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def logo_url(self, company: str) -> str:
        params = urlencode({"token": self.api_key, "size": self.size, "format": "png"})
        return f"{self.base_url}/{company_to_domain(company)}?{params}"

    def find_url(self, query: str) -> Optional[str]:
        if not self.api_key:
            return None
        return super().find_url(query)


# ============================================================================
# SEARCH PROVIDERS
# ============================================================================

class GoogleImageSource(ImageSource):
    """
    Google Custom Search (image mode).
    Requires env: GOOGLE_CUSTOM_SEARCH_KEY + GOOGLE_SEARCH_ENGINE_ID

    mode="logo"  -> medium clipart (brand marks)
    mode="photo" -> large photos (content scenes)
    """

    name = "google"
    MODES = ("logo", "photo")

    def __init__(
        self,
        api_key: str,
        search_engine_id: str,
        throttle_delay_sec: float = 0.0,
        verbose: bool = False,
        timeout_sec: float = SEARCH_TIMEOUT_SEC,
    ):
        super().__init__(throttle_delay_sec, verbose, timeout_sec=timeout_sec)
        self.api_key = str(api_key or "").strip()
        self.search_engine_id = str(search_engine_id or "").strip()
        self.search_url = GOOGLE_SEARCH_URL

    def is_configured(self) -> bool:
        return bool(self.api_key and self.search_engine_id)

    def find_url(self, query: str, mode: str = "photo") -> Optional[str]:
        if not self.is_configured():
            return None
        q = str(query or "").strip()
        if not q:
            return None
        if mode not in self.MODES:
            self._record_error(None, ValueError(f"unknown Google image mode: {mode}"))
            if self.verbose:
                print(f"⚠️  Google Custom Search: unknown mode '{mode}', skipping")
            return None

        params = {
            "key": self.api_key,
            "cx": self.search_engine_id,
            "q": q,
            "searchType": "image",
            "num": 5,
            "imgSize": "medium" if mode == "logo" else "large",
            "imgType": "clipart" if mode == "logo" else "photo",
            "safe": "active",
            "fileType": "jpg,png",
        }
        try:
            self._throttle()
            resp = requests.get(self.search_url, params=params, timeout=self.timeout_sec)
            self._record_success(resp.status_code)
            resp.raise_for_status()
            items = _items_of(resp.json(), "items")
            for item in items:
                link = str(item.get("link") or "").strip()
                if link:
                    return link
            return None
        except (requests.RequestException, ValueError) as e:
            if _status_of(e) == 429 and self.verbose:
                print("⚠️  Google Custom Search: rate limit exceeded")
            self._warn(e)
            return None


class UnsplashImageSource(ImageSource):
    """
    Unsplash photo search (first result, regular size).
    Requires env: UNSPLASH_ACCESS_KEY
    """

    name = "unsplash"

    def __init__(
        self,
        access_key: str,
        throttle_delay_sec: float = 0.0,
        verbose: bool = False,
        timeout_sec: float = SEARCH_TIMEOUT_SEC,
    ):
        super().__init__(throttle_delay_sec, verbose, timeout_sec=timeout_sec)
        self.access_key = str(access_key or "").strip()
        self.search_url = f"{UNSPLASH_BASE_URL}/search/photos"

    def is_configured(self) -> bool:
        return bool(self.access_key)

    def find_url(self, query: str) -> Optional[str]:
        if not self.access_key:
            return None
        q = str(query or "").strip()
        if not q:
            return None

        params = {"query": q, "per_page": 5, "orientation": "landscape", "content_filter": "high"}
        headers = {"Authorization": f"Client-ID {self.access_key}", "User-Agent": USER_AGENT}
        try:
            self._throttle()
            resp = requests.get(self.search_url, params=params, headers=headers, timeout=self.timeout_sec)
            self._record_success(resp.status_code)
            resp.raise_for_status()
            results = _items_of(resp.json(), "results")
            for r in results:
                urls = r.get("urls")
                url = str(urls.get("regular") or "").strip() if isinstance(urls, dict) else ""
                if url:
                    return url
            return None
        except (requests.RequestException, ValueError) as e:
            if _status_of(e) == 403 and self.verbose:
                print("⚠️  Unsplash: rate limit exceeded")
            self._warn(e)
            return None


class PexelsImageSource(CandidateSource):
    """
    Pexels photo search (portrait by default, for vertical shorts).
    Requires env: PEXELS_API_KEY
    """

    name = "pexels"

    def __init__(
        self,
        api_key: str,
        throttle_delay_sec: float = 0.0,
        verbose: bool = False,
        timeout_sec: float = SEARCH_TIMEOUT_SEC,
        orientation: str = "portrait",
    ):
        super().__init__(throttle_delay_sec, verbose, timeout_sec=timeout_sec)
        self.api_key = str(api_key or "").strip()
        self.orientation = "landscape" if orientation == "landscape" else "portrait"
        self.search_url = f"{PEXELS_BASE_URL}/search"

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def search_candidates(self, query: str, count: int = 5) -> List[ImageCandidate]:
        if not self.api_key:
            return []
        q = str(query or "").strip()
        if not q:
            return []

        params = {"query": q, "per_page": max(1, min(int(count), 80)), "orientation": self.orientation, "size": "large"}
        headers = {"Authorization": self.api_key, "User-Agent": USER_AGENT}
        try:
            self._throttle()
            resp = requests.get(self.search_url, params=params, headers=headers, timeout=self.timeout_sec)
            self._record_success(resp.status_code)
            resp.raise_for_status()
            photos = _items_of(resp.json(), "photos")

            out: List[ImageCandidate] = []
            for p in photos:
                src = p.get("src")
                if not isinstance(src, dict):
                    continue
                url = str(src.get(self.orientation) or src.get("large2x") or "").strip()
                if not url:
                    continue
                out.append(
                    ImageCandidate(
                        url=url,
                        alt_text=str(p.get("alt") or ""),
                        width=int(p.get("width") or 0),
                        height=int(p.get("height") or 0),
                    )
                )
            if self.verbose:
                print(f"  📷 Pexels: {len(out)} candidates for '{q[:60]}'")
            return out
        except (requests.RequestException, ValueError, TypeError) as e:
            status = _status_of(e)
            if self.verbose and status == 429:
                print("⚠️  Pexels: rate limit exceeded (200 req/hour)")
            elif self.verbose and status == 401:
                print("⚠️  Pexels: invalid API key")
            self._warn(e)
            return []


# ============================================================================
# REGISTRY
# ============================================================================

class SourceRegistry:
    """Sources by tag; get() hides unconfigured ones."""

    def __init__(self, sources: Iterable[ImageSource] = ()):
        self._by_name: Dict[str, ImageSource] = {}
        for s in sources:
            self._by_name[s.name] = s

    def get(self, name: str) -> Optional[ImageSource]:
        source = self._by_name.get(name)
        if source is None or not source.is_configured():
            return None
        return source

    def configured_names(self) -> List[str]:
        return [n for n, s in self._by_name.items() if s.is_configured()]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ImageSource]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


def create_image_sources(settings: VisualSettings, verbose: bool = False) -> SourceRegistry:
    """
    Factory for the image source registry.

    All providers are registered; the ones without credentials report
    is_configured() == False and are skipped by the cascade.
    """
    throttle = settings.source_throttle_sec
    return SourceRegistry(
        [
            ClearbitLogoSource(throttle, verbose, timeout_sec=settings.logo_timeout_sec),
            LogoDevSource(settings.logodev_api_key, throttle, verbose, timeout_sec=settings.logo_timeout_sec),
            GoogleImageSource(
                settings.google_api_key,
                settings.google_search_engine_id,
                throttle,
                verbose,
                timeout_sec=settings.search_timeout_sec,
            ),
            UnsplashImageSource(settings.unsplash_access_key, throttle, verbose, timeout_sec=settings.search_timeout_sec),
            PexelsImageSource(settings.pexels_api_key, throttle, verbose, timeout_sec=settings.search_timeout_sec),
        ]
    )
