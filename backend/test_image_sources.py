"""
Image source provider tests (HTTP mocked with unittest.mock, no network).

Run:
  pytest backend/test_image_sources.py -v
"""

import unittest
from unittest import mock

import requests

from candidate_scorer import ImageCandidate
from image_sources import (
    ClearbitLogoSource,
    GoogleImageSource,
    LogoDevSource,
    PexelsImageSource,
    SourceRegistry,
    UnsplashImageSource,
    company_to_domain,
    create_image_sources,
)
from visual_config import VisualSettings


def _response(status_code=200, payload=None, http_error=None):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.json.return_value = payload if payload is not None else {}
    if http_error is not None:
        resp.raise_for_status.side_effect = http_error
    else:
        resp.raise_for_status.return_value = None
    return resp


def _http_error(status_code):
    return requests.HTTPError(f"{status_code} error", response=mock.Mock(status_code=status_code))


class TestCompanyToDomain(unittest.TestCase):
    def test_known_companies(self):
        self.assertEqual(company_to_domain("OpenAI"), "openai.com")
        self.assertEqual(company_to_domain("Hugging Face"), "huggingface.co")
        self.assertEqual(company_to_domain("Google DeepMind"), "deepmind.com")

    def test_entity_map_aliases(self):
        self.assertEqual(company_to_domain("chatgpt"), "chat.openai.com")

    def test_unknown_company_is_normalized(self):
        self.assertEqual(company_to_domain("Unknown Company"), "unknowncompany.com")
        self.assertEqual(company_to_domain("Acme-Labs!"), "acmelabs.com")


class TestLogoSources(unittest.TestCase):
    def test_clearbit_returns_logo_url_on_200(self):
        src = ClearbitLogoSource(throttle_delay_sec=0)
        with mock.patch("image_sources.requests.head", return_value=_response(200)) as head:
            url = src.find_url("OpenAI")
        self.assertEqual(url, "https://logo.clearbit.com/openai.com")
        head.assert_called_once()
        self.assertEqual(head.call_args.kwargs["timeout"], 3.0)
        self.assertEqual(src.last_http_status, 200)

    def test_clearbit_404_is_no_result(self):
        src = ClearbitLogoSource(throttle_delay_sec=0)
        with mock.patch("image_sources.requests.head", return_value=_response(404)):
            self.assertIsNone(src.find_url("Nobody Inc"))
        self.assertEqual(src.last_http_status, 404)

    def test_clearbit_timeout_is_no_result(self):
        src = ClearbitLogoSource(throttle_delay_sec=0)
        with mock.patch("image_sources.requests.head", side_effect=requests.exceptions.Timeout("timed out")):
            self.assertIsNone(src.find_url("OpenAI"))
        self.assertIn("timed out", src.last_error)

    def test_clearbit_is_always_configured(self):
        self.assertTrue(ClearbitLogoSource().is_configured())

    def test_logodev_without_key_is_skipped(self):
        src = LogoDevSource(api_key="", throttle_delay_sec=0)
        self.assertFalse(src.is_configured())
        with mock.patch("image_sources.requests.head") as head:
            self.assertIsNone(src.find_url("OpenAI"))
        head.assert_not_called()

    def test_logodev_url_carries_token(self):
        src = LogoDevSource(api_key="KEY", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.head", return_value=_response(200)):
            url = src.find_url("Anthropic")
        self.assertEqual(url, "https://img.logo.dev/anthropic.com?token=KEY&size=400&format=png")


class TestGoogleImageSource(unittest.TestCase):
    def test_not_configured_without_engine_id(self):
        self.assertFalse(GoogleImageSource("key", "").is_configured())
        self.assertTrue(GoogleImageSource("key", "cx").is_configured())

    def test_logo_mode_requests_clipart(self):
        src = GoogleImageSource("key", "cx", throttle_delay_sec=0)
        payload = {"items": [{"link": ""}, {"link": "https://img/logo.png"}]}
        with mock.patch("image_sources.requests.get", return_value=_response(200, payload)) as get:
            url = src.find_url("OpenAI logo high quality", mode="logo")
        self.assertEqual(url, "https://img/logo.png")
        params = get.call_args.kwargs["params"]
        self.assertEqual(params["imgType"], "clipart")
        self.assertEqual(params["imgSize"], "medium")
        self.assertEqual(params["searchType"], "image")
        self.assertEqual(params["cx"], "cx")

    def test_photo_mode_requests_large_photos(self):
        src = GoogleImageSource("key", "cx", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get", return_value=_response(200, {"items": []})) as get:
            self.assertIsNone(src.find_url("tesla car"))
        params = get.call_args.kwargs["params"]
        self.assertEqual(params["imgType"], "photo")
        self.assertEqual(params["imgSize"], "large")

    def test_rate_limit_is_no_result(self):
        src = GoogleImageSource("key", "cx", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get", return_value=_response(429, http_error=_http_error(429))):
            self.assertIsNone(src.find_url("tesla car"))
        self.assertEqual(src.last_http_status, 429)

    def test_unknown_mode_is_no_result(self):
        src = GoogleImageSource("key", "cx", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get") as get:
            self.assertIsNone(src.find_url("tesla", mode="video"))
        get.assert_not_called()
        self.assertIn("video", src.last_error)

    def test_non_object_payload_is_no_result(self):
        src = GoogleImageSource("key", "cx", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get", return_value=_response(200, ["not", "a", "dict"])):
            self.assertIsNone(src.find_url("tesla car"))
        self.assertIsNotNone(src.last_error)


class TestUnsplashImageSource(unittest.TestCase):
    def test_first_regular_url(self):
        src = UnsplashImageSource("ak", throttle_delay_sec=0)
        payload = {"results": [{"urls": {"regular": "https://unsplash/1.jpg"}}, {"urls": {"regular": "x"}}]}
        with mock.patch("image_sources.requests.get", return_value=_response(200, payload)) as get:
            self.assertEqual(src.find_url("data center"), "https://unsplash/1.jpg")
        self.assertEqual(get.call_args.kwargs["headers"]["Authorization"], "Client-ID ak")
        self.assertEqual(get.call_args.kwargs["params"]["content_filter"], "high")

    def test_malformed_items_are_skipped(self):
        src = UnsplashImageSource("ak", throttle_delay_sec=0)
        payload = {"results": ["oops", {"urls": "nope"}, {"urls": {"regular": "https://unsplash/ok.jpg"}}]}
        with mock.patch("image_sources.requests.get", return_value=_response(200, payload)):
            self.assertEqual(src.find_url("data center"), "https://unsplash/ok.jpg")

    def test_blank_query_makes_no_request(self):
        src = UnsplashImageSource("ak", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get") as get:
            self.assertIsNone(src.find_url("   "))
        get.assert_not_called()


class TestPexelsImageSource(unittest.TestCase):
    PAYLOAD = {
        "photos": [
            {"alt": "Tesla car", "width": 2000, "height": 3000, "src": {"portrait": "p1", "large2x": "l1"}},
            {"alt": "Robot arm", "width": 1000, "height": 1000, "src": {"large2x": "l2"}},
            {"alt": "no src", "width": 10, "height": 10, "src": {}},
        ]
    }

    def test_candidates_are_parsed(self):
        src = PexelsImageSource("pk", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get", return_value=_response(200, self.PAYLOAD)) as get:
            cands = src.search_candidates("tesla car", count=5)
        self.assertEqual(
            cands,
            [
                ImageCandidate(url="p1", alt_text="Tesla car", width=2000, height=3000),
                ImageCandidate(url="l2", alt_text="Robot arm", width=1000, height=1000),
            ],
        )
        params = get.call_args.kwargs["params"]
        self.assertEqual(params["orientation"], "portrait")
        self.assertEqual(params["per_page"], 5)
        self.assertEqual(get.call_args.kwargs["headers"]["Authorization"], "pk")

    def test_find_url_is_first_candidate(self):
        src = PexelsImageSource("pk", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get", return_value=_response(200, self.PAYLOAD)):
            self.assertEqual(src.find_url("tesla"), "p1")

    def test_http_error_is_empty_result(self):
        src = PexelsImageSource("pk", throttle_delay_sec=0)
        with mock.patch("image_sources.requests.get", return_value=_response(401, http_error=_http_error(401))):
            self.assertEqual(src.search_candidates("tesla"), [])
        self.assertEqual(src.last_http_status, 401)
        self.assertIsNotNone(src.last_error)

    def test_malformed_json_is_empty_result(self):
        src = PexelsImageSource("pk", throttle_delay_sec=0)
        resp = _response(200)
        resp.json.side_effect = ValueError("not json")
        with mock.patch("image_sources.requests.get", return_value=resp):
            self.assertEqual(src.search_candidates("tesla"), [])

    def test_wrongly_shaped_json_is_empty_result(self):
        src = PexelsImageSource("pk", throttle_delay_sec=0)
        for payload in ({"photos": "oops"}, [{"photos": []}]):
            with mock.patch("image_sources.requests.get", return_value=_response(200, payload)):
                self.assertEqual(src.search_candidates("tesla"), [])
            self.assertIn("unexpected", src.last_error)

    def test_non_dict_photos_are_skipped(self):
        src = PexelsImageSource("pk", throttle_delay_sec=0)
        payload = {"photos": ["oops", {"alt": "bad src", "src": "x"}, *self.PAYLOAD["photos"][:1]]}
        with mock.patch("image_sources.requests.get", return_value=_response(200, payload)):
            cands = src.search_candidates("tesla")
        self.assertEqual([c.url for c in cands], ["p1"])
        self.assertIsNone(src.last_error)

    def test_without_key(self):
        src = PexelsImageSource("", throttle_delay_sec=0)
        self.assertFalse(src.is_configured())
        with mock.patch("image_sources.requests.get") as get:
            self.assertEqual(src.search_candidates("tesla"), [])
        get.assert_not_called()


class TestRegistry(unittest.TestCase):
    def test_only_clearbit_without_credentials(self):
        registry = create_image_sources(VisualSettings())
        self.assertEqual(len(registry), 5)
        self.assertEqual(registry.configured_names(), ["clearbit"])
        self.assertIsNone(registry.get("pexels"))
        self.assertIsNotNone(registry.get("clearbit"))

    def test_all_sources_with_credentials(self):
        settings = VisualSettings(
            pexels_api_key="p",
            unsplash_access_key="u",
            logodev_api_key="l",
            google_api_key="g",
            google_search_engine_id="cx",
        )
        registry = create_image_sources(settings)
        self.assertEqual(registry.configured_names(), ["clearbit", "logodev", "google", "unsplash", "pexels"])
        self.assertEqual(registry.configured_names(), settings.configured_sources())

    def test_unknown_name(self):
        registry = SourceRegistry([])
        self.assertIsNone(registry.get("clearbit"))
        self.assertNotIn("clearbit", registry)
