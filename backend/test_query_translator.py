"""
Unit tests for query_translator (Spanish keywords -> English search queries).
"""

import random

from query_translator import FALLBACK_TOPICS, QueryTranslator


def _translator(seed: int = 7, **kwargs) -> QueryTranslator:
    return QueryTranslator(rng=random.Random(seed), **kwargs)


def test_translate_known_terms():
    t = _translator()
    assert t.translate(["inteligencia", "artificial"]) == ["intelligence", "artificial"]


def test_translate_is_accent_and_case_insensitive():
    t = _translator()
    assert t.translate(["Tecnología", "ROBÓTICA"]) == ["technology", "robotics"]


def test_unknown_terms_pass_through_lowercased():
    t = _translator()
    assert t.translate(["OpenAI", "Sora"]) == ["openai", "sora"]


def test_translation_dedupes_collapsed_terms():
    t = _translator()
    assert t.translate(["neuronal", "neuronales", "red"]) == ["neural", "network"]


def test_translate_skips_blank_keywords():
    t = _translator()
    assert t.translate(["", "  ", "datos"]) == ["data"]


def test_primary_query_uses_first_three_translated_keywords():
    t = _translator()
    result = t.build_queries(["inteligencia", "artificial", "robots", "datos"])
    assert result.primary == "intelligence artificial robots"
    assert result.language == "en"
    assert result.original_keywords == ["inteligencia", "artificial", "robots", "datos"]
    assert result.translated_keywords == ["intelligence", "artificial", "robots", "data"]


def test_alternatives_are_bounded_unique_and_differ_from_primary():
    t = _translator()
    result = t.build_queries(["inteligencia", "artificial", "robots", "datos"])
    assert len(result.alternatives) <= 2
    assert result.primary not in result.alternatives
    assert len(set(result.alternatives)) == len(result.alternatives)
    assert result.alternatives[0] == "artificial robots"
    assert result.alternatives[1] in FALLBACK_TOPICS


def test_entity_alternative_comes_first():
    t = _translator()
    result = t.build_queries(["modelo"], entity="OpenAI")
    assert result.primary == "model"
    assert result.alternatives[0] == "openai model"


def test_seeded_rng_makes_alternatives_reproducible():
    kws = ["modelo", "datos"]
    a = _translator(seed=123).build_queries(kws)
    b = _translator(seed=123).build_queries(kws)
    assert a.alternatives == b.alternatives


def test_fallback_identical_to_primary_is_skipped():
    t = _translator(fallback_topics=("robots",))
    result = t.build_queries(["robots"])
    assert result.primary == "robots"
    assert result.alternatives == []


def test_empty_keywords_give_empty_primary():
    t = _translator(fallback_topics=())
    result = t.build_queries([])
    assert result.primary == ""
    assert result.alternatives == []


def test_simplify_keeps_two_translated_keywords():
    t = _translator()
    assert t.simplify(["inteligencia", "artificial", "datos"]) == "intelligence artificial"
    assert t.simplify([]) == ""


def test_custom_dictionary():
    t = _translator(dictionary={"gato": "cat"})
    assert t.translate(["gato", "perro"]) == ["cat", "perro"]
