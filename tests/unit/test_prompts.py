"""
Unit tests for prompt construction.

Tests cover:
- Query intent classification and rule order
- Follow-up type detection
- Domain keyword scoring, tie breaking and threshold
- Query, learning path and follow-up prompt builders (advanced and legacy)
"""

import pytest

from learnsphere.src.services.prompts import builder, domains
from learnsphere.src.services.prompts.builder import (
    build_follow_up_prompt,
    build_learning_path_prompt,
    build_query_prompt,
)
from learnsphere.src.services.prompts.domains import (
    DOMAIN_TEMPLATES,
    DomainTemplate,
    detect_domain,
    score_domains,
)
from learnsphere.src.services.prompts.intent import analyze_query_intent, detect_follow_up_type
from learnsphere.src.services.prompts.templates import (
    ADVANCED_SYSTEM_PROMPTS,
    CONTENT_TYPE_TEMPLATES,
    ENHANCED_CONTENT_TYPE_TEMPLATES,
    FOLLOW_UP_TEMPLATES,
    LEARNING_PATH_GUIDANCE,
    LEARNING_PATH_TEMPLATES,
    LEVEL_TEMPLATES,
)


# ============================================================================
# INTENT
# ============================================================================


class TestQueryIntent:
    """Test query intent classification."""

    @pytest.mark.parametrize("query,expected", [
        ("How to bake sourdough bread", "howTo"),
        ("Steps to configure a router", "howTo"),
        ("Python vs Java for beginners", "comparison"),
        ("What is the difference between mitosis and meiosis", "comparison"),
        ("What is entropy", "definition"),
        ("Define opportunity cost", "definition"),
        ("What does the term entropy mean", "definition"),
        ("Analyze the causes of the First World War", "analysis"),
        ("Pros and cons of nuclear power", "evaluation"),
        ("Synthesize current research on sleep", "synthesis"),
        ("Tell me about photosynthesis", "explanation"),
    ])
    def test_classification(self, query, expected):
        assert analyze_query_intent(query) == expected

    def test_empty_query_is_explanation(self):
        assert analyze_query_intent("") == "explanation"
        assert analyze_query_intent(None) == "explanation"

    def test_matching_is_case_insensitive(self):
        assert analyze_query_intent("HOW TO tie a tie") == "howTo"

    def test_first_matching_rule_wins(self):
        """A how-to phrasing beats a comparison keyword later in the query."""
        assert analyze_query_intent("How to compare two arrays") == "howTo"


class TestFollowUpType:
    """Test follow-up type detection."""

    @pytest.mark.parametrize("query,expected", [
        ("Can you explain that in simpler terms?", "clarification"),
        ("Tell me more about the second law", "deepening"),
        ("How can I use this at work?", "application"),
        ("What is the connection to thermodynamics?", "connection"),
        ("But what about quantum effects?", "challenge"),
        ("Putting it all together, what matters most?", "synthesis"),
        ("Please expand on the final step", "elaboration"),
        ("Okay, thanks", "default"),
    ])
    def test_detection(self, query, expected):
        assert detect_follow_up_type(query) == expected

    def test_empty_is_default(self):
        assert detect_follow_up_type("") == "default"


# ============================================================================
# DOMAINS
# ============================================================================


class TestDomainScoring:
    """Test weighted keyword scoring against controlled domains."""

    @pytest.fixture
    def two_domains(self, monkeypatch):
        templates = {
            "first": DomainTemplate(
                name="first", prefix="First: ", suffix="", system_suffix="first",
                keywords=("graph theory", "vertex"), weight=2.0,
            ),
            "second": DomainTemplate(
                name="second", prefix="Second: ", suffix="", system_suffix="second",
                keywords=("vertex", "shader"), weight=2.0,
            ),
        }
        monkeypatch.setattr(domains, "DOMAIN_TEMPLATES", templates)
        return templates

    def test_full_keyword_adds_weight(self, two_domains):
        scores = score_domains("teach me graph theory")
        # full match (2.0) plus partial "graph" and "theory" (1.0 each)
        assert scores == {"first": 4.0}

    def test_short_words_do_not_partially_match(self, two_domains):
        assert score_domains("a b c") == {}

    def test_partial_word_adds_half_weight(self, two_domains):
        assert score_domains("shade")["second"] == 1.0

    def test_tie_goes_to_first_declared_domain(self, two_domains):
        # "vertex" scores 2.0 + 1.0 in both domains
        assert detect_domain("vertex").name == "first"

    def test_threshold(self, monkeypatch):
        templates = {
            "light": DomainTemplate(
                name="light", prefix="", suffix="", system_suffix="",
                keywords=("ornithology",), weight=1.0,
            ),
        }
        monkeypatch.setattr(domains, "DOMAIN_TEMPLATES", templates)

        # partial only: 0.5 is below the threshold
        assert detect_domain("birds ornith") is None
        assert detect_domain("ornithology").name == "light"

    def test_no_query(self):
        assert detect_domain("") is None
        assert detect_domain(None) is None


class TestRegisteredDomains:
    """Test the shipped domain table."""

    def test_twelve_domains_registered(self):
        assert len(DOMAIN_TEMPLATES) == 12
        assert "computerScience" in DOMAIN_TEMPLATES
        assert "dataScience" in DOMAIN_TEMPLATES

    def test_mathematics_query(self):
        assert detect_domain("Explain calculus derivatives").name == "mathematics"

    def test_unrelated_query(self):
        assert detect_domain("xyzzy plugh") is None

    def test_keywords_are_lower_case(self):
        for template in DOMAIN_TEMPLATES.values():
            assert all(keyword == keyword.lower() for keyword in template.keywords)


# ============================================================================
# BUILDERS
# ============================================================================


class TestBuildQueryPrompt:
    """Test query prompt building."""

    def test_advanced_uses_domain_template(self):
        query = "Explain calculus derivatives"
        template = DOMAIN_TEMPLATES["mathematics"]

        prompt = build_query_prompt(query, "beginner")

        assert prompt.text == f"{template.prefix}{query}{template.suffix}"
        assert prompt.system_prompt == f"{ADVANCED_SYSTEM_PROMPTS['beginner']}\n\n{template.system_suffix}"

    def test_advanced_without_domain_uses_content_type(self):
        prompt = build_query_prompt("xyzzy plugh", "advanced")
        template = ENHANCED_CONTENT_TYPE_TEMPLATES["explanation"]

        assert prompt.text.startswith(template.prefix)
        assert prompt.system_prompt.endswith(template.system_suffix)
        assert prompt.system_prompt.startswith(ADVANCED_SYSTEM_PROMPTS["advanced"])

    def test_explicit_content_type(self, monkeypatch):
        monkeypatch.setattr(builder, "detect_domain", lambda query: None)
        prompt = build_query_prompt("xyzzy plugh", "intermediate", content_type="comparison")

        assert prompt.text.startswith(ENHANCED_CONTENT_TYPE_TEMPLATES["comparison"].prefix)

    def test_legacy_uses_content_type_and_level_system_prompt(self):
        prompt = build_query_prompt("How to xyzzy", "beginner", advanced=False)

        assert prompt.text.startswith(CONTENT_TYPE_TEMPLATES["howTo"].prefix)
        assert prompt.system_prompt == LEVEL_TEMPLATES["beginner"].system_prompt

    def test_legacy_falls_back_to_level_template(self):
        prompt = build_query_prompt("Pros and cons of xyzzy", "advanced", advanced=False)

        assert prompt.text.startswith(LEVEL_TEMPLATES["advanced"].prefix)

    def test_unknown_level_falls_back_to_intermediate(self):
        prompt = build_query_prompt("xyzzy plugh", "grandmaster")

        assert prompt.system_prompt.startswith(ADVANCED_SYSTEM_PROMPTS["intermediate"])


class TestBuildLearningPathPrompt:
    """Test learning path prompt building."""

    def test_advanced(self):
        prompt = build_learning_path_prompt("Rust", "beginner")
        template = LEARNING_PATH_TEMPLATES["beginner"]

        assert prompt.text == f"{template.prefix}Rust{template.suffix}"
        assert prompt.system_prompt.startswith(ADVANCED_SYSTEM_PROMPTS["beginner"])
        assert prompt.system_prompt.endswith(LEARNING_PATH_GUIDANCE)

    def test_legacy(self):
        prompt = build_learning_path_prompt("Rust", "advanced", advanced=False)

        assert prompt.system_prompt == LEARNING_PATH_TEMPLATES["advanced"].system_prompt


class TestBuildFollowUpPrompt:
    """Test follow-up prompt building."""

    def test_context_retention_adds_type_guidance(self):
        prompt = build_follow_up_prompt("Can you explain that again?", "intermediate")

        assert prompt.text == "Can you explain that again?"
        assert prompt.system_prompt.endswith(FOLLOW_UP_TEMPLATES["clarification"])

    def test_without_context_retention(self):
        prompt = build_follow_up_prompt("Can you explain that again?", "beginner", context_retention=False)

        assert prompt.system_prompt == LEVEL_TEMPLATES["beginner"].system_prompt
