"""
Unit tests for canned answers served in mock mode.

Tests cover:
- Exact and fuzzy canned answer lookup
- The generic fallback answer
- Mock learning paths
"""

from learnsphere.src.services.mock_responses import (
    CANNED_ANSWERS,
    DEFAULT_FOLLOW_UPS,
    find_canned_answer,
    generate_mock_learning_path,
    get_mock_response,
    topic_slug,
)


class TestCannedLookup:
    def test_exact_match_ignores_case(self):
        answer = find_canned_answer("WHAT IS MACHINE LEARNING?")

        assert answer is CANNED_ANSWERS[0]

    def test_word_overlap_match(self):
        answer = find_canned_answer("explain machine learning basics")

        assert answer.query == "What is machine learning?"

    def test_short_words_do_not_count(self):
        assert find_canned_answer("is it a cat") is None

    def test_every_canned_answer_has_citations_and_follow_ups(self):
        for answer in CANNED_ANSWERS:
            response = answer.to_response()
            assert response.content
            assert response.citations
            assert response.follow_up_questions


class TestMockResponse:
    def test_canned(self):
        response = get_mock_response("What is machine learning?")

        assert response.content.startswith("# Machine Learning")
        assert len(response.citations) > 0

    def test_generic_fallback(self):
        response = get_mock_response("zzz qqq xxxx yyyy")

        assert response.content.startswith('# Response to: "zzz qqq xxxx yyyy"')
        assert "qqq xxxx yyyy" in response.content
        assert response.citations[0].url == "https://www.wikipedia.org"
        assert response.follow_up_questions == DEFAULT_FOLLOW_UPS

    def test_fallback_follow_ups_are_copies(self):
        response = get_mock_response("zzz qqq xxxx yyyy")
        response.follow_up_questions.append("extra")

        assert "extra" not in DEFAULT_FOLLOW_UPS


class TestMockLearningPath:
    def test_topic_slug(self):
        assert topic_slug("Machine   Learning") == "machine-learning"

    def test_learning_path_mentions_topic(self):
        response = generate_mock_learning_path("Rust Programming", "beginner")

        assert "Fundamentals of Rust Programming" in response.content
        assert len(response.citations) == 2
        assert all("rust-programming" in c.url for c in response.citations)
