"""Tests for the model recommender."""

import pytest
from pydantic import ValidationError

from qr_api.routing.catalog import RoutingCatalog, default_catalog
from qr_api.routing.classifier import ClassificationResult, QueryClassifier, QueryType
from qr_api.routing.recommender import ModelDescriptor, ModelRecommender


def make_catalog(*models: ModelDescriptor) -> RoutingCatalog:
    """Build a catalog holding only the given models."""
    return RoutingCatalog(signals={}, models=models, pricing={})


def make_model(model_id: str, base_priority: int, *strengths: QueryType) -> ModelDescriptor:
    return ModelDescriptor(
        id=model_id,
        name=model_id.title(),
        strengths=frozenset(strengths),
        base_priority=base_priority,
    )


@pytest.fixture
def catalog():
    """Create the built-in catalog."""
    return default_catalog()


@pytest.fixture
def recommender(catalog):
    """Create recommender over the built-in catalog."""
    return ModelRecommender(catalog)


class TestThreshold:
    """Tests for the confidence threshold."""

    def test_below_threshold_is_empty(self, recommender):
        """Test that confidence 29 yields no recommendations."""
        classification = ClassificationResult(query_type=QueryType.CODE, confidence=29)

        assert recommender.recommend(classification) == []
        assert recommender.rank(classification) == []

    def test_at_threshold_recommends(self, recommender):
        """Test that confidence 30 yields recommendations."""
        classification = ClassificationResult(query_type=QueryType.CODE, confidence=30)

        assert len(recommender.recommend(classification)) > 0

    def test_custom_threshold(self, catalog):
        """Test a configured threshold."""
        recommender = ModelRecommender(catalog, threshold=50)

        assert recommender.recommend(
            ClassificationResult(query_type=QueryType.CODE, confidence=49)
        ) == []
        assert recommender.recommend(
            ClassificationResult(query_type=QueryType.CODE, confidence=50)
        )


class TestRanking:
    """Tests for filtering and ordering."""

    @pytest.mark.parametrize("query_type", list(QueryType))
    def test_only_models_with_matching_strength(self, recommender, catalog, query_type):
        """Test that every recommended model is strong at the query type."""
        classification = ClassificationResult(query_type=query_type, confidence=90)

        for rec in recommender.rank(classification):
            model = catalog.get_model(rec.id)
            assert model is not None
            assert query_type in model.strengths

    @pytest.mark.parametrize("query_type", list(QueryType))
    def test_sorted_non_increasing(self, recommender, query_type):
        """Test that rankings are sorted by descending confidence."""
        ranked = recommender.rank(ClassificationResult(query_type=query_type, confidence=75))
        confidences = [rec.confidence for rec in ranked]

        assert confidences == sorted(confidences, reverse=True)
        assert all(0 <= c <= 100 for c in confidences)

    def test_truncates_to_limit(self, recommender):
        """Test that recommend() keeps the top three of the full ranking."""
        classification = ClassificationResult(query_type=QueryType.CODE, confidence=95)
        ranked = recommender.rank(classification)
        top = recommender.recommend(classification)

        assert len(ranked) == 4
        assert top == ranked[:3]

    def test_ties_keep_catalog_order(self):
        """Test that equal confidences keep declaration order."""
        first = make_model("first", 80, QueryType.CODE)
        second = make_model("second", 80, QueryType.CODE)
        classification = ClassificationResult(query_type=QueryType.CODE, confidence=90)

        forward = ModelRecommender(make_catalog(first, second)).rank(classification)
        backward = ModelRecommender(make_catalog(second, first)).rank(classification)

        assert [rec.id for rec in forward] == ["first", "second"]
        assert [rec.id for rec in backward] == ["second", "first"]

    @pytest.mark.parametrize(
        "query_type,expected",
        [
            (QueryType.GENERAL, ["gpt4o", "llama3-8b", "mixtral-8x7b", "mistral-7b"]),
            (QueryType.REASONING, ["claude-opus", "mixtral-8x7b", "o3", "llama3-70b"]),
            (QueryType.RESEARCH, ["llama3-rag", "gemini-pro", "claude-opus", "doc-llama"]),
            (QueryType.WRITING, ["llama3-writing", "mixtral-8x7b", "claude-sonnet", "gpt4o"]),
            (QueryType.CODE, ["code-llama", "deepseek-coder", "o4-mini", "gpt4o"]),
        ],
    )
    def test_builtin_order_per_query_type(self, recommender, query_type, expected):
        """Test that multi-purpose models rank by their fitness for the query type."""
        ranked = recommender.rank(ClassificationResult(query_type=query_type, confidence=95))

        assert [rec.id for rec in ranked] == expected

    def test_specialist_ranks_above_generalist(self):
        """Test that single-purpose models get a bonus over multi-purpose ones."""
        specialist = make_model("specialist", 80, QueryType.WRITING)
        generalist = make_model(
            "generalist", 80, QueryType.WRITING, QueryType.CODE, QueryType.GENERAL
        )
        recommender = ModelRecommender(make_catalog(generalist, specialist))

        ranked = recommender.rank(
            ClassificationResult(query_type=QueryType.WRITING, confidence=95)
        )

        assert ranked[0].id == "specialist"
        assert ranked[0].confidence > ranked[1].confidence

    def test_empty_catalog(self):
        """Test that an empty catalog yields nothing."""
        recommender = ModelRecommender(make_catalog())

        assert recommender.recommend(
            ClassificationResult(query_type=QueryType.CODE, confidence=95)
        ) == []


class TestConfidence:
    """Tests for per-model confidence."""

    def test_monotonic_in_classifier_confidence(self, recommender):
        """Test that higher classifier confidence never lowers a model's score."""
        previous: dict[str, int] = {}
        for confidence in range(30, 101):
            ranked = recommender.rank(
                ClassificationResult(query_type=QueryType.REASONING, confidence=confidence)
            )
            for rec in ranked:
                assert rec.confidence >= previous.get(rec.id, 0)
                previous[rec.id] = rec.confidence

    def test_priority_is_clamped(self):
        """Test that bonus plus priority cannot exceed 100."""
        model = make_model("top", 100, QueryType.IMAGE)
        ranked = ModelRecommender(make_catalog(model)).rank(
            ClassificationResult(query_type=QueryType.IMAGE, confidence=100)
        )

        assert ranked[0].confidence == 100

    def test_fitness_depends_on_query_type(self):
        """Test that a model's fitness for the query type replaces its base priority."""
        model = ModelDescriptor(
            id="mixed",
            name="Mixed",
            strengths=frozenset({QueryType.CODE, QueryType.GENERAL}),
            base_priority=92,
            fitness={QueryType.CODE: 85, QueryType.GENERAL: 92},
        )
        recommender = ModelRecommender(make_catalog(model))

        code = recommender.rank(ClassificationResult(query_type=QueryType.CODE, confidence=100))
        general = recommender.rank(
            ClassificationResult(query_type=QueryType.GENERAL, confidence=100)
        )

        assert code[0].confidence == 85
        assert general[0].confidence == 92

    def test_fitness_outside_strengths_rejected(self):
        """Test that fitness is only accepted for declared strengths."""
        with pytest.raises(ValidationError):
            ModelDescriptor(
                id="bad",
                name="Bad",
                strengths=frozenset({QueryType.CODE}),
                base_priority=80,
                fitness={QueryType.IMAGE: 90},
            )

    def test_fitness_out_of_range_rejected(self):
        """Test that fitness must be within 0-100."""
        with pytest.raises(ValidationError):
            ModelDescriptor(
                id="bad",
                name="Bad",
                strengths=frozenset({QueryType.CODE}),
                base_priority=80,
                fitness={QueryType.CODE: 120},
            )


class TestSerialization:
    """Tests for catalog entry serialization."""

    def test_strengths_serialize_sorted(self, catalog):
        """Test that strengths dump as a sorted list independent of set order."""
        gpt4o = catalog.get_model("gpt4o")

        assert gpt4o.model_dump(mode="json")["strengths"] == ["code", "general", "writing"]

    def test_strengths_round_trip(self, catalog):
        """Test that a dumped entry validates back to an equal descriptor."""
        mixtral = catalog.get_model("mixtral-8x7b")

        restored = ModelDescriptor.model_validate_json(mixtral.model_dump_json())

        assert restored == mixtral


class TestReasons:
    """Tests for justification strings."""

    def test_reason_per_query_type(self, recommender):
        """Test that multi-purpose models explain the matched strength."""
        code = recommender.rank(ClassificationResult(query_type=QueryType.CODE, confidence=90))
        general = recommender.rank(
            ClassificationResult(query_type=QueryType.GENERAL, confidence=90)
        )

        gpt_code = next(rec for rec in code if rec.id == "gpt4o")
        gpt_general = next(rec for rec in general if rec.id == "gpt4o")
        assert gpt_code.reason == "Best function-calling & structured output"
        assert gpt_general.reason == "Powerful all-rounder"

    def test_default_reason(self):
        """Test the reason used when a model has none for the query type."""
        model = make_model("plain", 70, QueryType.CODE)
        ranked = ModelRecommender(make_catalog(model)).rank(
            ClassificationResult(query_type=QueryType.CODE, confidence=90)
        )

        assert ranked[0].reason == "Strong at code & development"

    def test_idempotent(self, recommender):
        """Test that identical input yields identical output."""
        classification = ClassificationResult(query_type=QueryType.WRITING, confidence=82)

        assert recommender.recommend(classification) == recommender.recommend(classification)


class TestEndToEnd:
    """Tests chaining classifier and recommender."""

    def test_code_query_top_model(self, catalog, recommender):
        """Test the top recommendation for a coding query."""
        classification = QueryClassifier(catalog).classify("implement a binary search in code")
        top = recommender.recommend(classification)

        assert classification.query_type == QueryType.CODE
        assert classification.confidence >= 70
        assert top[0].id == "code-llama"
        assert QueryType.CODE in catalog.get_model(top[0].id).strengths

    def test_blank_query_recommends_nothing(self, catalog, recommender):
        """Test that a blank query suppresses recommendations."""
        classification = QueryClassifier(catalog).classify("   ")

        assert recommender.recommend(classification) == []
