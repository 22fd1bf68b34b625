"""Example usage of the query routing core.

This script demonstrates how to:
1. Classify queries by intent
2. Recommend models for a classified query
3. Estimate tokens and cost of a message
4. Load routing tables from a JSON file
"""

import json
import tempfile
from pathlib import Path

from qr_api.config import Settings
from qr_api.routing import (
    CostEstimator,
    ModelRecommender,
    QueryClassifier,
    default_catalog,
    load_catalog,
)
from qr_api.routing.presentation import format_cost, get_query_type_label

QUERIES = [
    "write a short story about a dragon",
    "implement a binary search in code",
    "analyze this image and tell me what's in it",
    "compare python and java",
    "hello there",
]


def example_classification():
    """Example 1: Query Classification."""
    print("=" * 80)
    print("EXAMPLE 1: Query Classification")
    print("=" * 80)

    classifier = QueryClassifier(default_catalog())

    for query in QUERIES:
        result = classifier.classify(query)
        print(f"\nQuery: {query}")
        print(f"  Type: {get_query_type_label(result.query_type)}")
        print(f"  Confidence: {result.confidence}%")


def example_recommendation():
    """Example 2: Model Recommendation."""
    print("\n" + "=" * 80)
    print("EXAMPLE 2: Model Recommendation")
    print("=" * 80)

    settings = Settings()
    catalog = default_catalog()
    classifier = QueryClassifier(catalog)
    recommender = ModelRecommender(
        catalog,
        threshold=settings.recommendation_threshold,
        limit=settings.max_recommendations,
    )

    for query in QUERIES:
        classification = classifier.classify(query)
        recommendations = recommender.recommend(classification)
        print(f"\nQuery: {query}")
        if not recommendations:
            print("  (too ambiguous, no recommendation)")
            continue
        for rec in recommendations:
            print(f"  {rec.confidence:3d}%  {rec.name}: {rec.reason}")


def example_estimation():
    """Example 3: Token and Cost Estimation."""
    print("\n" + "=" * 80)
    print("EXAMPLE 3: Token and Cost Estimation")
    print("=" * 80)

    settings = Settings()
    estimator = CostEstimator(
        default_catalog(),
        chars_per_token=settings.chars_per_token,
        output_multiplier=settings.output_multiplier,
        min_cost=settings.min_display_cost,
        currency=settings.currency,
    )

    message = "Explain the difference between TCP and UDP with examples. " * 5
    for model_id in ("gemini-2.5-flash", "gpt-5", "claude-opus-4.5", "not-a-model"):
        estimate = estimator.estimate(message, model_id)
        print(f"\nModel: {model_id}")
        print(f"  Input: ~{estimate.input_tokens} tokens")
        print(f"  Est. Output: ~{estimate.output_tokens} tokens")
        print(f"  Est. Cost: {format_cost(estimate.cost, estimate.currency, places=4)}")
        if estimate.used_fallback_pricing:
            print("  (priced with the default model)")


def example_custom_catalog():
    """Example 4: Custom Routing Tables."""
    print("\n" + "=" * 80)
    print("EXAMPLE 4: Custom Routing Tables")
    print("=" * 80)

    doc = {
        "default_model": "house-model",
        "models": [
            {
                "id": "house-coder",
                "name": "House Coder",
                "strengths": ["code"],
                "base_priority": 90,
                "reasons": {"code": "Tuned on our monorepo"},
            },
        ],
        "pricing": [
            {"model_id": "house-model", "input_price_per_1k": 0.01, "output_price_per_1k": 0.03},
        ],
    }

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "catalog.json"
        path.write_text(json.dumps(doc), encoding="utf-8")
        catalog = load_catalog(path)

    classification = QueryClassifier(catalog).classify("refactor this python class")
    for rec in ModelRecommender(catalog).recommend(classification):
        print(f"\n  {rec.name} ({rec.confidence}%): {rec.reason}")


def main():
    """Run all examples."""
    print("\n")
    print("*" * 80)
    print("QUERY ROUTER EXAMPLES")
    print("*" * 80)

    example_classification()
    example_recommendation()
    example_estimation()
    example_custom_catalog()

    print("\n" + "*" * 80)
    print("Examples complete!")
    print("*" * 80 + "\n")


if __name__ == "__main__":
    main()
