"""Query routing: classification, model recommendation and cost estimation."""

from qr_api.routing.catalog import RoutingCatalog, default_catalog, load_catalog
from qr_api.routing.classifier import (
    ClassificationResult,
    QueryClassifier,
    QueryType,
)
from qr_api.routing.errors import CatalogError
from qr_api.routing.estimator import CostEstimator, PricingEntry, TokenEstimate
from qr_api.routing.recommender import (
    ModelDescriptor,
    ModelRecommender,
    Recommendation,
)

__all__ = [
    "CatalogError",
    "ClassificationResult",
    "CostEstimator",
    "ModelDescriptor",
    "ModelRecommender",
    "PricingEntry",
    "QueryClassifier",
    "QueryType",
    "Recommendation",
    "RoutingCatalog",
    "TokenEstimate",
    "default_catalog",
    "load_catalog",
]
