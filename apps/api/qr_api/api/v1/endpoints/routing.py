"""Query routing API endpoints."""

from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from qr_api.config import Settings, get_settings
from qr_api.observability.otel import get_tracer
from qr_api.routing.catalog import RoutingCatalog, default_catalog, load_catalog
from qr_api.routing.classifier import ClassificationResult, QueryClassifier, QueryType
from qr_api.routing.errors import CatalogError
from qr_api.routing.estimator import CostEstimator, PricingEntry, TokenEstimate
from qr_api.routing.presentation import (
    QUERY_TYPE_DISPLAY,
    QueryTypeDisplay,
    format_cost,
    get_query_type_icon,
    get_query_type_label,
)
from qr_api.routing.recommender import ModelDescriptor, ModelRecommender, Recommendation

router = APIRouter()
logger = structlog.get_logger()
tracer = get_tracer()


# Request/Response models
class ClassifyRequest(BaseModel):
    """Request to classify a query."""

    query: str = Field(
        ..., description="Current query text"
    )


class ClassifyResponse(BaseModel):
    """Classification with display hints."""

    classification: ClassificationResult = Field(
        ..., description="Classifier output"
    )
    label: str = Field(
        ..., description="Display label of the query type"
    )
    icon: str = Field(
        ..., description="Icon name of the query type"
    )


class RecommendRequest(BaseModel):
    """Request for model recommendations."""

    query: str = Field(
        ..., description="Current query text"
    )
    selected_models: list[str] = Field(
        default_factory=list, description="Model ids the user already selected"
    )


class RecommendedModel(Recommendation):
    """Recommendation flagged with the user's current selection."""

    selected: bool = Field(
        default=False, description="Whether the user already selected this model"
    )


class RecommendResponse(BaseModel):
    """Payload for the recommendation banner."""

    show: bool = Field(
        ..., description="Whether a banner should be shown at all"
    )
    classification: ClassificationResult = Field(
        ..., description="Classifier output"
    )
    label: str = Field(
        ..., description="Display label of the query type"
    )
    icon: str = Field(
        ..., description="Icon name of the query type"
    )
    recommendations: list[RecommendedModel] = Field(
        default_factory=list, description="Top recommendations, best first"
    )
    already_selected: int = Field(
        default=0, description="How many recommendations are already selected"
    )


class EstimateRequest(BaseModel):
    """Request for a token/cost estimate."""

    model_config = ConfigDict(protected_namespaces=())

    text: str = Field(
        ..., description="Composed message text"
    )
    model_id: str | None = Field(
        default=None, description="Selected model; default model when unset"
    )


class EstimateResponse(BaseModel):
    """Token/cost estimate, or no estimate for empty text."""

    estimate: TokenEstimate | None = Field(
        default=None, description="Estimate, null when there is nothing to estimate"
    )
    short_cost: str | None = Field(
        default=None, description="Compact cost string, e.g. ~₹0.006"
    )
    long_cost: str | None = Field(
        default=None, description="Detailed cost string, e.g. ₹0.0060"
    )


# Dependency injection
@lru_cache
def get_catalog() -> RoutingCatalog:
    """Load the routing tables once per process."""
    settings = get_settings()
    if settings.catalog_path:
        return load_catalog(settings.catalog_path)
    return default_catalog(default_model=settings.default_model)


def get_routing_catalog() -> RoutingCatalog:
    """Get the routing catalog, reporting misconfiguration as a server error."""
    try:
        return get_catalog()
    except CatalogError as e:
        logger.error("Routing catalog misconfigured", error=str(e))
        raise HTTPException(
            status_code=500,
            detail=f"Routing catalog misconfigured: {str(e)}"
        )


def get_classifier(
    catalog: Annotated[RoutingCatalog, Depends(get_routing_catalog)]
) -> QueryClassifier:
    """Get classifier instance."""
    return QueryClassifier(catalog)


def get_recommender(
    catalog: Annotated[RoutingCatalog, Depends(get_routing_catalog)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ModelRecommender:
    """Get recommender instance."""
    return ModelRecommender(
        catalog,
        threshold=settings.recommendation_threshold,
        limit=settings.max_recommendations,
    )


def get_estimator(
    catalog: Annotated[RoutingCatalog, Depends(get_routing_catalog)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CostEstimator:
    """Get estimator instance."""
    return CostEstimator(
        catalog,
        chars_per_token=settings.chars_per_token,
        output_multiplier=settings.output_multiplier,
        min_cost=settings.min_display_cost,
        currency=settings.currency,
    )


# Endpoints
@router.post("/classify", response_model=ClassifyResponse)
async def classify_query(
    request: ClassifyRequest,
    classifier: Annotated[QueryClassifier, Depends(get_classifier)],
) -> ClassifyResponse:
    """Classify a query by its dominant intent."""
    with tracer.start_as_current_span("routing.classify") as span:
        classification = classifier.classify(request.query)
        span.set_attribute("routing.query_type", classification.query_type.value)
        span.set_attribute("routing.confidence", classification.confidence)

    return ClassifyResponse(
        classification=classification,
        label=get_query_type_label(classification.query_type),
        icon=get_query_type_icon(classification.query_type),
    )


@router.post("/recommend", response_model=RecommendResponse)
async def recommend_models(
    request: RecommendRequest,
    classifier: Annotated[QueryClassifier, Depends(get_classifier)],
    recommender: Annotated[ModelRecommender, Depends(get_recommender)],
) -> RecommendResponse:
    """Classify a query and recommend models for it.

    The banner is hidden when the query is blank or the classification
    is too ambiguous to recommend anything.
    """
    with tracer.start_as_current_span("routing.recommend") as span:
        classification = classifier.classify(request.query)
        recommendations = recommender.recommend(classification)
        span.set_attribute("routing.query_type", classification.query_type.value)
        span.set_attribute("routing.recommendations", len(recommendations))

    selected = set(request.selected_models)
    flagged = [
        RecommendedModel(**rec.model_dump(), selected=rec.id in selected)
        for rec in recommendations
    ]

    return RecommendResponse(
        show=bool(flagged),
        classification=classification,
        label=get_query_type_label(classification.query_type),
        icon=get_query_type_icon(classification.query_type),
        recommendations=flagged,
        already_selected=sum(1 for rec in flagged if rec.selected),
    )


@router.post("/estimate", response_model=EstimateResponse)
async def estimate_cost(
    request: EstimateRequest,
    estimator: Annotated[CostEstimator, Depends(get_estimator)],
) -> EstimateResponse:
    """Estimate tokens and cost of a composed message.

    Advisory only; the estimate never gates sending.
    """
    with tracer.start_as_current_span("routing.estimate") as span:
        estimate = estimator.estimate(request.text, request.model_id)
        span.set_attribute("routing.model_id", request.model_id or estimator.default_model)

    if estimate is None:
        return EstimateResponse()

    return EstimateResponse(
        estimate=estimate,
        short_cost=f"~{format_cost(estimate.cost, estimate.currency, places=3)}",
        long_cost=format_cost(estimate.cost, estimate.currency, places=4),
    )


@router.get("/catalog", response_model=list[ModelDescriptor])
async def get_models(
    catalog: Annotated[RoutingCatalog, Depends(get_routing_catalog)],
) -> list[ModelDescriptor]:
    """List the recommendable models in declaration order."""
    return list(catalog.models)


@router.get("/pricing", response_model=list[PricingEntry])
async def get_pricing(
    catalog: Annotated[RoutingCatalog, Depends(get_routing_catalog)],
) -> list[PricingEntry]:
    """List the pricing table used for estimates."""
    return list(catalog.pricing.values())


@router.get("/query-types", response_model=dict[QueryType, QueryTypeDisplay])
async def get_query_types() -> dict[QueryType, QueryTypeDisplay]:
    """Get display labels and icons for every query type."""
    return dict(QUERY_TYPE_DISPLAY)
