"""Model recommendation for classified queries."""

from typing import TYPE_CHECKING

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from qr_api.routing.classifier import ClassificationResult, QueryType
from qr_api.routing.presentation import get_query_type_label

if TYPE_CHECKING:
    from qr_api.routing.catalog import RoutingCatalog

logger = structlog.get_logger()


class ModelDescriptor(BaseModel):
    """Static catalog entry for a recommendable model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable model key")
    name: str = Field(..., min_length=1, description="Display name")
    strengths: frozenset[QueryType] = Field(
        ..., min_length=1, description="Query types the model is strong at"
    )
    base_priority: int = Field(
        ..., ge=0, le=100, description="Baseline fitness of the model (0-100)"
    )
    fitness: dict[QueryType, int] = Field(
        default_factory=dict,
        description="Fitness per strength (0-100); base_priority when absent",
    )
    reasons: dict[QueryType, str] = Field(
        default_factory=dict, description="Justification per strength"
    )

    @field_validator("fitness")
    @classmethod
    def check_fitness_range(cls, v: dict[QueryType, int]) -> dict[QueryType, int]:
        for query_type, fit in v.items():
            if not 0 <= fit <= 100:
                raise ValueError(f"Fitness for {query_type.value} must be within 0-100")
        return v

    @model_validator(mode="after")
    def check_fitness_keys(self) -> "ModelDescriptor":
        extra = set(self.fitness) - self.strengths
        if extra:
            names = ", ".join(sorted(query_type.value for query_type in extra))
            raise ValueError(f"Fitness given for types outside strengths: {names}")
        return self

    @field_serializer("strengths")
    def serialize_strengths(self, strengths: frozenset[QueryType]) -> list[str]:
        return sorted(query_type.value for query_type in strengths)


class Recommendation(BaseModel):
    """A model recommended for a classified query."""

    id: str = Field(..., description="Catalog model id")
    name: str = Field(..., description="Display name")
    reason: str = Field(..., description="Why the model suits this query")
    confidence: int = Field(
        ..., ge=0, le=100, description="Model fitness for the query type (0-100)"
    )


class ModelRecommender:
    """Ranks catalog models for a classification result."""

    # Divided across a model's strengths
    SPECIALIST_BONUS = 4

    def __init__(
        self,
        catalog: "RoutingCatalog",
        threshold: int = 30,
        limit: int = 3,
    ):
        """Initialize the recommender.

        Args:
            catalog: Routing tables providing the model catalog
            threshold: Classifier confidence below which nothing is recommended
            limit: Number of recommendations returned by recommend()
        """
        self.models = catalog.models
        self.threshold = threshold
        self.limit = limit

    def _model_confidence(
        self,
        model: ModelDescriptor,
        query_type: QueryType,
        classifier_confidence: int,
    ) -> int:
        """Score a model's fitness for a query type.

        Uses the model's fitness for that type when the catalog gives one,
        otherwise its base priority plus a bonus shared across its strengths.
        Non-decreasing in classifier confidence.
        """
        fit = model.fitness.get(query_type)
        if fit is None:
            fit = model.base_priority + self.SPECIALIST_BONUS // len(model.strengths)
        fit = max(0, min(100, fit))
        return round(fit * (60 + 0.4 * classifier_confidence) / 100)

    def _reason(self, model: ModelDescriptor, query_type: QueryType) -> str:
        reason = model.reasons.get(query_type)
        if reason:
            return reason
        return f"Strong at {get_query_type_label(query_type).lower()}"

    def rank(self, classification: ClassificationResult) -> list[Recommendation]:
        """Rank every suitable model for a classification.

        Args:
            classification: Classifier output

        Returns:
            All models whose strengths include the query type, sorted by
            descending confidence with ties kept in catalog order. Empty when
            the classification is below the confidence threshold.
        """
        if classification.confidence < self.threshold:
            logger.debug(
                "Recommendation suppressed",
                query_type=classification.query_type.value,
                confidence=classification.confidence,
                threshold=self.threshold,
            )
            return []

        query_type = classification.query_type
        candidates = [
            Recommendation(
                id=model.id,
                name=model.name,
                reason=self._reason(model, query_type),
                confidence=self._model_confidence(
                    model, query_type, classification.confidence
                ),
            )
            for model in self.models
            if query_type in model.strengths
        ]
        candidates.sort(key=lambda rec: rec.confidence, reverse=True)
        return candidates

    def recommend(self, classification: ClassificationResult) -> list[Recommendation]:
        """Return the top recommendations for a classification.

        Args:
            classification: Classifier output

        Returns:
            At most ``limit`` recommendations, possibly empty
        """
        return self.rank(classification)[: self.limit]
