"""Query classification for model recommendation."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from qr_api.routing.catalog import RoutingCatalog

logger = structlog.get_logger()


class QueryType(str, Enum):
    """Task categories a query can be classified into."""

    CODE = "code"
    WRITING = "writing"
    RESEARCH = "research"
    REASONING = "reasoning"
    IMAGE = "image"
    VIDEO = "video"
    VISION = "vision"
    GENERAL = "general"


# Tie-break order, most specific first. GENERAL never wins on score.
TYPE_PRIORITY: tuple[QueryType, ...] = (
    QueryType.VISION,
    QueryType.VIDEO,
    QueryType.IMAGE,
    QueryType.CODE,
    QueryType.REASONING,
    QueryType.RESEARCH,
    QueryType.WRITING,
    QueryType.GENERAL,
)


@dataclass(frozen=True)
class Signal:
    """A weighted lexical cue; every match adds ``weight`` to its query type."""

    pattern: re.Pattern[str]
    weight: int

    @classmethod
    def compile(cls, pattern: str, weight: int) -> "Signal":
        return cls(re.compile(pattern, re.IGNORECASE), weight)

    def score(self, text: str) -> int:
        return self.weight * sum(1 for _ in self.pattern.finditer(text))


class ClassificationResult(BaseModel):
    """Result of query classification."""

    query_type: QueryType = Field(
        ..., description="Dominant inferred intent of the query"
    )
    confidence: int = Field(
        ..., ge=0, le=100, description="How unambiguous the signal was (0-100)"
    )
    scores: dict[QueryType, int] = Field(
        default_factory=dict, description="Raw signal score per query type"
    )


class QueryClassifier:
    """Keyword and structure based query classifier.

    Each query type accumulates a raw score from its signals. The highest
    score wins and confidence grows with the winner's margin over the
    runner-up, scaled down when the winning signal itself is weak.
    """

    MAX_CONFIDENCE = 95
    BASE_CONFIDENCE = 20
    NO_SIGNAL_CONFIDENCE = 10
    # Raw score at which a winning signal counts as strong
    STRONG_SIGNAL = 20

    def __init__(self, catalog: "RoutingCatalog"):
        """Initialize the classifier.

        Args:
            catalog: Routing tables providing the signal set per query type
        """
        self.signals = catalog.signals

    def score(self, query: str) -> dict[QueryType, int]:
        """Compute the raw signal score of every query type.

        Args:
            query: Query text

        Returns:
            Mapping of query type to raw score, in tie-break priority order
        """
        scores: dict[QueryType, int] = {}
        for query_type in TYPE_PRIORITY:
            signals = self.signals.get(query_type, ())
            scores[query_type] = sum(signal.score(query) for signal in signals)
        return scores

    def _confidence(self, winner: int, runner_up: int) -> int:
        """Map the winning margin to a 0-100 confidence.

        The margin is taken relative to the winning score, so the same raw
        gap counts for less when both scores are high. Winning scores below
        STRONG_SIGNAL are scaled down further.

        Args:
            winner: Highest raw score
            runner_up: Second highest raw score

        Returns:
            Confidence, monotonic in the margin for a fixed winning score
        """
        margin = (winner - runner_up) / winner
        strength = min(1.0, winner / self.STRONG_SIGNAL)
        span = self.MAX_CONFIDENCE - self.BASE_CONFIDENCE
        return min(self.MAX_CONFIDENCE, round(self.BASE_CONFIDENCE + span * margin * strength))

    def classify(self, query: str) -> ClassificationResult:
        """Classify a query by its dominant intent.

        Args:
            query: Free-text query, possibly empty

        Returns:
            ClassificationResult with query type and confidence
        """
        if not query.strip():
            return ClassificationResult(query_type=QueryType.GENERAL, confidence=0)

        scores = self.score(query)
        # sorted() is stable, so equal scores keep TYPE_PRIORITY order
        ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
        (query_type, winner), (_, runner_up) = ranked[0], ranked[1]

        if winner <= 0:
            confidence = self.NO_SIGNAL_CONFIDENCE
            query_type = QueryType.GENERAL
        else:
            confidence = self._confidence(winner, runner_up)

        logger.debug(
            "Query classified",
            query_type=query_type.value,
            confidence=confidence,
            winner=winner,
            runner_up=runner_up,
        )
        return ClassificationResult(
            query_type=query_type,
            confidence=confidence,
            scores=scores,
        )
