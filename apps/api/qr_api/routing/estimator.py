"""Advisory token and cost estimation."""

from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from qr_api.routing.catalog import RoutingCatalog

logger = structlog.get_logger()


class PricingEntry(BaseModel):
    """Static per-model unit price."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = Field(..., min_length=1, description="Priced model id")
    input_price_per_1k: float = Field(
        ..., ge=0.0, description="Price per 1K input tokens"
    )
    output_price_per_1k: float = Field(
        ..., ge=0.0, description="Price per 1K output tokens"
    )


class TokenEstimate(BaseModel):
    """Estimated token volume and cost of serving a message."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(..., description="Model the estimate is based on")
    input_tokens: int = Field(..., ge=0, description="Estimated prompt tokens")
    output_tokens: int = Field(..., ge=0, description="Estimated response tokens")
    cost: float = Field(..., ge=0.0, description="Estimated cost, floored for display")
    currency: str = Field(..., description="Currency of the cost")
    used_fallback_pricing: bool = Field(
        default=False, description="Whether the model had no pricing entry"
    )


class CostEstimator:
    """Estimates tokens and cost from text length.

    Token counts use a fixed characters-per-token ratio rather than a real
    tokenizer, and the response length is assumed to be a fixed multiple of
    the prompt length. Figures are for display only, never for billing.
    """

    def __init__(
        self,
        catalog: "RoutingCatalog",
        chars_per_token: int = 4,
        output_multiplier: int = 4,
        min_cost: float = 0.001,
        currency: str = "INR",
    ):
        """Initialize the estimator.

        Args:
            catalog: Routing tables providing pricing and the default model
            chars_per_token: Characters counted as one token
            output_multiplier: Response tokens per prompt token
            min_cost: Smallest cost reported
            currency: Currency the pricing table is denominated in
        """
        self.pricing = catalog.pricing
        self.default_model = catalog.default_model
        self.chars_per_token = chars_per_token
        self.output_multiplier = output_multiplier
        self.min_cost = min_cost
        self.currency = currency

    def count_tokens(self, text: str) -> int:
        """Approximate the token count of a text (ceil of chars / ratio)."""
        return -(-len(text) // self.chars_per_token)

    def get_pricing(self, model_id: str | None) -> tuple[PricingEntry, bool]:
        """Resolve pricing for a model.

        Args:
            model_id: Model identifier; None selects the default model

        Returns:
            Tuple of (pricing entry, whether fallback pricing was used)
        """
        model_id = model_id or self.default_model
        entry = self.pricing.get(model_id)
        if entry is not None:
            return entry, False

        logger.debug("No pricing for model, using default", model_id=model_id)
        default = self.pricing.get(self.default_model)
        if default is None:
            # Empty or broken table: price at zero so the floor applies
            default = PricingEntry(
                model_id=self.default_model,
                input_price_per_1k=0.0,
                output_price_per_1k=0.0,
            )
        return default, True

    def estimate(self, text: str, model_id: str | None = None) -> TokenEstimate | None:
        """Estimate tokens and cost of a message.

        Args:
            text: Message text
            model_id: Selected model; None selects the default model

        Returns:
            TokenEstimate, or None when the text is empty
        """
        if not text:
            return None

        input_tokens = self.count_tokens(text)
        output_tokens = input_tokens * self.output_multiplier
        pricing, fallback = self.get_pricing(model_id)

        cost = (
            input_tokens * pricing.input_price_per_1k
            + output_tokens * pricing.output_price_per_1k
        ) / 1000

        return TokenEstimate(
            model_id=model_id or self.default_model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=max(cost, self.min_cost),
            currency=self.currency,
            used_fallback_pricing=fallback,
        )
