"""Display descriptors for query types and cost figures."""

from pydantic import BaseModel, ConfigDict, Field

from qr_api.routing.classifier import QueryType


class QueryTypeDisplay(BaseModel):
    """How a query type is rendered by the UI."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Human-readable category name")
    icon: str = Field(..., description="Icon name in the UI icon set")


QUERY_TYPE_DISPLAY: dict[QueryType, QueryTypeDisplay] = {
    QueryType.CODE: QueryTypeDisplay(label="Code & Development", icon="Code"),
    QueryType.WRITING: QueryTypeDisplay(label="Writing & Content", icon="Pen"),
    QueryType.RESEARCH: QueryTypeDisplay(label="Research & Analysis", icon="Search"),
    QueryType.REASONING: QueryTypeDisplay(label="Reasoning & Logic", icon="Brain"),
    QueryType.IMAGE: QueryTypeDisplay(label="Image Generation", icon="Image"),
    QueryType.VIDEO: QueryTypeDisplay(label="Video Creation", icon="Video"),
    QueryType.VISION: QueryTypeDisplay(label="Vision & Analysis", icon="Eye"),
    QueryType.GENERAL: QueryTypeDisplay(label="General Query", icon="MessageSquare"),
}

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def get_query_type_label(query_type: QueryType) -> str:
    """Get the display label for a query type."""
    return QUERY_TYPE_DISPLAY[query_type].label


def get_query_type_icon(query_type: QueryType) -> str:
    """Get the icon name for a query type."""
    return QUERY_TYPE_DISPLAY[query_type].icon


def format_cost(cost: float, currency: str, places: int = 3) -> str:
    """Format an estimated cost for display.

    Args:
        cost: Cost in currency units
        currency: ISO currency code
        places: Decimal places to show

    Returns:
        Cost string such as ``₹0.006``
    """
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    return f"{symbol}{cost:.{places}f}"
