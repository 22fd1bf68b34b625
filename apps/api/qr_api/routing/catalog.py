"""Static routing tables: query signals, model catalog and pricing."""

import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import structlog
from pydantic import BaseModel, Field, ValidationError

from qr_api.routing.classifier import QueryType, Signal
from qr_api.routing.errors import CatalogError
from qr_api.routing.estimator import PricingEntry
from qr_api.routing.recommender import ModelDescriptor

logger = structlog.get_logger()

KEYWORD = 10
STRUCTURE = 15
PHRASE = 20

# Signal patterns per query type as (regex, weight). Matched case-insensitively;
# every occurrence of a pattern counts.
DEFAULT_SIGNALS: dict[QueryType, list[tuple[str, int]]] = {
    QueryType.CODE: [
        (
            r"\b(code|coding|function|class|variable|debug|bug|error|api|javascript|"
            r"typescript|python|java|sql|css|html|react|node|programming|algorithm|"
            r"compile|compiler|runtime|syntax|regex|refactor|implement)\b",
            KEYWORD,
        ),
        (
            r"\b(write an? (function|class|script|program|query|test)|binary search|"
            r"linked list|hash ?map|sorting algorithm|unit tests?|"
            r"fix (this|the|my) (bug|error|code))\b",
            PHRASE,
        ),
        (r"```|<code>|\bdef \w+\(|\bfunction\s*\(|\b(const|let|var)\s+\w+\s*=", STRUCTURE),
        (r"^\s*(import|from)\s+[\w.]+", STRUCTURE),
    ],
    QueryType.WRITING: [
        (
            r"\b(write|blog|article|essay|story|poem|content|copy|email|letter|"
            r"headline|caption|creative|rewrite|edit|proofread|summarize|"
            r"paraphrase|tone|draft|marketing|persuasive)\b",
            KEYWORD,
        ),
        (
            r"^\s*(please\s+)?(write|compose|draft)\s+(me\s+)?(an?\s+)?(short\s+|long\s+)?"
            r"(story|poem|essay|blog|article|letter|email|song|speech|novel)",
            PHRASE,
        ),
    ],
    QueryType.RESEARCH: [
        (
            r"\b(research|study|paper|journal|citations?|sources?|facts?|evidence|"
            r"statistics|history|science|theory)\b",
            KEYWORD,
        ),
        (r"^\s*(what|who|when|where|how)\b|\b(explain|how does|what is)\b", KEYWORD),
        (r"\b(search for|look up|find out|information about|tell me about)\b", PHRASE),
    ],
    QueryType.REASONING: [
        (
            r"\b(solve|problem|logic|math|calculate|equation|proof|prove|theorem|"
            r"derive|deduce)\b",
            KEYWORD,
        ),
        (
            r"\b(evaluate|compare|contrast|pros and cons|trade-?offs?|decision|"
            r"strategy)\b",
            KEYWORD,
        ),
        (r"\b(step by step|explain why|what would happen if)\b", PHRASE),
        (r"(?<!\d)\d+\s*[-+*/^=]\s*\d+", STRUCTURE),
    ],
    QueryType.IMAGE: [
        (
            r"\b(image|picture|photo|illustration|drawing|artwork|logo|icon|"
            r"poster|wallpaper)\b",
            KEYWORD,
        ),
        (
            r"\b(generate|create|make|draw|paint|render|design)\s+(me\s+)?(an?\s+)?"
            r"(\w+\s+)?(image|picture|illustration|logo|icon|poster|drawing)",
            PHRASE,
        ),
        (r"\b(stable diffusion|dall-?e|midjourney|sdxl)\b", PHRASE),
    ],
    QueryType.VIDEO: [
        (r"\b(video|clip|animation|footage|trailer|film|movie)\b", KEYWORD),
        (
            r"\b(animate|(create|generate|make)\s+(an?\s+)?video|video from|"
            r"text to video)\b",
            PHRASE,
        ),
    ],
    QueryType.VISION: [
        (
            r"\b(analy[sz]e (this |the |my )?(image|photo|picture|screenshot)|"
            r"what'?s in (this|the)|describe (this |the )?(image|photo|picture)|"
            r"read (this |the )?(image|screenshot))",
            PHRASE,
        ),
        (r"\b(screenshot|diagram|chart|graph|ocr|extract text|identify)\b", KEYWORD),
    ],
}


def _model(
    model_id: str,
    name: str,
    strengths: dict[QueryType, tuple[int, str]],
) -> ModelDescriptor:
    fitness = {query_type: fit for query_type, (fit, _) in strengths.items()}
    return ModelDescriptor(
        id=model_id,
        name=name,
        strengths=frozenset(strengths),
        base_priority=max(fitness.values()),
        fitness=fitness,
        reasons={query_type: reason for query_type, (_, reason) in strengths.items()},
    )


# Per strength: (fitness 0-100, reason). Declaration order breaks confidence
# ties between models.
DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    _model("code-llama", "Code LLaMA", {
        QueryType.CODE: (95, "Specialized for code generation & debugging"),
    }),
    _model("deepseek-coder", "DeepSeek Coder", {
        QueryType.CODE: (92, "Excellent for algorithms & problem-solving"),
    }),
    _model("o4-mini", "O4 Mini", {
        QueryType.CODE: (88, "Fast reasoning for coding tasks"),
    }),
    _model("gpt4o", "GPT-4o", {
        QueryType.CODE: (85, "Best function-calling & structured output"),
        QueryType.WRITING: (85, "Reliable for structured content"),
        QueryType.GENERAL: (92, "Powerful all-rounder"),
    }),
    _model("llama3-writing", "LLaMA 3 70B Writer", {
        QueryType.WRITING: (94, "Best open-source writing quality"),
    }),
    _model("mixtral-8x7b", "Mixtral 8x7B", {
        QueryType.WRITING: (90, "Excellent for long-form content"),
        QueryType.REASONING: (94, "Near-GPT-4 quality, affordable"),
        QueryType.GENERAL: (88, "Smart but affordable"),
    }),
    _model("claude-sonnet", "Claude Sonnet", {
        QueryType.WRITING: (88, "Deep reasoning with safety"),
    }),
    _model("llama3-rag", "LLaMA 3 + RAG", {
        QueryType.RESEARCH: (96, "Research answers with citations"),
    }),
    _model("gemini-pro", "Gemini 2.5 Pro", {
        QueryType.RESEARCH: (93, "1M+ context for deep research"),
    }),
    _model("claude-opus", "Claude Opus", {
        QueryType.RESEARCH: (90, "Best for complex analysis"),
        QueryType.REASONING: (95, "Strongest logic chains"),
    }),
    _model("doc-llama", "Document LLaMA", {
        QueryType.RESEARCH: (88, "PDF & document intelligence"),
    }),
    _model("llama3-70b", "LLaMA 3 70B", {
        QueryType.REASONING: (92, "Deep reasoning & long context"),
    }),
    _model("o3", "O3", {
        QueryType.REASONING: (93, "Very powerful multi-step reasoning"),
    }),
    _model("sdxl", "Stable Diffusion XL", {
        QueryType.IMAGE: (95, "High-quality open-source generation"),
    }),
    _model("controlnet", "SD ControlNet", {
        QueryType.IMAGE: (90, "Structured image control"),
    }),
    _model("dalle", "DALL·E 3", {
        QueryType.IMAGE: (92, "Premium creative images"),
    }),
    _model("gemini-3-pro", "Gemini 3 Pro Image", {
        QueryType.IMAGE: (88, "Latest generation quality"),
    }),
    _model("stable-video", "Stable Video Diffusion", {
        QueryType.VIDEO: (88, "Image-to-video generation"),
    }),
    _model("animatediff", "AnimateDiff", {
        QueryType.VIDEO: (85, "Animated visual sequences"),
    }),
    _model("llava", "LLaVA", {
        QueryType.VISION: (94, "Best open-source vision analysis"),
    }),
    _model("gemini-vision", "Gemini Vision", {
        QueryType.VISION: (92, "Image & video analysis"),
    }),
    _model("phi-3-vision", "Phi-3 Vision", {
        QueryType.VISION: (85, "Compact & efficient"),
    }),
    _model("llama3-8b", "LLaMA 3 8B", {
        QueryType.GENERAL: (90, "Fast general-purpose workhorse"),
    }),
    _model("mistral-7b", "Mistral 7B", {
        QueryType.GENERAL: (85, "Fast intent detection"),
    }),
)

# Price per 1K tokens in INR as (input, output)
DEFAULT_PRICING: dict[str, tuple[float, float]] = {
    "gemini-2.5-flash": (0.0035, 0.014),
    "gemini-2.5-pro": (0.0175, 0.07),
    "gpt-5": (0.35, 1.05),
    "gpt-5-mini": (0.0105, 0.042),
    "claude-opus-4.5": (0.21, 0.63),
    "claude-sonnet-4.5": (0.042, 0.126),
    "llama-3.3-70b": (0.0035, 0.014),
    "mistral-large": (0.028, 0.084),
    "deepseek-r1": (0.0035, 0.014),
    "o3": (0.21, 0.63),
    "grok-3": (0.07, 0.21),
    "gemini-3-pro": (0.0175, 0.07),
}

DEFAULT_MODEL_ID = "gemini-2.5-flash"


@dataclass(frozen=True)
class RoutingCatalog:
    """Immutable tables shared by the classifier, recommender and estimator."""

    signals: Mapping[QueryType, tuple[Signal, ...]]
    models: tuple[ModelDescriptor, ...]
    pricing: Mapping[str, PricingEntry]
    default_model: str = DEFAULT_MODEL_ID

    def get_model(self, model_id: str) -> ModelDescriptor | None:
        """Look up a catalog model by id."""
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    def validate(self) -> "RoutingCatalog":
        """Check the tables for configuration defects.

        Returns:
            The catalog itself, for chaining

        Raises:
            CatalogError: If a table is empty or inconsistent
        """
        if not self.models:
            raise CatalogError("Model catalog is empty")
        if not self.pricing:
            raise CatalogError("Pricing table is empty")
        if not any(self.signals.values()):
            raise CatalogError("Signal table is empty")

        seen: set[str] = set()
        for model in self.models:
            if model.id in seen:
                raise CatalogError(f"Duplicate model id in catalog: {model.id}")
            seen.add(model.id)

        if self.default_model not in self.pricing:
            raise CatalogError(
                f"Default model {self.default_model} has no pricing entry"
            )

        for model_id, entry in self.pricing.items():
            if entry.model_id != model_id:
                raise CatalogError(
                    f"Pricing key {model_id} does not match entry {entry.model_id}"
                )

        covered = {query_type for model in self.models for query_type in model.strengths}
        for query_type in QueryType:
            if query_type not in covered:
                logger.warning("No model covers query type", query_type=query_type.value)

        return self


def compile_signals(
    table: Mapping[QueryType, list[tuple[str, int]]],
) -> Mapping[QueryType, tuple[Signal, ...]]:
    """Compile a raw signal table.

    Raises:
        CatalogError: If a pattern is not a valid regular expression
    """
    compiled: dict[QueryType, tuple[Signal, ...]] = {}
    for query_type, entries in table.items():
        try:
            compiled[query_type] = tuple(
                Signal.compile(pattern, weight) for pattern, weight in entries
            )
        except re.error as e:
            raise CatalogError(f"Invalid signal pattern for {query_type.value}: {e}") from e
    return MappingProxyType(compiled)


def build_pricing(table: Mapping[str, tuple[float, float]]) -> Mapping[str, PricingEntry]:
    """Build pricing entries from (input, output) price pairs."""
    return MappingProxyType({
        model_id: PricingEntry(
            model_id=model_id,
            input_price_per_1k=input_price,
            output_price_per_1k=output_price,
        )
        for model_id, (input_price, output_price) in table.items()
    })


def default_catalog(default_model: str = DEFAULT_MODEL_ID) -> RoutingCatalog:
    """Build the catalog from the built-in tables.

    Args:
        default_model: Model priced when none is selected; must be in the
            built-in pricing table

    Raises:
        CatalogError: If the default model has no pricing entry
    """
    return RoutingCatalog(
        signals=compile_signals(DEFAULT_SIGNALS),
        models=DEFAULT_MODELS,
        pricing=build_pricing(DEFAULT_PRICING),
        default_model=default_model,
    ).validate()


class SignalSpec(BaseModel):
    """Signal entry in a catalog file."""

    pattern: str = Field(..., min_length=1, description="Regular expression")
    weight: int = Field(..., gt=0, description="Score added per match")


class CatalogFile(BaseModel):
    """Schema of a JSON catalog file."""

    default_model: str = Field(
        default=DEFAULT_MODEL_ID, description="Model priced when none is selected"
    )
    models: list[ModelDescriptor] = Field(..., description="Model catalog")
    pricing: list[PricingEntry] = Field(..., description="Pricing table")
    signals: dict[QueryType, list[SignalSpec]] | None = Field(
        default=None, description="Signal table; built-in signals when omitted"
    )


def load_catalog(path: Path) -> RoutingCatalog:
    """Load and validate routing tables from a JSON file.

    Args:
        path: Path to the catalog file

    Returns:
        Validated RoutingCatalog

    Raises:
        CatalogError: If the file cannot be read or is misconfigured
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read catalog file {path}: {e}") from e

    try:
        document = CatalogFile.model_validate_json(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog file {path}: {e}") from e

    if document.signals is None:
        signals = compile_signals(DEFAULT_SIGNALS)
    else:
        signals = compile_signals({
            query_type: [(entry.pattern, entry.weight) for entry in entries]
            for query_type, entries in document.signals.items()
        })

    pricing: dict[str, PricingEntry] = {}
    for entry in document.pricing:
        if entry.model_id in pricing:
            raise CatalogError(f"Duplicate pricing entry: {entry.model_id}")
        pricing[entry.model_id] = entry

    catalog = RoutingCatalog(
        signals=signals,
        models=tuple(document.models),
        pricing=MappingProxyType(pricing),
        default_model=document.default_model,
    ).validate()

    logger.info(
        "Routing catalog loaded",
        path=str(path),
        models=len(catalog.models),
        priced_models=len(catalog.pricing),
    )
    return catalog
