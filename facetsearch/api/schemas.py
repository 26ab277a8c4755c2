"""API schemas for the facetsearch API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from facetsearch.domain.value_objects import SortMode
from facetsearch.infrastructure.config import settings


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Query Schemas
# ============================================================================


class QueryContextRequest(BaseModel):
    """Predicates shared by search, count and facets."""

    query: str | None = Field(
        default=None,
        max_length=200,
        description="Free-text query. Example: 'recessed downlight'",
    )
    taxonomy_codes: list[str] = Field(
        default_factory=list,
        description="Taxonomy codes (OR semantics). Example: ['LUM_CEIL']",
    )
    flags: dict[str, bool | str | None] = Field(
        default_factory=dict,
        description="Flag requirements: true, false or null/'ignore'. Example: {'outdoor': true}",
    )
    suppliers: list[str] = Field(
        default_factory=list, description="Supplier names (OR semantics)"
    )
    filters: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Structured filters by key. Categorical: 'IP65' or ['IP65','IP67']; "
            "boolean: true/false; numeric: {'min': 10, 'max': 20}"
        ),
    )


class SearchRequest(QueryContextRequest):
    """Search request with sort and page."""

    sort: SortMode = Field(default=SortMode.RELEVANCE, description="Result ordering")
    offset: int = Field(default=0, ge=0, description="Number of results to skip")
    limit: int | None = Field(
        default=settings.default_page_size,
        ge=0,
        le=settings.max_page_size,
        description="Page size (null for the full result set)",
    )


class ProductSchema(BaseModel):
    """Product in a result page."""

    id: str = Field(..., description="Product identifier")
    name: str = Field(..., description="Short description")
    description: str | None = Field(default=None, description="Long description")
    class_code: str | None = Field(default=None, description="Classification code")
    class_name: str | None = Field(default=None, description="Class display name")
    supplier: str | None = Field(default=None, description="Supplier name")
    price: float | None = Field(default=None, description="Price in major units")
    image_url: str | None = Field(default=None, description="Product image URL")
    taxonomy_codes: list[str] = Field(default_factory=list, description="Assigned taxonomy codes")
    flags: dict[str, bool] = Field(default_factory=dict, description="Classifier flags")
    match_tier: int | None = Field(
        default=None, description="Text match tier (0 exact, 1 prefix, 2 substring, 3 terms)"
    )


class SearchResponse(BaseModel):
    """Ranked page of products."""

    items: list[ProductSchema] = Field(..., description="Products in rank order")
    total: int = Field(..., description="Total number of matches")
    offset: int = Field(..., description="Offset of the page")
    limit: int | None = Field(default=None, description="Page size")
    has_more: bool = Field(..., description="Whether there are more results")


class CountResponse(BaseModel):
    """Total match count."""

    count: int = Field(..., description="Number of matching products")


# ============================================================================
# Facet Schemas
# ============================================================================


class FacetValueSchema(BaseModel):
    """Discrete facet option."""

    value: bool | str | float = Field(..., description="Option value")
    count: int = Field(..., description="Products with this value")
    selected: bool = Field(default=False, description="Whether the option is selected")


class HistogramBucketSchema(BaseModel):
    """Numeric facet bucket."""

    label: str = Field(..., description="Display label, e.g. '10-20'")
    min: float = Field(..., description="Bucket lower bound")
    max: float = Field(..., description="Bucket upper bound")
    count: int = Field(..., description="Products in the bucket")


class FacetSchema(BaseModel):
    """Available options of one filter."""

    key: str
    label: str
    kind: str
    category: str
    unit: str | None = None
    count: int = Field(..., description="Candidates with a value for the filter")
    values: list[FacetValueSchema] = Field(default_factory=list)
    min: float | None = None
    max: float | None = None
    histogram: list[HistogramBucketSchema] = Field(default_factory=list)


class FlagFacetSchema(BaseModel):
    """True/false counts of a classifier flag."""

    name: str
    true_count: int | None = None
    false_count: int | None = None
    requirement: str | None = None


class FacetRowSchema(BaseModel):
    """Flat (filter key, value or bucket, count) row."""

    filter_key: str
    value: bool | str | float
    count: int
    min: float | None = None
    max: float | None = None


class FacetsResponse(BaseModel):
    """Facets of a query context."""

    facets: list[FacetSchema] = Field(default_factory=list)
    flags: list[FlagFacetSchema] = Field(default_factory=list)
    rows: list[FacetRowSchema] = Field(default_factory=list)


# ============================================================================
# Taxonomy and Statistics Schemas
# ============================================================================


class TaxonomyNodeSchema(BaseModel):
    """Taxonomy node with product count."""

    code: str
    parent_code: str | None = None
    level: int
    name: str
    product_count: int


class StatisticSchema(BaseModel):
    """Named aggregate counter."""

    name: str
    value: int


# ============================================================================
# Admin Schemas
# ============================================================================


class RuleIssueSchema(BaseModel):
    """Classification rule skipped by a rebuild."""

    rule_name: str
    reason: str


class RebuildReportResponse(BaseModel):
    """Outcome of a rebuild attempt."""

    generation: int
    status: str
    started_at: datetime
    finished_at: datetime | None = None
    duration_ms: float
    config_source: str | None = None
    workers: int
    product_count: int
    unclassified_count: int
    entry_count: int
    skipped_rules: list[RuleIssueSchema] = Field(default_factory=list)
    error: str | None = None
