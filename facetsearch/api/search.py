"""Search API endpoints.

Provides the five client operations: search, count, facets, taxonomy
tree and statistics.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from facetsearch.api.errors import to_http_exception
from facetsearch.api.schemas import (
    CountResponse,
    ErrorResponse,
    FacetRowSchema,
    FacetSchema,
    FacetsResponse,
    FlagFacetSchema,
    ProductSchema,
    QueryContextRequest,
    SearchRequest,
    SearchResponse,
    StatisticSchema,
    TaxonomyNodeSchema,
)
from facetsearch.application.search_service import SearchService, get_search_service
from facetsearch.domain.exceptions import DomainError
from facetsearch.domain.value_objects import PageRequest
from facetsearch.search.query import QueryContext, SearchHit

router = APIRouter(tags=["Search"])

ERROR_RESPONSES = {
    422: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# ============================================================================
# Converters
# ============================================================================


def request_to_context(request: QueryContextRequest) -> QueryContext:
    """Convert request predicates to a query context."""
    return QueryContext.create(
        query_text=request.query,
        taxonomy_codes=request.taxonomy_codes,
        flags=request.flags,
        suppliers=request.suppliers,
        filters=request.filters,
    )


def hit_to_response(hit: SearchHit) -> ProductSchema:
    """Convert a search hit to response schema."""
    product = hit.product
    return ProductSchema(
        id=product.id,
        name=product.description_short,
        description=product.description_long or None,
        class_code=product.class_code,
        class_name=product.class_name,
        supplier=product.supplier,
        price=float(product.price) if product.price is not None else None,
        image_url=product.image_url,
        taxonomy_codes=sorted(hit.assignment.codes),
        flags=dict(hit.assignment.flags),
        match_tier=hit.tier,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/search",
    response_model=SearchResponse,
    responses=ERROR_RESPONSES,
    summary="Search products",
    description="Ranked, paginated products matching the query context.",
)
async def search(
    request: SearchRequest,
    service: Annotated[SearchService, Depends(get_search_service)],
) -> SearchResponse:
    """Search products.

    Args:
        request: Query context with sort and page.
        service: Search service.

    Returns:
        Page of products with total and has_more.
    """
    try:
        result = await service.search(
            request_to_context(request),
            sort=request.sort,
            page=PageRequest(offset=request.offset, limit=request.limit),
        )
    except DomainError as e:
        raise to_http_exception(e) from e

    return SearchResponse(
        items=[hit_to_response(hit) for hit in result.hits],
        total=result.total,
        offset=result.offset,
        limit=result.limit,
        has_more=result.has_more,
    )


@router.post(
    "/search/count",
    response_model=CountResponse,
    responses=ERROR_RESPONSES,
    summary="Count matches",
    description="Total number of products matching the query context.",
)
async def count(
    request: QueryContextRequest,
    service: Annotated[SearchService, Depends(get_search_service)],
) -> CountResponse:
    """Count products matching a query context."""
    try:
        total = await service.count(request_to_context(request))
    except DomainError as e:
        raise to_http_exception(e) from e
    return CountResponse(count=total)


@router.post(
    "/search/facets",
    response_model=FacetsResponse,
    responses=ERROR_RESPONSES,
    summary="Compute facets",
    description="Filter options available in the query context, with product counts.",
)
async def facets(
    request: QueryContextRequest,
    service: Annotated[SearchService, Depends(get_search_service)],
) -> FacetsResponse:
    """Compute facets for a query context.

    Each filter's own selection is ignored when counting its options.
    Options with no matching product are never returned.
    """
    try:
        result = await service.facets(request_to_context(request))
    except DomainError as e:
        raise to_http_exception(e) from e

    return FacetsResponse(
        facets=[FacetSchema(**facet.to_dict()) for facet in result.facets],
        flags=[FlagFacetSchema(**flag.to_dict()) for flag in result.flags],
        rows=[
            FacetRowSchema(
                filter_key=row.filter_key,
                value=row.value,
                count=row.count,
                min=row.minimum,
                max=row.maximum,
            )
            for row in result.rows()
        ],
    )


@router.get(
    "/taxonomy",
    response_model=list[TaxonomyNodeSchema],
    responses={503: {"model": ErrorResponse}},
    summary="Taxonomy tree",
    description="Active taxonomy nodes in display order with product counts.",
)
async def taxonomy_tree(
    service: Annotated[SearchService, Depends(get_search_service)],
) -> list[TaxonomyNodeSchema]:
    """List the taxonomy tree with product counts."""
    try:
        nodes = await service.taxonomy_tree()
    except DomainError as e:
        raise to_http_exception(e) from e
    return [
        TaxonomyNodeSchema(
            code=n.code,
            parent_code=n.parent_code,
            level=n.level,
            name=n.name,
            product_count=n.product_count,
        )
        for n in nodes
    ]


@router.get(
    "/statistics",
    response_model=list[StatisticSchema],
    responses={503: {"model": ErrorResponse}},
    summary="Index statistics",
    description="Aggregate counters of the serving index for monitoring.",
)
async def statistics(
    service: Annotated[SearchService, Depends(get_search_service)],
) -> list[StatisticSchema]:
    """List aggregate counters."""
    try:
        stats = await service.statistics()
    except DomainError as e:
        raise to_http_exception(e) from e
    return [StatisticSchema(name=s.name, value=s.value) for s in stats]
