"""Free-text matching with match-quality tiers.

Matching is case-insensitive. Every whitespace-separated term of the query
must occur somewhere in the product's searchable fields. Matching products
are ranked by tier:

    0  exact      query equals the product id or name
    1  prefix     product id or name starts with the query
    2  substring  the whole query occurs in a searchable field
    3  terms      every term occurs, but not as one phrase
"""

from dataclasses import dataclass

from facetsearch.domain.entities import Product

TIER_EXACT = 0
TIER_PREFIX = 1
TIER_SUBSTRING = 2
TIER_TERMS = 3


def normalize(text: str | None) -> str:
    """Lowercase and collapse whitespace."""
    return " ".join((text or "").lower().split())


@dataclass(frozen=True)
class SearchableText:
    """Normalized searchable fields of one product."""

    names: tuple[str, ...]
    fields: tuple[str, ...]

    @classmethod
    def from_product(cls, product: Product) -> "SearchableText":
        """Extract searchable fields from a product."""
        names = tuple(
            n for n in (normalize(product.id), normalize(product.description_short)) if n
        )
        fields = names + tuple(
            f
            for f in (
                normalize(product.description_long),
                normalize(product.supplier),
                normalize(product.class_name),
            )
            if f
        )
        return cls(names=names, fields=fields)


@dataclass(frozen=True)
class TextQuery:
    """Parsed free-text query."""

    phrase: str
    terms: tuple[str, ...]

    @classmethod
    def parse(cls, query: str | None) -> "TextQuery | None":
        """Parse a query, returning None for a blank one."""
        phrase = normalize(query)
        if not phrase:
            return None
        return cls(phrase=phrase, terms=tuple(dict.fromkeys(phrase.split())))

    def tier(self, text: SearchableText) -> int | None:
        """Match quality tier of a product, or None if it does not match."""
        for term in self.terms:
            if not any(term in field for field in text.fields):
                return None
        if any(name == self.phrase for name in text.names):
            return TIER_EXACT
        if any(name.startswith(self.phrase) for name in text.names):
            return TIER_PREFIX
        if any(self.phrase in field for field in text.fields):
            return TIER_SUBSTRING
        return TIER_TERMS
