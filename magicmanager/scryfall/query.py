"""
Compile structured search filters into Scryfall query syntax.

Each non-empty filter contributes one clause; clauses are joined with
single spaces, which Scryfall treats as AND.

Examples:
    SearchFilters(name="bolt", colors=["R"])       -> 'name:"bolt" c:R'
    SearchFilters(sets=["neo", "dmu"])             -> '(s:"neo" OR s:"dmu")'
    SearchFilters(format="modern", legality="banned") -> 'banned:modern'

Syntax reference: https://scryfall.com/docs/syntax
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

Legality = Literal["legal", "banned"]


class NumericRange(BaseModel):
    """Inclusive bounds; either side may be omitted."""

    min: float | None = None
    max: float | None = None


# Inserted into the query unquoted, so limited to letters and digits
BareWord = Annotated[str, Field(pattern=r"^[A-Za-z0-9]+$")]


class SearchFilters(BaseModel):
    """
    Structured card search criteria.

    Format legality is a single `legality` field rather than two booleans,
    so "legal in" and "banned in" cannot both be requested.
    """

    name: str | None = None
    colors: list[BareWord] = Field(default_factory=list)
    color_identity: list[BareWord] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    text: str | None = Field(default=None, description="Oracle text substring")
    mana_value: NumericRange | None = None
    power: NumericRange | None = None
    toughness: NumericRange | None = None
    sets: list[str] = Field(default_factory=list)
    rarity: list[str] = Field(default_factory=list)
    format: BareWord | None = None
    legality: Legality = "legal"


def _quote(value: str) -> str:
    """Wrap a value in double quotes, dropping any it already contains."""
    return '"' + value.replace('"', "") + '"'


def _number(value: float) -> str:
    """Render 3.0 as '3' and 2.5 as '2.5'."""
    return str(int(value)) if float(value).is_integer() else str(value)


def _any_of(keyword: str, values: list[str]) -> str:
    """Parenthesized OR of one quoted clause per value."""
    return "(" + " OR ".join(f"{keyword}:{_quote(v)}" for v in values) + ")"


def _range(keyword: str, bounds: NumericRange | None) -> list[str]:
    if bounds is None:
        return []
    parts: list[str] = []
    if bounds.min is not None:
        parts.append(f"{keyword}>={_number(bounds.min)}")
    if bounds.max is not None:
        parts.append(f"{keyword}<={_number(bounds.max)}")
    return parts


def build_query(filters: SearchFilters) -> str:
    """
    Compile filters into a Scryfall search string.

    Args:
        filters: Structured criteria

    Returns:
        Query string; empty when no filter is set
    """
    parts: list[str] = []

    if filters.name:
        parts.append(f"name:{_quote(filters.name)}")

    if filters.colors:
        parts.append(f"c:{''.join(filters.colors)}")

    if filters.color_identity:
        parts.append(f"id:{''.join(filters.color_identity)}")

    if filters.types:
        parts.append(_any_of("t", filters.types))

    if filters.text:
        parts.append(f"o:{_quote(filters.text)}")

    parts.extend(_range("cmc", filters.mana_value))
    parts.extend(_range("pow", filters.power))
    parts.extend(_range("tou", filters.toughness))

    if filters.sets:
        parts.append(_any_of("s", filters.sets))

    if filters.rarity:
        parts.append(_any_of("r", filters.rarity))

    if filters.format:
        keyword = "f" if filters.legality == "legal" else "banned"
        parts.append(f"{keyword}:{filters.format}")

    return " ".join(parts)
