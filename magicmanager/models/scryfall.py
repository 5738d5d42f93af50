"""
Scryfall API payload models.

Scryfall marks every JSON object with an `object` field. Errors come back as
`{"object": "error", "code": ..., "details": ...}` instead of the expected
shape, so responses are decoded once into either the expected model or a
ScryfallErrorPayload and callers branch on the type.

API docs: https://scryfall.com/docs/api
"""

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

NOT_FOUND_CODE = "not_found"


class ScryfallModel(BaseModel):
    """Base for Scryfall objects; unknown fields are kept, not rejected."""

    model_config = ConfigDict(extra="allow")


class ImageUris(ScryfallModel):
    small: str | None = None
    normal: str | None = None
    large: str | None = None
    png: str | None = None
    art_crop: str | None = None
    border_crop: str | None = None


class Prices(ScryfallModel):
    usd: str | None = None
    usd_foil: str | None = None
    eur: str | None = None
    eur_foil: str | None = None
    tix: str | None = None


class ScryfallCard(ScryfallModel):
    """A single card printing."""

    object: Literal["card"] = "card"
    id: str
    name: str
    mana_cost: str | None = None
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str | None = None
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    keywords: list[str] | None = None
    power: str | None = None
    toughness: str | None = None
    image_uris: ImageUris | None = None
    prices: Prices = Field(default_factory=Prices)
    legalities: dict[str, str] = Field(default_factory=dict)
    set: str = ""
    set_name: str | None = None
    rarity: str = "common"


class ScryfallList(ScryfallModel):
    """A page of card search results."""

    object: Literal["list"] = "list"
    total_cards: int = 0
    has_more: bool = False
    next_page: str | None = None
    data: list[ScryfallCard] = Field(default_factory=list)
    warnings: list[str] | None = None

    @classmethod
    def empty(cls) -> "ScryfallList":
        """The result Scryfall's not_found maps to."""
        return cls(total_cards=0, has_more=False, data=[])


class ScryfallCatalog(ScryfallModel):
    """A list of strings, e.g. autocomplete suggestions."""

    object: Literal["catalog"] = "catalog"
    total_values: int = 0
    data: list[str] = Field(default_factory=list)


class ScryfallSet(ScryfallModel):
    object: Literal["set"] = "set"
    id: str
    code: str
    name: str
    set_type: str | None = None
    released_at: str | None = None
    card_count: int = 0
    icon_svg_uri: str | None = None


class ScryfallSetList(ScryfallModel):
    object: Literal["list"] = "list"
    has_more: bool = False
    data: list[ScryfallSet] = Field(default_factory=list)


class ScryfallErrorPayload(ScryfallModel):
    """An error object returned instead of the expected payload."""

    object: Literal["error"] = "error"
    status: int | None = None
    code: str = "unknown"
    details: str | None = None
    type: str | None = None

    @property
    def is_not_found(self) -> bool:
        return self.code == NOT_FOUND_CODE


M = TypeVar("M", bound=ScryfallModel)


def is_error_payload(data: Any) -> bool:
    """Check whether a decoded JSON value is a Scryfall error object."""
    return isinstance(data, dict) and data.get("object") == "error"


def decode_payload(data: Any, model: type[M]) -> M | ScryfallErrorPayload:
    """
    Decode raw Scryfall JSON into the expected model or an error payload.

    Args:
        data: Decoded JSON body
        model: Model expected on success

    Returns:
        An instance of `model`, or ScryfallErrorPayload if Scryfall reported an error

    Raises:
        pydantic.ValidationError: If a non-error body does not match `model`
    """
    if is_error_payload(data):
        return ScryfallErrorPayload.model_validate(data)
    return model.model_validate(data)
