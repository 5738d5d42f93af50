from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from magicmanager.models.scryfall import ScryfallCard

Condition = Literal[
    "mint",
    "near_mint",
    "excellent",
    "good",
    "light_played",
    "played",
    "poor",
]

Rarity = Literal["common", "uncommon", "rare", "mythic"]


class CardRecord(BaseModel):
    """
    A cached card as returned to clients.

    Attributes:
        scryfall_id: Scryfall's printing id (cache key)
        cmc: Mana value
        set_code: Lowercase set code (e.g., "neo")
        prices: Snapshot of Scryfall's price fields at last refresh
    """

    model_config = ConfigDict(from_attributes=True)

    scryfall_id: str
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
    image_uris: dict[str, Any] | None = None
    prices: dict[str, Any] | None = None
    legalities: dict[str, Any] | None = None
    set_code: str
    set_name: str | None = None
    rarity: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_payload(cls, card: ScryfallCard) -> "CardRecord":
        """Build a record straight from a Scryfall payload, bypassing the cache."""
        now = datetime.now(UTC)
        return cls(
            scryfall_id=card.id,
            name=card.name,
            mana_cost=card.mana_cost,
            cmc=card.cmc,
            type_line=card.type_line,
            oracle_text=card.oracle_text,
            colors=list(card.colors),
            color_identity=list(card.color_identity),
            keywords=card.keywords,
            power=card.power,
            toughness=card.toughness,
            image_uris=card.image_uris.model_dump() if card.image_uris else None,
            prices=card.prices.model_dump(),
            legalities=dict(card.legalities),
            set_code=card.set,
            set_name=card.set_name,
            rarity=card.rarity,
            created_at=now,
            updated_at=now,
        )


class EnrichedCard(CardRecord):
    """A search result annotated with the requesting user's ownership."""

    in_collection: bool = False
    collection_quantity: int = 0


class CollectionEntry(BaseModel):
    """A collection row with its joined card."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    scryfall_id: str
    quantity: int
    condition: str
    foil: bool
    notes: str | None = None
    added_at: datetime | None = None
    updated_at: datetime | None = None
    card: CardRecord | None = None
