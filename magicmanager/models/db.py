"""
SQLAlchemy ORM models for persistent storage.

Two tables: a shared card cache keyed by Scryfall id, and per-user
collection entries that reference it.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardCacheDB(Base):
    """
    A card printing cached from Scryfall.

    Shared by all users. Upserted whenever the card is fetched again so
    prices and legalities stay current.
    """

    __tablename__ = "cards_cache"
    __mapper_args__ = {"eager_defaults": True}

    scryfall_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    mana_cost: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cmc: Mapped[float] = mapped_column(Float, default=0.0)
    type_line: Mapped[str] = mapped_column(String(255), default="")
    oracle_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    colors: Mapped[list[str]] = mapped_column(JSON, default=list)
    color_identity: Mapped[list[str]] = mapped_column(JSON, default=list)
    # Sorted WUBRG letters ("RG"), queryable without JSON operators
    color_key: Mapped[str] = mapped_column(String(5), default="", index=True)

    keywords: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    power: Mapped[str | None] = mapped_column(String(10), nullable=True)
    toughness: Mapped[str | None] = mapped_column(String(10), nullable=True)

    image_uris: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    prices: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    legalities: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    set_code: Mapped[str] = mapped_column(String(10), index=True)
    set_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rarity: Mapped[str] = mapped_column(String(20), index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<CardCacheDB(id={self.scryfall_id}, name={self.name})>"


class CollectionCardDB(Base):
    """
    A stack of identical cards in one user's collection.

    The same card may appear in several rows when condition or foil differ.
    """

    __tablename__ = "collection_cards"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        UniqueConstraint(
            "user_id", "scryfall_id", "condition", "foil", name="uq_collection_card_variant"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    scryfall_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards_cache.scryfall_id"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    condition: Mapped[str] = mapped_column(String(20), default="near_mint")
    foil: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=_utcnow
    )

    card: Mapped["CardCacheDB"] = relationship()

    def __repr__(self) -> str:
        return (
            f"<CollectionCardDB(user={self.user_id}, card={self.scryfall_id}, "
            f"qty={self.quantity})>"
        )
