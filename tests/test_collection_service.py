"""Tests for collection mutations and statistics."""

from collections.abc import Callable

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from magicmanager.db.operations import get_collection_entry
from magicmanager.models.db import CardCacheDB, CollectionCardDB
from magicmanager.models.errors import NotFoundError, ValidationError
from magicmanager.models.scryfall import ScryfallCard
from magicmanager.services import collection as collection_service
from magicmanager.services.card_cache import cache_card
from magicmanager.services.collection import (
    add_to_collection,
    card_price,
    collection_stats,
    extract_primary_type,
    remove_from_collection,
    update_collection_entry,
)
from payloads import BOLT_ID, GROWTH_ID, OTHER_USER_ID, USER_ID, growth_payload

MakeCard = Callable[..., ScryfallCard]


@pytest.fixture
async def cached_cards(session: AsyncSession, make_card: MakeCard) -> None:
    await cache_card(session, make_card(BOLT_ID))
    await cache_card(session, ScryfallCard.model_validate(growth_payload()))
    await cache_card(
        session,
        make_card(
            "island",
            "Island",
            colors=[],
            color_identity=[],
            cmc=0.0,
            type_line="Basic Land — Island",
            prices={"usd": None},
            set="dmu",
            rarity="common",
        ),
    )


async def count_entries(session: AsyncSession, user_id: str = USER_ID) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(CollectionCardDB)
        .where(CollectionCardDB.user_id == user_id)
    )
    return result.scalar_one()


@pytest.mark.usefixtures("cached_cards")
class TestAddToCollection:
    async def test_creates_entry(self, session: AsyncSession) -> None:
        entry = await add_to_collection(session, USER_ID, BOLT_ID, quantity=2, notes="binder")

        assert entry.id is not None
        assert entry.quantity == 2
        assert entry.condition == "near_mint"
        assert entry.foil is False
        assert entry.notes == "binder"
        assert entry.card.name == "Lightning Bolt"

    async def test_duplicate_add_merges_quantity(self, session: AsyncSession) -> None:
        first = await add_to_collection(session, USER_ID, BOLT_ID, quantity=2)
        second = await add_to_collection(session, USER_ID, BOLT_ID, quantity=3)

        assert second.id == first.id
        assert second.quantity == 5
        assert await count_entries(session) == 1

    async def test_duplicate_add_keeps_notes_unless_given(self, session: AsyncSession) -> None:
        await add_to_collection(session, USER_ID, BOLT_ID, notes="deck box")

        kept = await add_to_collection(session, USER_ID, BOLT_ID)
        assert kept.notes == "deck box"

        replaced = await add_to_collection(session, USER_ID, BOLT_ID, notes="trade binder")
        assert replaced.notes == "trade binder"

    @pytest.mark.parametrize(
        ("condition", "foil"),
        [("played", False), ("near_mint", True)],
    )
    async def test_new_variant_creates_row(
        self, session: AsyncSession, condition: str, foil: bool
    ) -> None:
        await add_to_collection(session, USER_ID, BOLT_ID, quantity=2)

        entry = await add_to_collection(
            session, USER_ID, BOLT_ID, quantity=1, condition=condition, foil=foil
        )

        assert entry.quantity == 1
        assert await count_entries(session) == 2

    async def test_concurrent_duplicate_add_merges(
        self, session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        first = await add_to_collection(session, USER_ID, BOLT_ID, quantity=2)
        lookups: list[str] = []

        async def lookup_misses_once(*args, **kwargs):
            # The first lookup runs before the other request's insert is visible
            lookups.append(args[2])
            if len(lookups) == 1:
                return None
            return await get_collection_entry(*args, **kwargs)

        monkeypatch.setattr(collection_service, "get_collection_entry", lookup_misses_once)

        merged = await add_to_collection(session, USER_ID, BOLT_ID, quantity=3, notes="race")

        assert len(lookups) == 2
        assert merged.id == first.id
        assert merged.quantity == 5
        assert merged.notes == "race"
        assert await count_entries(session) == 1

    async def test_users_are_separate(self, session: AsyncSession) -> None:
        await add_to_collection(session, USER_ID, BOLT_ID)
        await add_to_collection(session, OTHER_USER_ID, BOLT_ID)

        assert await count_entries(session, USER_ID) == 1
        assert await count_entries(session, OTHER_USER_ID) == 1

    async def test_uncached_card_not_found(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await add_to_collection(session, USER_ID, "not-cached")

        assert exc_info.value.message == "Card not found in database"


@pytest.mark.usefixtures("cached_cards")
class TestUpdateAndRemove:
    async def test_update_fields(self, session: AsyncSession) -> None:
        entry = await add_to_collection(session, USER_ID, BOLT_ID, quantity=2)

        updated = await update_collection_entry(
            session, USER_ID, entry.id, quantity=4, condition="excellent", foil=True, notes="x"
        )

        assert updated.quantity == 4
        assert updated.condition == "excellent"
        assert updated.foil is True
        assert updated.notes == "x"

    async def test_update_to_zero_keeps_entry(self, session: AsyncSession) -> None:
        entry = await add_to_collection(session, USER_ID, BOLT_ID, quantity=2)

        updated = await update_collection_entry(session, USER_ID, entry.id, quantity=0)

        assert updated.quantity == 0
        assert await count_entries(session) == 1

    async def test_update_omitted_fields_unchanged(self, session: AsyncSession) -> None:
        entry = await add_to_collection(session, USER_ID, BOLT_ID, quantity=2, notes="keep")

        updated = await update_collection_entry(session, USER_ID, entry.id, foil=True)

        assert updated.quantity == 2
        assert updated.notes == "keep"

    async def test_update_colliding_variant_rejected(self, session: AsyncSession) -> None:
        await add_to_collection(session, USER_ID, BOLT_ID)
        played = await add_to_collection(session, USER_ID, BOLT_ID, condition="played")

        with pytest.raises(ValidationError):
            await update_collection_entry(session, USER_ID, played.id, condition="near_mint")

    async def test_update_other_users_entry_not_found(self, session: AsyncSession) -> None:
        entry = await add_to_collection(session, OTHER_USER_ID, BOLT_ID)

        with pytest.raises(NotFoundError):
            await update_collection_entry(session, USER_ID, entry.id, quantity=9)

    async def test_remove(self, session: AsyncSession) -> None:
        entry = await add_to_collection(session, USER_ID, BOLT_ID)

        await remove_from_collection(session, USER_ID, entry.id)

        assert await count_entries(session) == 0
        # The shared card cache is untouched
        assert await session.get(CardCacheDB, BOLT_ID) is not None

    async def test_remove_other_users_entry_not_found(self, session: AsyncSession) -> None:
        entry = await add_to_collection(session, OTHER_USER_ID, BOLT_ID)

        with pytest.raises(NotFoundError):
            await remove_from_collection(session, USER_ID, entry.id)

        assert await count_entries(session, OTHER_USER_ID) == 1

    async def test_remove_missing_entry(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await remove_from_collection(session, USER_ID, 9999)


@pytest.mark.usefixtures("cached_cards")
class TestCollectionStats:
    async def test_empty_collection(self, session: AsyncSession) -> None:
        stats = await collection_stats(session, USER_ID)

        assert stats.total_cards == 0
        assert stats.unique_cards == 0
        assert stats.total_value == 0.0
        assert stats.color_distribution == {}

    async def test_aggregates(self, session: AsyncSession) -> None:
        await add_to_collection(session, USER_ID, BOLT_ID, quantity=4)
        await add_to_collection(session, USER_ID, BOLT_ID, quantity=1, foil=True)
        await add_to_collection(session, USER_ID, GROWTH_ID, quantity=3)
        await add_to_collection(session, USER_ID, "island", quantity=10)
        await add_to_collection(session, OTHER_USER_ID, BOLT_ID, quantity=50)

        stats = await collection_stats(session, USER_ID)

        assert stats.total_cards == 18
        assert stats.unique_cards == 3
        # 4 x 1.00 + 1 x 5.00 (foil) + 3 x 0.25 + 10 x unpriced
        assert stats.total_value == 9.75
        assert stats.color_distribution == {"R": 5, "G": 3, "C": 10}
        assert stats.type_distribution == {"Instant": 8, "Land": 10}
        assert stats.rarity_distribution == {"uncommon": 5, "common": 13}
        assert stats.set_distribution == {"2xm": 5, "m10": 3, "dmu": 10}


class TestHelpers:
    @pytest.mark.parametrize(
        ("type_line", "expected"),
        [
            ("Creature — Human Wizard", "Creature"),
            ("Artifact Creature — Golem", "Creature"),
            ("Legendary Planeswalker — Jace", "Planeswalker"),
            ("Basic Land — Forest", "Land"),
            ("Instant // Sorcery", "Instant"),
            ("Tribal Kindred", "Other"),
            ("", "Unknown"),
        ],
    )
    def test_extract_primary_type(self, type_line: str, expected: str) -> None:
        assert extract_primary_type(type_line) == expected

    def test_card_price_foil_falls_back_to_regular(self) -> None:
        card = CardCacheDB(prices={"usd": "0.25", "usd_foil": None})

        assert card_price(card, foil=True) == 0.25
        assert card_price(card, foil=False) == 0.25

    def test_card_price_missing(self) -> None:
        assert card_price(CardCacheDB(prices=None), foil=False) == 0.0
        assert card_price(CardCacheDB(prices={"usd": "n/a"}), foil=False) == 0.0
