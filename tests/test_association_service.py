"""Junction relation behaviour: replacement, counts, lookups and cascades."""

import pytest
import pytest_asyncio

from app.models.kinds import EntityKind, RelationKind


@pytest_asyncio.fixture
async def seeded(stores):
    async def make(kind, *names):
        return [await stores[kind].create({"name": name}) for name in names]

    wwe, aew, njpw = await make(EntityKind.PROMOTION, "WWE", "AEW", "NJPW")
    (elite,) = await make(EntityKind.FACTION, "The Elite")
    universal, ic = await make(EntityKind.CHAMPIONSHIP, "Universal", "Intercontinental")
    omega, reigns = await make(EntityKind.WRESTLER, "Kenny Omega", "Roman Reigns")
    return {
        "wwe": wwe,
        "aew": aew,
        "njpw": njpw,
        "elite": elite,
        "universal": universal,
        "ic": ic,
        "omega": omega,
        "reigns": reigns,
    }


def names(entities):
    return [entity.name for entity in entities]


@pytest.mark.asyncio
async def test_replace_sets_exactly_the_given_ids(associations, seeded):
    omega = seeded["omega"].id
    promotion = RelationKind.PROMOTION

    assert await associations.replace_associations(
        omega, promotion, [seeded["wwe"].id, seeded["njpw"].id]
    )
    assert names(await associations.get_associated_entities(omega, promotion)) == [
        "NJPW",
        "WWE",
    ]

    # Whatever was linked before is replaced, not merged.
    assert await associations.replace_associations(
        omega, promotion, [seeded["aew"].id, seeded["njpw"].id]
    )
    assert names(await associations.get_associated_entities(omega, promotion)) == [
        "AEW",
        "NJPW",
    ]


@pytest.mark.asyncio
async def test_replace_is_idempotent_and_dedupes(associations, seeded):
    omega = seeded["omega"].id
    ids = [seeded["aew"].id, seeded["aew"].id, seeded["wwe"].id]

    for _ in range(2):
        assert await associations.replace_associations(omega, RelationKind.PROMOTION, ids)
        assert names(
            await associations.get_associated_entities(omega, RelationKind.PROMOTION)
        ) == ["AEW", "WWE"]
    assert await associations.count_associated(seeded["aew"].id, RelationKind.PROMOTION) == 1


@pytest.mark.asyncio
async def test_replace_with_empty_set_clears_links(associations, seeded):
    omega = seeded["omega"].id
    await associations.replace_associations(omega, RelationKind.FACTION, [seeded["elite"].id])
    assert await associations.replace_associations(omega, RelationKind.FACTION, [])
    assert await associations.get_associated_entities(omega, RelationKind.FACTION) == []
    assert await associations.count_associated(seeded["elite"].id, RelationKind.FACTION) == 0


@pytest.mark.asyncio
async def test_failed_replace_keeps_previous_links(associations, seeded):
    omega = seeded["omega"].id
    await associations.replace_associations(omega, RelationKind.PROMOTION, [seeded["wwe"].id])

    # An unknown promotion id violates the foreign key and rolls the whole replace back.
    assert not await associations.replace_associations(
        omega, RelationKind.PROMOTION, [seeded["aew"].id, 9999]
    )
    assert names(
        await associations.get_associated_entities(omega, RelationKind.PROMOTION)
    ) == ["WWE"]


@pytest.mark.asyncio
async def test_replace_all_covers_every_kind(associations, seeded):
    reigns = seeded["reigns"].id
    assert await associations.replace_all_associations(
        reigns,
        {
            RelationKind.PROMOTION: [seeded["wwe"].id],
            RelationKind.FACTION: [],
            RelationKind.CHAMPIONSHIP: [seeded["universal"].id, seeded["ic"].id],
        },
    )
    relations = await associations.get_relations(reigns)
    assert names(relations[RelationKind.PROMOTION]) == ["WWE"]
    assert relations[RelationKind.FACTION] == []
    assert names(relations[RelationKind.CHAMPIONSHIP]) == ["Intercontinental", "Universal"]


@pytest.mark.asyncio
async def test_count_matches_membership(associations, seeded):
    aew = seeded["aew"].id
    for wrestler in (seeded["omega"], seeded["reigns"]):
        await associations.replace_associations(wrestler.id, RelationKind.PROMOTION, [aew])

    members = await associations.get_associated_wrestlers(aew, RelationKind.PROMOTION)
    assert names(members) == ["Kenny Omega", "Roman Reigns"]
    assert await associations.count_associated(aew, RelationKind.PROMOTION) == len(members)
    assert await associations.count_all(RelationKind.PROMOTION) == {aew: 2}


@pytest.mark.asyncio
async def test_no_links_short_circuits_entity_fetch(associations, seeded, monkeypatch):
    store = associations.stores[EntityKind.PROMOTION]

    async def fail_get_many(ids):
        raise AssertionError("entity fetch should not run without links")

    monkeypatch.setattr(store, "get_many", fail_get_many)
    assert (
        await associations.get_associated_entities(seeded["omega"].id, RelationKind.PROMOTION)
        == []
    )


@pytest.mark.asyncio
async def test_associated_wrestlers_carry_their_other_relations(associations, seeded):
    omega = seeded["omega"].id
    await associations.replace_all_associations(
        omega,
        {
            RelationKind.PROMOTION: [seeded["aew"].id, seeded["njpw"].id],
            RelationKind.FACTION: [seeded["elite"].id],
            RelationKind.CHAMPIONSHIP: [seeded["ic"].id],
        },
    )

    (wrestler,) = await associations.get_associated_wrestlers(
        seeded["elite"].id, RelationKind.FACTION
    )
    assert wrestler.name == "Kenny Omega"
    assert names(wrestler.promotions) == ["AEW", "NJPW"]
    assert names(wrestler.championships) == ["Intercontinental"]
    assert wrestler.factions == []


@pytest.mark.asyncio
async def test_deleting_an_entity_cascades_its_links(associations, stores, seeded):
    reigns = seeded["reigns"].id
    universal = seeded["universal"].id
    await associations.replace_associations(reigns, RelationKind.CHAMPIONSHIP, [universal])
    assert await associations.count_associated(universal, RelationKind.CHAMPIONSHIP) == 1

    assert await stores[EntityKind.CHAMPIONSHIP].delete(universal)
    assert await associations.get_associated_entities(reigns, RelationKind.CHAMPIONSHIP) == []
    assert await associations.count_associated(universal, RelationKind.CHAMPIONSHIP) == 0


@pytest.mark.asyncio
async def test_deleting_a_wrestler_cascades_its_links(associations, stores, seeded):
    wwe = seeded["wwe"].id
    await associations.replace_associations(seeded["reigns"].id, RelationKind.PROMOTION, [wwe])

    assert await stores[EntityKind.WRESTLER].delete(seeded["reigns"].id)
    assert await associations.count_associated(wwe, RelationKind.PROMOTION) == 0
    assert await associations.get_associated_wrestlers(wwe, RelationKind.PROMOTION) == []
