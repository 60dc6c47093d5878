"""Screen-level operations: wrestler saves with relations, entity lists with counts."""

import pytest

from app.models.kinds import EntityKind, RelationKind
from app.schemas import EntityForm, WrestlerForm
from app.services.image_service import encode_data_url


async def create_entities(roster, kind, *names):
    return [await roster.create_entity(kind, EntityForm(name=name)) for name in names]


@pytest.mark.asyncio
async def test_create_wrestler_with_relations(roster):
    wwe, wcw = await create_entities(roster, EntityKind.PROMOTION, "WWE", "WCW")
    (nwo,) = await create_entities(roster, EntityKind.FACTION, "nWo")

    wrestler = await roster.create_wrestler(
        WrestlerForm(name="Hulk Hogan", promotions=[wwe.id, wcw.id], factions=[nwo.id])
    )
    assert wrestler.name == "Hulk Hogan"
    assert [p.name for p in wrestler.promotions] == ["WCW", "WWE"]
    assert [f.name for f in wrestler.factions] == ["nWo"]
    assert wrestler.championships == []


@pytest.mark.asyncio
async def test_create_wrestler_fails_when_relations_cannot_be_saved(roster):
    assert await roster.create_wrestler(WrestlerForm(name="Ghost", promotions=[4242])) is None


@pytest.mark.asyncio
async def test_update_wrestler_replaces_every_relation_kind(roster):
    wwe, aew = await create_entities(roster, EntityKind.PROMOTION, "WWE", "AEW")
    (belt,) = await create_entities(roster, EntityKind.CHAMPIONSHIP, "TNT")
    wrestler = await roster.create_wrestler(
        WrestlerForm(name="Cody", promotions=[wwe.id], championships=[belt.id])
    )

    updated = await roster.update_wrestler(
        wrestler.id, WrestlerForm(name="Cody Rhodes", promotions=[aew.id])
    )
    assert updated.name == "Cody Rhodes"
    assert [p.name for p in updated.promotions] == ["AEW"]
    assert updated.championships == []

    assert await roster.update_wrestler(9999, WrestlerForm(name="Nobody")) is None


@pytest.mark.asyncio
async def test_list_wrestlers_attaches_relations(roster):
    (wwe,) = await create_entities(roster, EntityKind.PROMOTION, "WWE")
    await roster.create_wrestler(WrestlerForm(name="Undertaker", promotions=[wwe.id]))
    await roster.create_wrestler(WrestlerForm(name="Kane"))

    wrestlers = await roster.list_wrestlers()
    assert [w.name for w in wrestlers] == ["Kane", "Undertaker"]
    assert wrestlers[0].promotions == []
    assert [p.name for p in wrestlers[1].promotions] == ["WWE"]


@pytest.mark.asyncio
async def test_list_with_counts(roster):
    aew, njpw, wwe = await create_entities(roster, EntityKind.PROMOTION, "AEW", "NJPW", "WWE")
    await roster.create_wrestler(WrestlerForm(name="Omega", promotions=[aew.id, njpw.id]))
    await roster.create_wrestler(WrestlerForm(name="Jericho", promotions=[aew.id, wwe.id]))

    counts = await roster.list_with_counts(RelationKind.PROMOTION)
    assert [(p.name, p.wrestler_count) for p in counts] == [
        ("AEW", 2),
        ("NJPW", 1),
        ("WWE", 1),
    ]


@pytest.mark.asyncio
async def test_entity_image_upload_on_save(roster, fake_storage):
    data = encode_data_url(b"logo", "image/png")
    promotion = await roster.create_entity(
        EntityKind.PROMOTION, EntityForm(name="ROH", image_data=data)
    )
    assert promotion.image_url.endswith(".png")
    assert "/object/public/wrestler-images/promotions/" in promotion.image_url

    (key,) = fake_storage.objects
    assert fake_storage.objects[key] == b"logo"


@pytest.mark.asyncio
async def test_failed_upload_still_saves_the_entity(roster, fake_storage):
    fake_storage.fail_uploads = True
    faction = await roster.create_entity(
        EntityKind.FACTION,
        EntityForm(name="Evolution", image_data=encode_data_url(b"x", "image/png")),
    )
    assert faction.name == "Evolution"
    assert faction.image_url is None
    assert roster.images.capabilities.image_uploads_enabled is False


@pytest.mark.asyncio
async def test_deleting_a_championship_removes_it_from_wrestlers(roster):
    (belt,) = await create_entities(roster, EntityKind.CHAMPIONSHIP, "US Title")
    wrestler = await roster.create_wrestler(
        WrestlerForm(name="Cena", championships=[belt.id])
    )

    assert await roster.delete_entity(EntityKind.CHAMPIONSHIP, belt.id)
    assert (await roster.get_wrestler(wrestler.id)).championships == []
    assert await roster.list_with_counts(RelationKind.CHAMPIONSHIP) == []


@pytest.mark.asyncio
async def test_failed_wrestler_create_leaves_no_row(roster):
    for _ in range(2):
        assert (
            await roster.create_wrestler(WrestlerForm(name="Ghost", championships=[77]))
            is None
        )
    assert await roster.list_wrestlers() == []


@pytest.mark.asyncio
async def test_update_without_image_fields_keeps_the_image(roster):
    promotion = await roster.create_entity(
        EntityKind.PROMOTION, EntityForm(name="ECW", image_url="https://img/ecw.png")
    )
    renamed = await roster.update_entity(
        EntityKind.PROMOTION, promotion.id, EntityForm(name="Extreme Championship Wrestling")
    )
    assert renamed.image_url == "https://img/ecw.png"
