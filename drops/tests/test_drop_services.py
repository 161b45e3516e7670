from decimal import Decimal

import pytest
from creators.tests.factories import CreatorFactory
from designs.tests.factories import DesignFactory
from drops.models import Drop, Pack
from drops.services import (
    DropError,
    add_design,
    archive_drop,
    create_default_packs,
    create_drop,
    publish_drop,
    quote_pack,
    remove_design,
    resolve_pack_selection,
    unpublish_drop,
    update_drop,
)
from drops.tests.factories import DropDesignFactory, DropFactory, PackFactory

pytestmark = pytest.mark.django_db


def _drop_with_designs(count, **kwargs):
    drop = DropFactory(**kwargs)
    designs = [DropDesignFactory(drop=drop).design for _ in range(count)]
    return drop, designs


def test_create_drop_slugs_are_unique_per_creator():
    creator = CreatorFactory()
    first = create_drop(creator=creator, title="Spooky Season")
    second = create_drop(creator=creator, title="Spooky Season")
    other = create_drop(creator=CreatorFactory(), title="Spooky Season")
    assert first.slug == "spooky-season"
    assert second.slug == "spooky-season-2"
    assert other.slug == "spooky-season"
    assert first.status == Drop.STATUS_DRAFT


def test_update_drop_reslugs_drafts_only():
    drop = create_drop(creator=CreatorFactory(), title="Old Name")
    update_drop(drop=drop, title="New Name")
    assert drop.slug == "new-name"

    published = DropFactory(published=True, slug="frozen")
    update_drop(drop=published, title="Renamed")
    published.refresh_from_db()
    assert published.title == "Renamed"
    assert published.slug == "frozen"


def test_add_design_orders_designs_and_moves_hero():
    drop = DropFactory()
    a = DesignFactory(creator=drop.creator)
    b = DesignFactory(creator=drop.creator)
    first = add_design(drop=drop, design_id=a.id, is_hero=True)
    second = add_design(drop=drop, design_id=b.id, is_hero=True)
    first.refresh_from_db()
    assert (first.display_order, second.display_order) == (1, 2)
    assert first.is_hero is False
    assert second.is_hero is True


def test_add_design_rejects_foreign_and_duplicate_designs():
    drop = DropFactory()
    foreign = DesignFactory(creator=CreatorFactory())
    with pytest.raises(DropError, match="Design not found"):
        add_design(drop=drop, design_id=foreign.id)
    own = DesignFactory(creator=drop.creator)
    add_design(drop=drop, design_id=own.id)
    with pytest.raises(DropError, match="already in this drop"):
        add_design(drop=drop, design_id=own.id)


def test_remove_design_blocked_while_published():
    drop = DropFactory(published=True)
    drop_design = DropDesignFactory(drop=drop)
    with pytest.raises(DropError):
        remove_design(drop=drop, drop_design_id=drop_design.id)



def test_add_design_blocked_while_published():
    drop, _ = _drop_with_designs(6)
    create_default_packs(drop=drop)
    drop = publish_drop(drop=drop)
    extra = DesignFactory(creator=drop.creator)

    with pytest.raises(DropError, match="Unpublish"):
        add_design(drop=drop, design_id=extra.id)
    full_set = drop.packs.get(type=Pack.TYPE_FULL_SET)
    assert drop.drop_designs.count() == full_set.design_count == 6

def test_default_packs_include_full_set_once_drop_has_six_designs():
    small, _ = _drop_with_designs(3)
    packs = create_default_packs(drop=small)
    assert [p.type for p in packs] == [Pack.TYPE_BUILD_A_PACK]
    assert packs[0].price == Decimal("16.80")
    assert packs[0].is_default is True

    big, _ = _drop_with_designs(8)
    packs = create_default_packs(drop=big)
    full = next(p for p in packs if p.type == Pack.TYPE_FULL_SET)
    assert full.design_count == 8
    assert full.price == Decimal("20.00")
    assert create_default_packs(drop=big) == []


def test_publish_reports_every_problem():
    drop = DropFactory()
    with pytest.raises(DropError) as exc:
        publish_drop(drop=drop)
    assert exc.value.details == ["Add at least one design.", "Add at least one active pack."]

    DropDesignFactory(drop=drop)
    PackFactory(drop=drop, design_count=3)
    with pytest.raises(DropError) as exc:
        publish_drop(drop=drop)
    assert exc.value.details == ['"Pick 3 Pack" needs 3 designs but the drop has 1.']


def test_publish_unpublish_archive_lifecycle():
    drop, _ = _drop_with_designs(3)
    PackFactory(drop=drop)
    publish_drop(drop=drop)
    assert drop.status == Drop.STATUS_PUBLISHED
    published_at = drop.published_at
    assert published_at is not None

    unpublish_drop(drop=drop)
    assert drop.status == Drop.STATUS_DRAFT
    with pytest.raises(DropError):
        unpublish_drop(drop=drop)

    archive_drop(drop=drop)
    archive_drop(drop=drop)
    assert drop.status == Drop.STATUS_ARCHIVED
    with pytest.raises(DropError):
        publish_drop(drop=drop)


def test_build_a_pack_selection_must_match_design_count():
    drop, designs = _drop_with_designs(4, published=True)
    pack = PackFactory(drop=drop, design_count=3)
    ids = [d.id for d in designs[:3]]
    assert [d.id for d in resolve_pack_selection(pack=pack, selected_design_ids=ids)] == ids

    with pytest.raises(DropError, match="Select exactly 3 designs"):
        resolve_pack_selection(pack=pack, selected_design_ids=ids[:2])
    with pytest.raises(DropError, match="Select exactly 3 designs"):
        resolve_pack_selection(pack=pack, selected_design_ids=[ids[0], ids[0], ids[1]])
    outsider = DesignFactory(creator=drop.creator)
    with pytest.raises(DropError, match="belong to this drop"):
        resolve_pack_selection(pack=pack, selected_design_ids=[ids[0], ids[1], outsider.id])


def test_full_set_ignores_selection():
    drop, designs = _drop_with_designs(3, published=True)
    pack = PackFactory(drop=drop, type=Pack.TYPE_FULL_SET, design_count=3)
    chosen = resolve_pack_selection(pack=pack, selected_design_ids=[])
    assert [d.id for d in chosen] == [d.id for d in designs]


def test_quote_pack_requires_published_drop_and_known_country():
    drop, designs = _drop_with_designs(3)
    pack = PackFactory(drop=drop, design_count=3)
    ids = [d.id for d in designs]
    with pytest.raises(DropError, match="not available"):
        quote_pack(pack=pack, selected_design_ids=ids)

    drop.status = Drop.STATUS_PUBLISHED
    drop.save()
    pack.refresh_from_db()
    with pytest.raises(DropError, match="do not ship"):
        quote_pack(pack=pack, selected_design_ids=ids, country="FR")

    chosen, quote = quote_pack(pack=pack, selected_design_ids=ids, quantity=2, country="GB")
    assert len(chosen) == 3
    assert quote.subtotal == Decimal("16.80")
    assert quote.total == Decimal("21.79")
