from decimal import Decimal

import factory
from creators.tests.factories import CreatorFactory
from designs.tests.factories import DesignFactory
from django.utils import timezone
from drops.models import Drop, DropDesign, Pack
from factory.django import DjangoModelFactory


class DropFactory(DjangoModelFactory):
    class Meta:
        model = Drop

    creator = factory.SubFactory(CreatorFactory)
    title = factory.Sequence(lambda n: f"Chaos Drop {n}")
    slug = factory.Sequence(lambda n: f"chaos-drop-{n}")
    description = factory.Faker("sentence")

    class Params:
        published = factory.Trait(
            status=Drop.STATUS_PUBLISHED,
            published_at=factory.LazyFunction(timezone.now),
        )


class DropDesignFactory(DjangoModelFactory):
    class Meta:
        model = DropDesign

    drop = factory.SubFactory(DropFactory)
    design = factory.SubFactory(DesignFactory, creator=factory.SelfAttribute("..drop.creator"))
    display_order = factory.Sequence(lambda n: n)


class PackFactory(DjangoModelFactory):
    class Meta:
        model = Pack

    drop = factory.SubFactory(DropFactory)
    type = Pack.TYPE_BUILD_A_PACK
    name = "Pick 3 Pack"
    design_count = 3
    price = Decimal("8.40")
