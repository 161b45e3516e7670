from decimal import Decimal

import factory
from designs.tests.factories import DesignFactory
from factory.django import DjangoModelFactory
from orders.models import Order, OrderItem


class OrderFactory(DjangoModelFactory):
    class Meta:
        model = Order

    email = factory.Faker("email")
    number = factory.Sequence(lambda n: f"CS-{n:06d}")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    country = "US"
    region = "CA"
    address1 = "1 Market St"
    city = "San Francisco"
    zip = "94105"
    subtotal = Decimal("20.00")
    total = Decimal("20.00")


class OrderItemFactory(DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    design = factory.SubFactory(DesignFactory)
    image_url = factory.SelfAttribute("design.image_url")
    quantity = 2
    unit_price = Decimal("10.00")


def shipping_details(**overrides):
    details = {
        "firstName": "Sam",
        "lastName": "Rivera",
        "email": "sam@example.com",
        "phone": "",
        "country": "US",
        "region": "CA",
        "address1": "1 Market St",
        "address2": "",
        "city": "San Francisco",
        "zip": "94105",
    }
    details.update(overrides)
    return details
