"""
Factory Boy factories for dispute test data.
"""

import factory

from bookings.tests.factories import BookingFactory
from disputes.models import Dispute, DisputeType


class DisputeFactory(factory.django.DjangoModelFactory):
    """Pending dispute against a confirmed booking, filed by its buyer."""

    class Meta:
        model = Dispute

    booking = factory.SubFactory(BookingFactory, confirmed=True)
    order = None
    claimant = factory.LazyAttribute(
        lambda o: o.booking.buyer if o.booking else o.order.buyer
    )
    dispute_type = DisputeType.SERVICE_NOT_DELIVERED
    reason = factory.Faker("sentence")
    amount_cents = factory.LazyAttribute(
        lambda o: o.booking.amount_cents if o.booking else o.order.total_cents
    )
