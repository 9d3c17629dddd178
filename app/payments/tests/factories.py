"""
Factory Boy factories for payment test data.

Usage:
    from payments.tests.factories import ConnectedAccountFactory, WebhookEventFactory

    account = ConnectedAccountFactory(user=provider.user)
    event = WebhookEventFactory(event_type="account.updated", data_object={...})
"""

import factory

from authentication.tests.factories import UserFactory
from payments.models import ConnectedAccount, WebhookEvent
from payments.state_machines import OnboardingStatus, WebhookEventStatus


class ConnectedAccountFactory(factory.django.DjangoModelFactory):
    """
    Connected account that has finished onboarding.

    Pass payouts_enabled=False (or the `onboarding` trait) for an account
    still in onboarding.
    """

    class Meta:
        model = ConnectedAccount

    class Params:
        onboarding = factory.Trait(
            onboarding_status=OnboardingStatus.IN_PROGRESS,
            payouts_enabled=False,
            charges_enabled=False,
            onboarding_required=True,
        )

    user = factory.SubFactory(UserFactory)
    stripe_account_id = factory.Sequence(lambda n: f"acct_test{n:06d}")
    onboarding_status = OnboardingStatus.COMPLETE
    payouts_enabled = True
    charges_enabled = True
    onboarding_required = False


class WebhookEventFactory(factory.django.DjangoModelFactory):
    """
    Stored webhook event.

    data_object is wrapped into a Stripe-shaped payload.
    """

    class Meta:
        model = WebhookEvent

    class Params:
        data_object = factory.Dict({})

    stripe_event_id = factory.Sequence(lambda n: f"evt_test{n:06d}")
    event_type = "checkout.session.completed"
    status = WebhookEventStatus.PENDING
    payload = factory.LazyAttribute(
        lambda o: {
            "id": o.stripe_event_id,
            "type": o.event_type,
            "data": {"object": o.data_object},
        }
    )
