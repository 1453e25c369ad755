"""Factory Boy definitions for ad configuration and analytics rows."""

from __future__ import annotations

import factory

from adgate.models import AdAction, AdAnalyticsEvent, AdConfig, AdType
from tests.factories import BaseFactory


class AdConfigFactory(BaseFactory):
    class Meta:
        model = AdConfig

    id = None
    ad_type = AdType.BANNER
    ad_network_id = factory.Sequence(lambda n: f"ca-app-pub-test/{n}")
    is_active = True
    display_frequency = 1


class AdEventFactory(BaseFactory):
    class Meta:
        model = AdAnalyticsEvent

    id = None
    user_id = None
    ad_type = AdType.BANNER
    action = AdAction.IMPRESSION
    ad_network_id = "ca-app-pub-test/events"
