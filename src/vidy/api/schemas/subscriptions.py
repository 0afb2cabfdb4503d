"""Subscription API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List

from vidy.api.schemas.responses import ApiResponse, CamelModel
from vidy.api.schemas.users import OwnerSummary


class SubscriptionToggleResult(CamelModel):
    """Outcome of a subscription toggle."""

    subscribed: bool


class SubscribedUser(OwnerSummary):
    """User summary with the time the subscription started."""

    subscribed_at: datetime


class ChannelSubscribers(CamelModel):
    """Subscribers of a channel."""

    total_subscribers: int
    subscribers: List[SubscribedUser]


class SubscribedChannels(CamelModel):
    """Channels a user subscribes to."""

    total_channels: int
    channels: List[SubscribedUser]


class SubscriptionToggleResponse(ApiResponse[SubscriptionToggleResult]):
    """Response for the subscription toggle."""

    pass


class ChannelSubscribersResponse(ApiResponse[ChannelSubscribers]):
    """Response for a channel's subscriber list."""

    pass


class SubscribedChannelsResponse(ApiResponse[SubscribedChannels]):
    """Response for a user's subscribed channels."""

    pass
