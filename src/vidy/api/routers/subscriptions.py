"""Channel subscription endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import get_current_user, get_db, get_or_404
from vidy.api.routers.responses import CREATE_ERRORS, GET_ITEM_ERRORS
from vidy.api.schemas.subscriptions import (
    ChannelSubscribers,
    ChannelSubscribersResponse,
    SubscribedChannels,
    SubscribedChannelsResponse,
    SubscriptionToggleResponse,
    SubscriptionToggleResult,
)
from vidy.db.models import User
from vidy.exceptions import BadRequestError
from vidy.models.validation import ensure_valid_id
from vidy.repositories.subscription_repository import SubscriptionRepository
from vidy.repositories.user_repository import UserRepository

router = APIRouter()

subscription_repository = SubscriptionRepository()
user_repository = UserRepository()


@router.post(
    "/subscriptions/c/{channel_id}",
    response_model=SubscriptionToggleResponse,
    responses=CREATE_ERRORS,
)
async def toggle_subscription(
    channel_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> SubscriptionToggleResponse:
    """Subscribe to a channel, or unsubscribe if already subscribed."""
    channel_id = ensure_valid_id(channel_id, "channelId")
    if channel_id == current_user.id:
        raise BadRequestError(
            message="You cannot subscribe to your own channel",
            details={"field": "channelId"},
        )
    await get_or_404(user_repository, session, channel_id, "Channel")

    subscribed = await subscription_repository.toggle(
        session, subscriber_id=current_user.id, channel_id=channel_id
    )
    return SubscriptionToggleResponse(
        data=SubscriptionToggleResult(subscribed=subscribed),
        message="Subscribed successfully" if subscribed else "Unsubscribed successfully",
    )


@router.get(
    "/subscriptions/c/{channel_id}",
    response_model=ChannelSubscribersResponse,
    responses=GET_ITEM_ERRORS,
)
async def get_channel_subscribers(
    channel_id: str,
    session: AsyncSession = Depends(get_db),
) -> ChannelSubscribersResponse:
    """Subscribers of a channel, most recent first."""
    channel_id = ensure_valid_id(channel_id, "channelId")
    await get_or_404(user_repository, session, channel_id, "Channel")

    subscribers = await subscription_repository.list_subscribers(session, channel_id)
    return ChannelSubscribersResponse(
        data=ChannelSubscribers.model_validate(
            {"total_subscribers": len(subscribers), "subscribers": subscribers}
        ),
        message="Subscribers fetched successfully",
    )


@router.get(
    "/subscriptions/u/{subscriber_id}",
    response_model=SubscribedChannelsResponse,
    responses=GET_ITEM_ERRORS,
)
async def get_subscribed_channels(
    subscriber_id: str,
    session: AsyncSession = Depends(get_db),
) -> SubscribedChannelsResponse:
    """Channels a user subscribes to, most recent first."""
    subscriber_id = ensure_valid_id(subscriber_id, "subscriberId")
    await get_or_404(user_repository, session, subscriber_id, "User")

    channels = await subscription_repository.list_channels(session, subscriber_id)
    return SubscribedChannelsResponse(
        data=SubscribedChannels.model_validate(
            {"total_channels": len(channels), "channels": channels}
        ),
        message="Subscribed channels fetched successfully",
    )
