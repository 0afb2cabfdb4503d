"""Tweet (community post) endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidy.api.deps import ensure_owner, get_current_user, get_db, get_or_404
from vidy.api.routers.responses import (
    CREATE_ERRORS,
    DELETE_ERRORS,
    GET_ITEM_ERRORS,
    LIST_ERRORS,
    UPDATE_ERRORS,
)
from vidy.api.schemas.tweets import (
    TweetContentRequest,
    TweetFeedItem,
    TweetFeedResponse,
    TweetOut,
    TweetResponse,
)
from vidy.db.models import Tweet, User
from vidy.models.tweet import TweetCreate, TweetUpdate
from vidy.models.validation import ensure_not_blank, ensure_valid_id
from vidy.repositories.tweet_repository import TweetRepository
from vidy.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()

tweet_repository = TweetRepository()
user_repository = UserRepository()


@router.post(
    "/tweets",
    response_model=TweetResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CREATE_ERRORS,
)
async def create_tweet(
    payload: TweetContentRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> TweetResponse:
    """Post a tweet as the requester."""
    content = ensure_not_blank(payload.content, "content")
    tweet = await tweet_repository.create(
        session, obj_in=TweetCreate(content=content, owner_id=current_user.id)
    )
    return TweetResponse(
        data=TweetOut.model_validate(tweet), message="Tweet created successfully"
    )


@router.get("/tweets/feed", response_model=TweetFeedResponse, responses=LIST_ERRORS)
async def get_tweet_feed(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> TweetFeedResponse:
    """All tweets, newest first, with engagement counts for the requester."""
    items = await tweet_repository.list_feed(session, viewer_id=current_user.id)
    return TweetFeedResponse(
        data=[TweetFeedItem.model_validate(item) for item in items],
        message="Tweets fetched successfully",
    )


@router.get(
    "/tweets/user/{user_id}", response_model=TweetFeedResponse, responses=GET_ITEM_ERRORS
)
async def get_user_tweets(
    user_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> TweetFeedResponse:
    """Tweets of one user, newest first."""
    user_id = ensure_valid_id(user_id, "userId")
    await get_or_404(user_repository, session, user_id, "User")

    items = await tweet_repository.list_feed(
        session, viewer_id=current_user.id, owner_id=user_id
    )
    return TweetFeedResponse(
        data=[TweetFeedItem.model_validate(item) for item in items],
        message="User tweets fetched successfully",
    )


@router.patch("/tweets/{tweet_id}", response_model=TweetResponse, responses=UPDATE_ERRORS)
async def update_tweet(
    tweet_id: str,
    payload: TweetContentRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> TweetResponse:
    """Edit the content of a tweet the requester owns."""
    tweet_id = ensure_valid_id(tweet_id, "tweetId")
    content = ensure_not_blank(payload.content, "content")

    tweet: Tweet = await get_or_404(tweet_repository, session, tweet_id, "Tweet")
    ensure_owner(tweet.owner_id, current_user, "Tweet")

    tweet = await tweet_repository.update(
        session, db_obj=tweet, obj_in=TweetUpdate(content=content)
    )
    return TweetResponse(
        data=TweetOut.model_validate(tweet), message="Tweet updated successfully"
    )


@router.delete("/tweets/{tweet_id}", response_model=TweetResponse, responses=DELETE_ERRORS)
async def delete_tweet(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> TweetResponse:
    """Delete a tweet the requester owns, with its comments and likes."""
    tweet_id = ensure_valid_id(tweet_id, "tweetId")
    tweet: Tweet = await get_or_404(tweet_repository, session, tweet_id, "Tweet")
    ensure_owner(tweet.owner_id, current_user, "Tweet")

    deleted = TweetOut.model_validate(tweet)
    await tweet_repository.delete_with_dependents(session, tweet)
    logger.info("User %s deleted tweet %s", current_user.id, tweet_id)
    return TweetResponse(data=deleted, message="Tweet deleted successfully")
