"""
Factories for API request payloads using factory_boy.

Produces the multipart form fields sent to the registration and video
upload endpoints and the JSON bodies of playlist and tweet requests, with
sensible defaults and easy per-test overrides.
"""

from __future__ import annotations

import factory
from factory import Faker, Sequence

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)

# ftyp box of an MP4 container followed by filler
MP4_BYTES = bytes.fromhex("000000186674797069736f6d0000020069736f6d69736f32") + b"\0" * 64


class RegistrationFactory(factory.DictFactory):
    """Form fields for POST /users/register."""

    fullName = Faker("name")
    username = Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@vidy.dev")
    password = "s3cret-Passw0rd"


class VideoFormFactory(factory.DictFactory):
    """Form fields for POST /videos."""

    title = Faker("sentence", nb_words=4)
    description = Faker("text", max_nb_chars=200)
    duration = Faker("random_int", min=1, max=3600)


class PlaylistPayloadFactory(factory.DictFactory):
    """JSON body for POST /playlist."""

    name = Faker("sentence", nb_words=3)
    description = Faker("text", max_nb_chars=120)


class TweetPayloadFactory(factory.DictFactory):
    """JSON body for POST /tweets."""

    content = Faker("text", max_nb_chars=140)
