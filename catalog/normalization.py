"""Build catalog resources from chat messages.

Every embed on a message contributes a fragment of the form
``|url: <url> + <title> + <description>`` to the resource description.
The url of the resource is the one of the last embed. Both are lowercased
and trimmed, and the description is fingerprinted so duplicates can be
spotted later.
"""

import hashlib
import logging
from typing import Optional

from catalog.config import settings
from catalog.errors import MalformedEmbedError
from catalog.models import EMBED_RESOURCE_TYPE_ID, ChatMessage, Embed, Resource

logger = logging.getLogger(__name__)

URL_DELIMITER = "|url: "
FIELD_SEPARATOR = " + "

MALFORMED_REJECT = "reject"
MALFORMED_SKIP = "skip"
MALFORMED_POLICIES = (MALFORMED_REJECT, MALFORMED_SKIP)


def normalize_text(text: str) -> str:
    """Lowercase and strip surrounding whitespace."""
    return text.lower().strip()


def fingerprint(text: str) -> str:
    """Stable 64-bit fingerprint of text, as a decimal string."""
    digest = hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest()
    return str(int.from_bytes(digest, "big"))


def _embed_fragment(url: str, embed: Embed) -> str:
    return f"{URL_DELIMITER}{url}{FIELD_SEPARATOR}{embed.title}{FIELD_SEPARATOR}{embed.description}"


def build_resource(message: ChatMessage, on_malformed: Optional[str] = None) -> Resource:
    """Turn a chat message into a Resource ready for insertion.

    Args:
        message: Message with zero or more embeds.
        on_malformed: "reject" raises MalformedEmbedError for an embed that
            lacks title, description or url; "skip" drops that embed.
            Defaults to settings.EMBED_MALFORMED_POLICY.

    A message without (usable) embeds yields empty url and description,
    which the store refuses to insert.
    """
    policy = on_malformed or settings.EMBED_MALFORMED_POLICY
    if policy not in MALFORMED_POLICIES:
        raise ValueError(f"Unknown malformed embed policy: {policy}")

    url = ""
    description = ""
    for index, embed in enumerate(message.embeds):
        missing = embed.missing_fields()
        if missing:
            if policy == MALFORMED_REJECT:
                raise MalformedEmbedError(index, missing)
            logger.warning(
                f"Skipping embed #{index} of channel {message.channel_id}: "
                f"missing {', '.join(missing)}"
            )
            continue

        url = normalize_text(embed.url)
        description += _embed_fragment(url, embed)

    description = normalize_text(description)

    return Resource(
        user_id=message.author.id,
        channel_id=message.channel_id,
        url=url,
        description=description,
        shash=fingerprint(description),
        type_id=EMBED_RESOURCE_TYPE_ID,
    )
