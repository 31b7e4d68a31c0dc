from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, cast

import redis

from flavor_quest.core.events import SessionEvent


@dataclass(frozen=True, slots=True)
class Mailbox:
    key_prefix: str
    player_id: str

    @property
    def key(self) -> str:
        return f"{self.key_prefix}:mailbox:{self.player_id}"


def publish_to_mailbox(*, r: redis.Redis, mailbox: Mailbox, fields: Mapping[str, str], maxlen: int | None = None) -> str:
    """Append an entry to a player's mailbox stream."""

    stream_id = r.xadd(mailbox.key, {str(k): str(v) for k, v in fields.items()}, maxlen=maxlen, approximate=False)
    return cast(str, stream_id)


def event_fields(event: SessionEvent) -> dict[str, str]:
    fields = {"type": event.type, "ts": event.ts.isoformat()}
    for k, v in event.payload.items():
        if isinstance(v, (list, tuple, set)):
            fields[k] = ",".join(str(x) for x in v)
        elif v is None:
            fields[k] = ""
        else:
            fields[k] = str(v)
    return fields


class MailboxPublisher:
    """Engine listener that mirrors session events into a Redis stream.

    Lets an out-of-process presentation layer follow the session with XREAD.
    TIME_CHANGED is skipped unless `include_ticks` is set, to keep the stream small.
    """

    def __init__(self, *, r: redis.Redis, mailbox: Mailbox, maxlen: int | None = 1_000, include_ticks: bool = False):
        self.r = r
        self.mailbox = mailbox
        self.maxlen = maxlen
        self.include_ticks = include_ticks

    def __call__(self, event: SessionEvent) -> None:
        if event.type == "TIME_CHANGED" and not self.include_ticks:
            return
        publish_to_mailbox(r=self.r, mailbox=self.mailbox, fields=event_fields(event), maxlen=self.maxlen)
