"""Model for a (single) video item."""

from __future__ import annotations

from dataclasses import dataclass, field

import shortuuid
from mashumaro import DataClassDictMixin


@dataclass(frozen=True)
class VideoItem(DataClassDictMixin):
    """Video item that can be loaded into the player."""

    title: str
    url: str
    item_id: str = field(default_factory=lambda: shortuuid.random(8).lower())
