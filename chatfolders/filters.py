# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional

from attrs import converters, evolve, field, frozen

from chatfolders.peers import PeerId


def _peer_ids_from_json(items: list) -> tuple[PeerId, ...]:
    return tuple(PeerId.from_json(item) for item in items)


@frozen
class ChatListFilter:
    """
    A chat folder: a titled selection of chats identified locally by a
    small integer.
    """

    id: int
    title: str
    include_peers: tuple[PeerId, ...] = field(default=(), converter=tuple)
    exclude_peers: tuple[PeerId, ...] = field(default=(), converter=tuple)
    pinned_peers: tuple[PeerId, ...] = field(default=(), converter=tuple)
    emoticon: Optional[str] = None

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "emoticon": self.emoticon,
            "include_peers": [p.to_json() for p in self.include_peers],
            "exclude_peers": [p.to_json() for p in self.exclude_peers],
            "pinned_peers": [p.to_json() for p in self.pinned_peers],
        }

    @classmethod
    def from_json(cls, obj: dict) -> ChatListFilter:
        return cls(
            id=int(obj["id"]),
            title=obj["title"],
            include_peers=_peer_ids_from_json(obj.get("include_peers", [])),
            exclude_peers=_peer_ids_from_json(obj.get("exclude_peers", [])),
            pinned_peers=_peer_ids_from_json(obj.get("pinned_peers", [])),
            emoticon=obj.get("emoticon"),
        )


@frozen
class ChatListFiltersState:
    """
    The local folder-filter registry.

    :ivar filters: The folders in their display order.

    :ivar remote_filters: The folders as last known to be stored on the
        server, or ``None`` if that has never been established.
    """

    filters: tuple[ChatListFilter, ...] = field(default=(), converter=tuple)
    remote_filters: Optional[tuple[ChatListFilter, ...]] = field(
        default=None, converter=converters.optional(tuple)
    )

    def get_filter(self, filter_id: int) -> Optional[ChatListFilter]:
        for filter_ in self.filters:
            if filter_.id == filter_id:
                return filter_
        return None

    def upsert_filter(self, filter_: ChatListFilter) -> ChatListFiltersState:
        filters = list(self.filters)
        for i, existing in enumerate(filters):
            if existing.id == filter_.id:
                filters[i] = filter_
                break
        else:
            filters.append(filter_)
        return evolve(self, filters=filters)

    def with_remote_synced(self) -> ChatListFiltersState:
        return evolve(self, remote_filters=self.filters)

    def to_json(self) -> dict:
        remote = None
        if self.remote_filters is not None:
            remote = [f.to_json() for f in self.remote_filters]
        return {
            "filters": [f.to_json() for f in self.filters],
            "remote_filters": remote,
        }

    @classmethod
    def from_json(cls, obj: dict) -> ChatListFiltersState:
        remote = obj.get("remote_filters")
        return cls(
            filters=[ChatListFilter.from_json(f) for f in obj["filters"]],
            remote_filters=(
                None
                if remote is None
                else [ChatListFilter.from_json(f) for f in remote]
            ),
        )
