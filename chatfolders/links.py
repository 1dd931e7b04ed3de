# -*- coding: utf-8 -*-
from __future__ import annotations

from enum import IntFlag
from typing import Optional, Sequence

from attrs import field, frozen

from chatfolders.peers import Peer, PeerId

FOLDER_LINK_PREFIX = "https://t.me/folder/"


def extract_slug(link: str) -> str:
    """
    Return the server-assigned token of a folder invite link.

    Links that do not start with ``FOLDER_LINK_PREFIX`` are assumed to be
    a bare slug already and are returned unchanged.
    """
    while link.startswith(FOLDER_LINK_PREFIX):
        link = link[len(FOLDER_LINK_PREFIX) :]
    return link


class EditFlags(IntFlag):
    """
    Which optional fields of an edit request are present. A field whose
    bit is unset is left unchanged by the server.
    """

    REVOKE = 1 << 0
    TITLE = 1 << 1
    PEERS = 1 << 2

    @classmethod
    def build(
        cls,
        title: Optional[str] = None,
        peer_ids: Optional[Sequence[PeerId]] = None,
        revoke: bool = False,
    ) -> EditFlags:
        flags = cls(0)
        if revoke:
            flags |= cls.REVOKE
        if title is not None:
            flags |= cls.TITLE
        if peer_ids is not None:
            flags |= cls.PEERS
        return flags


@frozen
class FolderLink:
    title: str
    link: str
    peer_ids: tuple[PeerId, ...] = field(converter=tuple)
    is_revoked: bool = False

    @property
    def slug(self) -> str:
        return extract_slug(self.link)


@frozen
class FolderLinkContents:
    """
    What a folder invite link offers, reconciled against the local store.

    :ivar local_filter_id: The id of the local folder the link was already
        joined into, or ``None`` if it has not been joined.

    :ivar already_member_peer_ids: The ids of those ``peers`` that are in
        the local chat list already.
    """

    local_filter_id: Optional[int]
    title: Optional[str]
    peers: tuple[Peer, ...] = field(converter=tuple)
    already_member_peer_ids: frozenset[PeerId] = field(
        factory=frozenset, converter=frozenset
    )

    def __attrs_post_init__(self) -> None:
        unknown = self.already_member_peer_ids - {p.id for p in self.peers}
        if unknown:
            raise ValueError(
                "already_member_peer_ids contains ids not in peers: "
                + ", ".join(sorted(str(i) for i in unknown))
            )


@frozen
class PendingFolderUpdate:
    missing_peers: tuple[PeerId, ...] = field(converter=tuple)
    chats: tuple[Peer, ...] = field(default=(), converter=tuple)
    users: tuple[Peer, ...] = field(default=(), converter=tuple)

    @property
    def available_chats_to_join(self) -> int:
        return len(self.missing_peers)

    def peers(self) -> list[Peer]:
        """
        Return the missing peers that the bundled chats and users describe,
        in the order the server listed them.
        """
        known = {peer.id: peer for peer in (*self.chats, *self.users)}
        return [known[i] for i in self.missing_peers if i in known]
