# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Callable, Iterable, Optional

from attrs import field, frozen

from chatfolders.peers import Peer, PeerId


@frozen
class ReconciledPeers:
    peers: tuple[Peer, ...] = field(converter=tuple)
    already_member_peer_ids: frozenset[PeerId] = field(converter=frozenset)


class PeerReconciler:
    """
    Merge groups of candidate peer ids into one ordered, de-duplicated
    list of peers and the subset of them already in the chat list.

    Ids are kept at the position of their first accepted appearance. Ids
    that ``get_peer`` cannot resolve, or whose peer ``accept`` rejects,
    are left out and may still be taken by a later group. ``is_member``
    is consulted once per kept peer, so both callables should read the
    same store transaction.
    """

    def __init__(
        self,
        get_peer: Callable[[PeerId], Optional[Peer]],
        is_member: Callable[[PeerId], bool],
    ) -> None:
        self._get_peer = get_peer
        self._is_member = is_member
        self._peers: list[Peer] = []
        self._seen: set[PeerId] = set()
        self._members: set[PeerId] = set()

    def add(
        self,
        peer_ids: Iterable[PeerId],
        accept: Optional[Callable[[Peer], bool]] = None,
    ) -> None:
        for peer_id in peer_ids:
            if peer_id in self._seen:
                continue
            peer = self._get_peer(peer_id)
            if peer is None:
                continue
            if accept is not None and not accept(peer):
                continue
            self._seen.add(peer_id)
            self._peers.append(peer)
            if self._is_member(peer_id):
                self._members.add(peer_id)

    def result(self) -> ReconciledPeers:
        return ReconciledPeers(self._peers, self._members)


def reconcile_peers(
    peer_ids: Iterable[PeerId],
    get_peer: Callable[[PeerId], Optional[Peer]],
    is_member: Callable[[PeerId], bool],
    accept: Optional[Callable[[Peer], bool]] = None,
) -> ReconciledPeers:
    reconciler = PeerReconciler(get_peer, is_member)
    reconciler.add(peer_ids, accept)
    return reconciler.result()
