# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, TypeVar, Union

from atomicwrites import atomic_write
from twisted.internet.defer import DeferredLock

from chatfolders.filters import ChatListFiltersState
from chatfolders.peers import Peer, PeerId, PeerPresence

_T = TypeVar("_T")

PeerUpdate = Callable[[Optional[Peer], Peer], Peer]


def replace_peer(  # pylint: disable=unused-argument
    previous: Optional[Peer], updated: Peer
) -> Peer:
    return updated


class Transaction(Protocol):
    def get_peer(self, peer_id: PeerId) -> Optional[Peer]:
        ...

    def get_chat_list_index(self, peer_id: PeerId) -> Optional[int]:
        ...

    def update_peers(
        self, peers: Iterable[Peer], update: PeerUpdate = replace_peer
    ) -> None:
        ...

    def update_peer_presences(self, presences: Iterable[PeerPresence]) -> None:
        ...

    def get_filters_state(self) -> ChatListFiltersState:
        ...

    def update_filters_state(
        self,
        mutator: Callable[[ChatListFiltersState], ChatListFiltersState],
    ) -> ChatListFiltersState:
        ...


class Store(Protocol):
    """
    The local peer directory and folder-filter registry.

    ``transaction`` runs a synchronous function against a consistent view
    of the store; transactions of one store never interleave.
    """

    async def transaction(self, fn: Callable[[Transaction], _T]) -> _T:
        ...


def in_chat_list(transaction: Transaction, peer_id: PeerId) -> bool:
    return transaction.get_chat_list_index(peer_id) is not None


class MemoryTransaction:
    def __init__(self, store: MemoryStore) -> None:
        self.store = store
        self.changed = False

    def get_peer(self, peer_id: PeerId) -> Optional[Peer]:
        return self.store.peers.get(peer_id)

    def get_chat_list_index(self, peer_id: PeerId) -> Optional[int]:
        return self.store.chat_list.get(peer_id)

    def update_peers(
        self, peers: Iterable[Peer], update: PeerUpdate = replace_peer
    ) -> None:
        for peer in peers:
            previous = self.store.peers.get(peer.id)
            updated = update(previous, peer)
            if updated != previous:
                self.store.peers[peer.id] = updated
                self.changed = True

    def update_peer_presences(self, presences: Iterable[PeerPresence]) -> None:
        for presence in presences:
            self.store.presences[presence.peer_id] = presence

    def get_filters_state(self) -> ChatListFiltersState:
        return self.store.filters_state

    def update_filters_state(
        self,
        mutator: Callable[[ChatListFiltersState], ChatListFiltersState],
    ) -> ChatListFiltersState:
        state = mutator(self.store.filters_state)
        if state != self.store.filters_state:
            self.store.filters_state = state
            self.changed = True
        return state


class MemoryStore:
    """
    A ``Store`` holding peers and chat-list membership in memory.

    If ``path`` is given, the folder-filter registry and the peer
    directory are loaded from that JSON file and written back to it
    whenever a transaction changes either of them. Presences and the chat
    list are never persisted.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path else None
        self.lock = DeferredLock()
        self.peers: dict[PeerId, Peer] = {}
        self.presences: dict[PeerId, PeerPresence] = {}
        self.chat_list: dict[PeerId, int] = {}
        self.filters_state = ChatListFiltersState()
        self._load()

    def _load(self) -> None:
        if self.path is None:
            return
        try:
            obj = json.loads(self.path.read_text(encoding="utf-8"))
            filters_state = ChatListFiltersState.from_json(obj)
            peers = [Peer.from_json(p) for p in obj.get("peers", [])]
        except FileNotFoundError:
            return
        except (ValueError, KeyError, TypeError) as e:
            logging.warning(
                "Ignoring unreadable folder registry %s: %s", self.path, str(e)
            )
            return
        self.filters_state = filters_state
        self.peers = {peer.id: peer for peer in peers}

    def _save(self) -> None:
        if self.path is None:
            return
        obj = self.filters_state.to_json()
        obj["peers"] = [peer.to_json() for peer in self.peers.values()]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with atomic_write(str(self.path), mode="w", overwrite=True) as f:
            f.write(json.dumps(obj, sort_keys=True))
        logging.debug("Folder registry saved to file: %s", self.path)

    async def transaction(self, fn: Callable[[Transaction], _T]) -> _T:
        await self.lock.acquire()
        try:
            transaction = MemoryTransaction(self)
            result = fn(transaction)
            if transaction.changed:
                self._save()
            return result
        finally:
            self.lock.release()

    def add_to_chat_list(self, peer_id: PeerId) -> int:
        index = self.chat_list.get(peer_id)
        if index is None:
            index = max(self.chat_list.values(), default=-1) + 1
            self.chat_list[peer_id] = index
        return index

    def remove_from_chat_list(self, peer_id: PeerId) -> None:
        self.chat_list.pop(peer_id, None)
