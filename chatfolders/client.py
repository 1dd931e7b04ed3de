# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from functools import partial
from typing import Iterable, Optional, Sequence

from typing_extensions import assert_never

from chatfolders.api import (
    CheckedInvite,
    CommunityInvite,
    CommunityInviteAlready,
    Transport,
)
from chatfolders.errors import (
    CheckFolderLinkFailed,
    EditFolderLinkFailed,
    ExportFolderLinkFailed,
    JoinFolderLinkFailed,
    RevokeFolderLinkFailed,
    TransportError,
    classify_check_error,
    classify_edit_error,
    classify_export_error,
    classify_join_error,
    classify_revoke_error,
)
from chatfolders.links import (
    EditFlags,
    FolderLink,
    FolderLinkContents,
    PendingFolderUpdate,
)
from chatfolders.peers import (
    InputPeer,
    Peer,
    PeerId,
    PeerPresence,
    can_share_link_to_peer,
)
from chatfolders.reconcile import PeerReconciler, reconcile_peers
from chatfolders.store import Store, Transaction, in_chat_list
from chatfolders.updates import UpdateSink


def resolve_input_peers(
    transaction: Transaction, peer_ids: Iterable[PeerId]
) -> list[InputPeer]:
    """
    Map peer ids to wire references, dropping ids that are unknown to the
    local directory or that cannot be addressed remotely.
    """
    input_peers = []
    for peer_id in peer_ids:
        peer = transaction.get_peer(peer_id)
        if peer is None:
            continue
        input_peer = peer.input_peer()
        if input_peer is not None:
            input_peers.append(input_peer)
    return input_peers


def store_peers(
    transaction: Transaction,
    chats: Iterable[Peer],
    users: Iterable[Peer],
    presences: Iterable[PeerPresence],
) -> None:
    transaction.update_peers([*users, *chats])
    transaction.update_peer_presences(presences)


class InviteLinkClient:
    """
    Issue folder-invite requests and apply their results to the local
    store.

    The store is read in one transaction before a request and written in
    another after it succeeds; no transaction spans a request.
    """

    def __init__(
        self, transport: Transport, store: Store, update_sink: UpdateSink
    ) -> None:
        self.transport = transport
        self.store = store
        self.update_sink = update_sink

    async def _resolve(self, peer_ids: Sequence[PeerId]) -> list[InputPeer]:
        peer_ids = list(peer_ids)
        return await self.store.transaction(
            lambda t: resolve_input_peers(t, peer_ids)
        )

    async def export(
        self, filter_id: int, title: str, peer_ids: Sequence[PeerId]
    ) -> FolderLink:
        input_peers = await self._resolve(peer_ids)
        try:
            result = await self.transport.export_invite(
                filter_id, title, input_peers
            )
        except TransportError as exc:
            logging.warning(
                "Error exporting link for folder %i: %s",
                filter_id,
                exc.description,
            )
            raise ExportFolderLinkFailed(classify_export_error(exc)) from exc

        def apply(transaction: Transaction) -> None:
            transaction.update_filters_state(
                lambda state: state.upsert_filter(
                    result.filter
                ).with_remote_synced()
            )

        await self.store.transaction(apply)
        return result.invite.to_folder_link()

    async def list_links(self, filter_id: int) -> Optional[list[FolderLink]]:
        try:
            result = await self.transport.get_exported_invites(filter_id)
        except TransportError as exc:
            logging.warning(
                "Error listing links for folder %i: %s",
                filter_id,
                exc.description,
            )
            return None

        def apply(transaction: Transaction) -> list[FolderLink]:
            store_peers(
                transaction, result.chats, result.users, result.presences
            )
            return [invite.to_folder_link() for invite in result.invites]

        return await self.store.transaction(apply)

    async def edit(  # pylint: disable=too-many-arguments
        self,
        filter_id: int,
        link: FolderLink,
        title: Optional[str] = None,
        peer_ids: Optional[Sequence[PeerId]] = None,
        revoke: bool = False,
    ) -> FolderLink:
        flags = EditFlags.build(title, peer_ids, revoke)
        input_peers = None
        if peer_ids is not None:
            input_peers = await self._resolve(peer_ids)
        try:
            invite = await self.transport.edit_exported_invite(
                flags, filter_id, link.slug, title, input_peers
            )
        except TransportError as exc:
            logging.warning(
                "Error editing link %s: %s", link.slug, exc.description
            )
            raise EditFolderLinkFailed(classify_edit_error(exc)) from exc
        return invite.to_folder_link()

    async def delete(self, filter_id: int, link: FolderLink) -> None:
        try:
            await self.transport.delete_exported_invite(filter_id, link.slug)
        except TransportError as exc:
            logging.warning(
                "Error deleting link %s: %s", link.slug, exc.description
            )
            raise RevokeFolderLinkFailed(classify_revoke_error(exc)) from exc

    async def check(self, slug: str) -> FolderLinkContents:
        try:
            result = await self.transport.check_invite(slug)
        except TransportError as exc:
            logging.warning(
                "Error checking link %s: %s", slug, exc.description
            )
            raise CheckFolderLinkFailed(classify_check_error(exc)) from exc
        return await self.store.transaction(
            lambda t: self._reconcile_checked_invite(t, result)
        )

    @staticmethod
    def _reconcile_checked_invite(
        transaction: Transaction, result: CheckedInvite
    ) -> FolderLinkContents:
        store_peers(transaction, result.chats, result.users, result.presences)
        is_member = partial(in_chat_list, transaction)

        if isinstance(result, CommunityInvite):
            reconciled = reconcile_peers(
                result.peers, transaction.get_peer, is_member
            )
            # Membership is not reported for links that were not joined.
            return FolderLinkContents(
                local_filter_id=None,
                title=result.title,
                peers=reconciled.peers,
                already_member_peer_ids=frozenset(),
            )
        if isinstance(result, CommunityInviteAlready):
            local_filter = transaction.get_filters_state().get_filter(
                result.filter_id
            )
            reconciler = PeerReconciler(transaction.get_peer, is_member)
            reconciler.add(result.missing_peers)
            if local_filter is not None:
                reconciler.add(
                    local_filter.include_peers, accept=can_share_link_to_peer
                )
            reconciled = reconciler.result()
            return FolderLinkContents(
                local_filter_id=result.filter_id,
                title=local_filter.title if local_filter else None,
                peers=reconciled.peers,
                already_member_peer_ids=reconciled.already_member_peer_ids,
            )
        assert_never(result)

    async def join(self, slug: str, peer_ids: Sequence[PeerId]) -> None:
        input_peers = await self._resolve(peer_ids)
        try:
            updates = await self.transport.join_invite(slug, input_peers)
        except TransportError as exc:
            logging.warning(
                "Error joining link %s: %s", slug, exc.description
            )
            raise JoinFolderLinkFailed(classify_join_error(exc)) from exc
        self.update_sink.add_updates(updates)

    async def get_updates(
        self, filter_id: int
    ) -> Optional[PendingFolderUpdate]:
        try:
            result = await self.transport.get_updates(filter_id)
        except TransportError as exc:
            logging.warning(
                "Error getting updates for folder %i: %s",
                filter_id,
                exc.description,
            )
            return None
        return PendingFolderUpdate(
            missing_peers=result.missing_peers,
            chats=result.chats,
            users=result.users,
        )

    async def join_available(
        self, filter_id: int, peer_ids: Sequence[PeerId]
    ) -> None:
        input_peers = await self._resolve(peer_ids)
        try:
            updates = await self.transport.join_updates(filter_id, input_peers)
        except TransportError as exc:
            logging.warning(
                "Error joining chats of folder %i: %s",
                filter_id,
                exc.description,
            )
            raise JoinFolderLinkFailed(classify_join_error(exc)) from exc
        self.update_sink.add_updates(updates)

    async def hide_updates(self, filter_id: int) -> None:
        try:
            await self.transport.hide_updates(filter_id)
        except TransportError as exc:
            logging.warning(
                "Error hiding updates for folder %i: %s",
                filter_id,
                exc.description,
            )
