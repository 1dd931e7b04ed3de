# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Optional, Sequence

from chatfolders.api import HttpTransport, Transport
from chatfolders.client import InviteLinkClient
from chatfolders.config import (
    Settings,
    get_api_timeout,
    get_api_token,
    get_api_url,
    get_store_path,
)
from chatfolders.errors import FolderNotFoundError
from chatfolders.links import (
    FolderLink,
    FolderLinkContents,
    PendingFolderUpdate,
    extract_slug,
)
from chatfolders.peers import PeerId, can_share_link_to_peer
from chatfolders.store import MemoryStore, Store, Transaction
from chatfolders.updates import LoggingUpdateSink, UpdateSink


class FolderLinkService:
    """
    The entry point applications use to share folders through invite
    links, inspect and join links shared by others, and catch up with
    chats added to folders that were joined before.
    """

    def __init__(
        self, transport: Transport, store: Store, update_sink: UpdateSink
    ) -> None:
        self.store = store
        self.client = InviteLinkClient(transport, store, update_sink)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: Optional[Store] = None,
        update_sink: Optional[UpdateSink] = None,
    ) -> FolderLinkService:
        transport = HttpTransport(
            get_api_url(settings),
            token=get_api_token(settings),
            timeout=get_api_timeout(settings),
        )
        if store is None:
            store = MemoryStore(get_store_path(settings))
        if update_sink is None:
            update_sink = LoggingUpdateSink()
        return cls(transport, store, update_sink)

    async def addressable_peers(
        self, peer_ids: Sequence[PeerId]
    ) -> list[PeerId]:
        """
        Return those of ``peer_ids`` that the local peer directory can turn
        into a remote reference, keeping their order.
        """

        def read(transaction: Transaction) -> list[PeerId]:
            found = []
            for peer_id in peer_ids:
                peer = transaction.get_peer(peer_id)
                if peer is not None and peer.input_peer() is not None:
                    found.append(peer_id)
            return found

        return await self.store.transaction(read)

    async def export_link(
        self, filter_id: int, title: str, peer_ids: Sequence[PeerId]
    ) -> FolderLink:
        logging.debug("Exporting link for folder %i...", filter_id)
        link = await self.client.export(filter_id, title, peer_ids)
        logging.debug("Exported link for folder %i", filter_id)
        return link

    async def export_folder(
        self, filter_id: int, title: Optional[str] = None
    ) -> FolderLink:
        """
        Export a link to an existing local folder, offering every chat of
        the folder that may be shared.

        :param title: The title of the link; defaults to the folder's.
        """

        def read(
            transaction: Transaction,
        ) -> Optional[tuple[str, list[PeerId]]]:
            folder = transaction.get_filters_state().get_filter(filter_id)
            if folder is None:
                return None
            shareable = []
            for peer_id in folder.include_peers:
                peer = transaction.get_peer(peer_id)
                if peer is not None and can_share_link_to_peer(peer):
                    shareable.append(peer_id)
            return folder.title, shareable

        found = await self.store.transaction(read)
        if found is None:
            raise FolderNotFoundError(f"Folder {filter_id} does not exist")
        folder_title, peer_ids = found
        return await self.export_link(
            filter_id, title if title is not None else folder_title, peer_ids
        )

    async def get_links(self, filter_id: int) -> Optional[list[FolderLink]]:
        return await self.client.list_links(filter_id)

    async def edit_link(  # pylint: disable=too-many-arguments
        self,
        filter_id: int,
        link: FolderLink,
        title: Optional[str] = None,
        peer_ids: Optional[Sequence[PeerId]] = None,
        revoke: bool = False,
    ) -> FolderLink:
        logging.debug("Editing link %s...", link.slug)
        edited = await self.client.edit(
            filter_id, link, title=title, peer_ids=peer_ids, revoke=revoke
        )
        logging.debug("Edited link %s", link.slug)
        return edited

    async def revoke_link(
        self, filter_id: int, link: FolderLink
    ) -> FolderLink:
        return await self.edit_link(filter_id, link, revoke=True)

    async def delete_link(self, filter_id: int, link: FolderLink) -> None:
        logging.debug("Deleting link %s...", link.slug)
        await self.client.delete(filter_id, link)
        logging.debug("Deleted link %s", link.slug)

    async def check_link(self, link: str) -> FolderLinkContents:
        """
        Look up what a folder link offers. ``link`` may be a full
        ``https://t.me/folder/...`` URL or a bare slug.
        """
        return await self.client.check(extract_slug(link))

    async def join_link(self, link: str, peer_ids: Sequence[PeerId]) -> None:
        slug = extract_slug(link)
        logging.debug("Joining %i chats via link %s...", len(peer_ids), slug)
        await self.client.join(slug, peer_ids)
        logging.debug("Joined link %s", slug)

    async def get_updates(
        self, filter_id: int
    ) -> Optional[PendingFolderUpdate]:
        return await self.client.get_updates(filter_id)

    async def join_available(
        self, filter_id: int, peer_ids: Sequence[PeerId]
    ) -> None:
        logging.debug(
            "Joining %i new chats of folder %i...", len(peer_ids), filter_id
        )
        await self.client.join_available(filter_id, peer_ids)
        logging.debug("Joined new chats of folder %i", filter_id)

    async def hide_updates(self, filter_id: int) -> None:
        await self.client.hide_updates(filter_id)
