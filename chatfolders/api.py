# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
from typing import Callable, Optional, Protocol, TypeVar, Union

import treq
from attrs import field, frozen
from twisted.internet.defer import inlineCallbacks

from chatfolders import APP_NAME
from chatfolders.config import DEFAULT_API_TIMEOUT
from chatfolders.errors import TransportError
from chatfolders.filters import ChatListFilter
from chatfolders.links import EditFlags, FolderLink
from chatfolders.log import MultiFileLogger, NullLogger
from chatfolders.peers import InputPeer, Peer, PeerId, PeerPresence
from chatfolders.types_ import JSON, TwistedDeferred, UpdatesPayload

_T = TypeVar("_T")

# Bit 0 of an invite's flags word marks the invite as revoked.
INVITE_FLAG_REVOKED = 1 << 0


@frozen
class ExportedInvite:
    flags: int
    title: str
    url: str
    peers: tuple[PeerId, ...] = field(converter=tuple)

    def to_folder_link(self) -> FolderLink:
        return FolderLink(
            title=self.title,
            link=self.url,
            peer_ids=self.peers,
            is_revoked=bool(self.flags & INVITE_FLAG_REVOKED),
        )


@frozen
class ExportedInviteResult:
    filter: ChatListFilter
    invite: ExportedInvite


@frozen
class ExportedInvites:
    invites: tuple[ExportedInvite, ...] = field(converter=tuple)
    chats: tuple[Peer, ...] = field(default=(), converter=tuple)
    users: tuple[Peer, ...] = field(default=(), converter=tuple)
    presences: tuple[PeerPresence, ...] = field(default=(), converter=tuple)


@frozen
class CommunityInvite:
    """
    The answer to checking a link whose folder has not been joined yet.
    """

    title: str
    peers: tuple[PeerId, ...] = field(converter=tuple)
    chats: tuple[Peer, ...] = field(default=(), converter=tuple)
    users: tuple[Peer, ...] = field(default=(), converter=tuple)
    presences: tuple[PeerPresence, ...] = field(default=(), converter=tuple)


@frozen
class CommunityInviteAlready:
    """
    The answer to checking a link whose folder has been joined already;
    only the peers still missing locally are listed.
    """

    filter_id: int
    missing_peers: tuple[PeerId, ...] = field(converter=tuple)
    chats: tuple[Peer, ...] = field(default=(), converter=tuple)
    users: tuple[Peer, ...] = field(default=(), converter=tuple)
    presences: tuple[PeerPresence, ...] = field(default=(), converter=tuple)


CheckedInvite = Union[CommunityInvite, CommunityInviteAlready]


@frozen
class CommunityUpdates:
    missing_peers: tuple[PeerId, ...] = field(converter=tuple)
    chats: tuple[Peer, ...] = field(default=(), converter=tuple)
    users: tuple[Peer, ...] = field(default=(), converter=tuple)
    presences: tuple[PeerPresence, ...] = field(default=(), converter=tuple)


class Transport(Protocol):
    """
    The remote folder-invite API. Every failure is raised as a
    ``TransportError``.
    """

    async def export_invite(
        self, filter_id: int, title: str, peers: list[InputPeer]
    ) -> ExportedInviteResult:
        ...

    async def get_exported_invites(self, filter_id: int) -> ExportedInvites:
        ...

    async def edit_exported_invite(  # pylint: disable=too-many-arguments
        self,
        flags: EditFlags,
        filter_id: int,
        slug: str,
        title: Optional[str],
        peers: Optional[list[InputPeer]],
    ) -> ExportedInvite:
        ...

    async def delete_exported_invite(self, filter_id: int, slug: str) -> None:
        ...

    async def check_invite(self, slug: str) -> CheckedInvite:
        ...

    async def join_invite(
        self, slug: str, peers: list[InputPeer]
    ) -> UpdatesPayload:
        ...

    async def get_updates(self, filter_id: int) -> CommunityUpdates:
        ...

    async def join_updates(
        self, filter_id: int, peers: list[InputPeer]
    ) -> UpdatesPayload:
        ...

    async def hide_updates(self, filter_id: int) -> None:
        ...


def decode_chat(obj: dict) -> Optional[Peer]:
    """
    Decode a group or channel record. Records of any other type (for
    example chats the account has been banned from) yield ``None``.
    """
    type_ = obj.get("type")
    if type_ not in ("group", "channel"):
        return None
    return Peer.from_json(obj)


def decode_user(obj: dict) -> tuple[Peer, Optional[PeerPresence]]:
    peer_id = PeerId.from_json({"type": "user", "id": obj["id"]})
    name = " ".join(
        n for n in (obj.get("first_name"), obj.get("last_name")) if n
    )
    user = Peer(
        id=peer_id,
        title=name,
        username=obj.get("username"),
        access_hash=obj.get("access_hash"),
    )
    status = obj.get("status")
    if not status:
        return user, None
    return user, PeerPresence(
        peer_id, status=status["type"], last_seen=status.get("was_online")
    )


def _decode_peers(
    obj: dict,
) -> tuple[list[Peer], list[Peer], list[PeerPresence]]:
    chats = []
    for item in obj.get("chats", []):
        chat = decode_chat(item)
        if chat is not None:
            chats.append(chat)
    users = []
    presences = []
    for item in obj.get("users", []):
        user, presence = decode_user(item)
        users.append(user)
        if presence is not None:
            presences.append(presence)
    return chats, users, presences


def _decode_peer_ids(items: list) -> list[PeerId]:
    return [PeerId.from_json(item) for item in items]


def decode_invite(obj: dict) -> ExportedInvite:
    return ExportedInvite(
        flags=int(obj.get("flags", 0)),
        title=obj["title"],
        url=obj["url"],
        peers=_decode_peer_ids(obj.get("peers", [])),
    )


def decode_exported_invite_result(obj: dict) -> ExportedInviteResult:
    return ExportedInviteResult(
        filter=ChatListFilter.from_json(obj["filter"]),
        invite=decode_invite(obj["invite"]),
    )


def decode_exported_invites(obj: dict) -> ExportedInvites:
    chats, users, presences = _decode_peers(obj)
    return ExportedInvites(
        invites=[decode_invite(i) for i in obj.get("invites", [])],
        chats=chats,
        users=users,
        presences=presences,
    )


def decode_checked_invite(obj: dict) -> CheckedInvite:
    chats, users, presences = _decode_peers(obj)
    type_ = obj.get("type")
    if type_ == "invite":
        return CommunityInvite(
            title=obj["title"],
            peers=_decode_peer_ids(obj.get("peers", [])),
            chats=chats,
            users=users,
            presences=presences,
        )
    if type_ == "already":
        return CommunityInviteAlready(
            filter_id=int(obj["filter_id"]),
            missing_peers=_decode_peer_ids(obj.get("missing_peers", [])),
            chats=chats,
            users=users,
            presences=presences,
        )
    raise ValueError(f"Unknown invite type {type_!r}")


def decode_community_updates(obj: dict) -> CommunityUpdates:
    chats, users, presences = _decode_peers(obj)
    return CommunityUpdates(
        missing_peers=_decode_peer_ids(obj.get("missing_peers", [])),
        chats=chats,
        users=users,
        presences=presences,
    )


def _decode(decoder: Callable[[dict], _T], result: JSON) -> _T:
    if not isinstance(result, dict):
        raise TransportError("INVALID_RESPONSE")
    try:
        return decoder(result)
    except (KeyError, TypeError, ValueError) as e:
        logging.warning("Error decoding API response: %s", str(e))
        raise TransportError("INVALID_RESPONSE") from e


class HttpTransport:
    """
    A ``Transport`` speaking JSON over HTTP: each remote method is a POST
    of its parameters to ``<api_url><method>``; the reply carries either
    a ``result`` or an ``error`` description.
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_API_TIMEOUT,
        enable_logging: bool = True,
    ) -> None:
        self.api_url = api_url
        self.token = token
        self.timeout = timeout

        self.logger: Union[MultiFileLogger, NullLogger]
        if enable_logging:
            self.logger = MultiFileLogger(f"{APP_NAME}.api")
        else:
            self.logger = NullLogger()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @inlineCallbacks
    def _request(self, method: str, params: dict) -> TwistedDeferred[JSON]:
        self.logger.log("requests", f"POST {method}")
        try:
            resp = yield treq.request(
                "POST",
                f"{self.api_url}{method}",
                headers=self._headers(),
                data=json.dumps(params).encode("utf-8"),
                timeout=self.timeout,
            )
            content = yield treq.content(resp)
        except Exception as e:  # pylint: disable=broad-except
            self.logger.log("requests", f"FAILED {method}: {e!r}")
            raise TransportError("CONNECTION_FAILED") from e
        self.logger.log("requests", f"{resp.code} {method}")
        try:
            body = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        if resp.code == 200 and isinstance(body, dict):
            return body.get("result")
        description = None
        if isinstance(body, dict):
            description = body.get("error")
        if not description:
            description = f"HTTP_{resp.code}"
        raise TransportError(description, code=resp.code)

    async def export_invite(
        self, filter_id: int, title: str, peers: list[InputPeer]
    ) -> ExportedInviteResult:
        result = await self._request(
            "exportInvite",
            {
                "filter_id": filter_id,
                "title": title,
                "peers": [p.to_json() for p in peers],
            },
        )
        return _decode(decode_exported_invite_result, result)

    async def get_exported_invites(self, filter_id: int) -> ExportedInvites:
        result = await self._request(
            "getExportedInvites", {"filter_id": filter_id}
        )
        return _decode(decode_exported_invites, result)

    async def edit_exported_invite(  # pylint: disable=too-many-arguments
        self,
        flags: EditFlags,
        filter_id: int,
        slug: str,
        title: Optional[str],
        peers: Optional[list[InputPeer]],
    ) -> ExportedInvite:
        params: dict = {
            "flags": int(flags),
            "filter_id": filter_id,
            "slug": slug,
        }
        if flags & EditFlags.TITLE:
            params["title"] = title
        if flags & EditFlags.PEERS:
            params["peers"] = [p.to_json() for p in peers or []]
        result = await self._request("editExportedInvite", params)
        return _decode(decode_invite, result)

    async def delete_exported_invite(self, filter_id: int, slug: str) -> None:
        await self._request(
            "deleteExportedInvite", {"filter_id": filter_id, "slug": slug}
        )

    async def check_invite(self, slug: str) -> CheckedInvite:
        result = await self._request("checkInvite", {"slug": slug})
        return _decode(decode_checked_invite, result)

    async def join_invite(
        self, slug: str, peers: list[InputPeer]
    ) -> UpdatesPayload:
        result = await self._request(
            "joinInvite",
            {"slug": slug, "peers": [p.to_json() for p in peers]},
        )
        return _decode(dict, result)

    async def get_updates(self, filter_id: int) -> CommunityUpdates:
        result = await self._request("getUpdates", {"filter_id": filter_id})
        return _decode(decode_community_updates, result)

    async def join_updates(
        self, filter_id: int, peers: list[InputPeer]
    ) -> UpdatesPayload:
        result = await self._request(
            "joinUpdates",
            {"filter_id": filter_id, "peers": [p.to_json() for p in peers]},
        )
        return _decode(dict, result)

    async def hide_updates(self, filter_id: int) -> None:
        await self._request("hideUpdates", {"filter_id": filter_id})
