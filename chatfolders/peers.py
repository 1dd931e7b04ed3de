# -*- coding: utf-8 -*-
from __future__ import annotations

from enum import Enum
from typing import Optional

from attrs import converters, field, frozen


class PeerNamespace(Enum):
    USER = "user"
    GROUP = "group"
    CHANNEL = "channel"
    SECRET_CHAT = "secret_chat"


class AdminRight(Enum):
    CHANGE_INFO = "change_info"
    POST_MESSAGES = "post_messages"
    EDIT_MESSAGES = "edit_messages"
    DELETE_MESSAGES = "delete_messages"
    BAN_USERS = "ban_users"
    INVITE_USERS = "invite_users"
    PIN_MESSAGES = "pin_messages"
    ADD_ADMINS = "add_admins"
    MANAGE_CALL = "manage_call"
    MANAGE_TOPICS = "manage_topics"


@frozen
class PeerId:
    namespace: PeerNamespace
    id: int

    def __str__(self) -> str:
        return f"{self.namespace.value}:{self.id}"

    @classmethod
    def parse(cls, s: str) -> PeerId:
        """
        Parse the ``<namespace>:<id>`` form produced by ``str()``, for
        example ``"channel:1234"``.
        """
        namespace, _, id_ = s.partition(":")
        try:
            return cls(PeerNamespace(namespace), int(id_))
        except ValueError as e:
            raise ValueError(
                f'Invalid peer id "{s}"; expected "<namespace>:<id>"'
            ) from e

    def to_json(self) -> dict:
        return {"type": self.namespace.value, "id": self.id}

    @classmethod
    def from_json(cls, obj: dict) -> PeerId:
        return cls(PeerNamespace(obj["type"]), int(obj["id"]))


@frozen
class InputPeer:
    """
    The reference by which a peer is addressed in a remote request.
    """

    namespace: PeerNamespace
    id: int
    access_hash: Optional[int] = None

    def to_json(self) -> dict:
        obj: dict = {"type": self.namespace.value, "id": self.id}
        if self.access_hash is not None:
            obj["access_hash"] = self.access_hash
        return obj


def _to_admin_rights(value: object) -> Optional[frozenset[AdminRight]]:
    if value is None:
        return None
    return frozenset(AdminRight(v) for v in value)  # type: ignore


@frozen
class Peer:
    """
    A user, group or channel as known to the local peer directory.

    :ivar admin_rights: The administrator rights the local account holds
        in this chat, or ``None`` if it is not an administrator.
    """

    id: PeerId
    title: str = ""
    username: Optional[str] = None
    access_hash: Optional[int] = None
    is_creator: bool = False
    admin_rights: Optional[frozenset[AdminRight]] = field(
        default=None, converter=_to_admin_rights
    )

    @property
    def kind(self) -> PeerNamespace:
        return self.id.namespace

    def has_permission(self, right: AdminRight) -> bool:
        if self.is_creator:
            return True
        return self.admin_rights is not None and right in self.admin_rights

    def input_peer(self) -> Optional[InputPeer]:
        if self.kind is PeerNamespace.SECRET_CHAT:
            return None
        if self.kind is PeerNamespace.CHANNEL and self.access_hash is None:
            return None
        return InputPeer(self.id.namespace, self.id.id, self.access_hash)

    def to_json(self) -> dict:
        obj = self.id.to_json()
        obj.update(
            title=self.title,
            username=self.username,
            access_hash=self.access_hash,
            creator=self.is_creator,
        )
        if self.admin_rights is not None:
            obj["admin_rights"] = sorted(r.value for r in self.admin_rights)
        return obj

    @classmethod
    def from_json(cls, obj: dict) -> Peer:
        return cls(
            id=PeerId.from_json(obj),
            title=obj.get("title", ""),
            username=obj.get("username"),
            access_hash=obj.get("access_hash"),
            is_creator=bool(obj.get("creator", False)),
            admin_rights=obj.get("admin_rights"),
        )


@frozen
class PeerPresence:
    peer_id: PeerId
    status: str = "unknown"
    last_seen: Optional[int] = field(
        default=None, converter=converters.optional(int)
    )


def can_share_link_to_peer(peer: Peer) -> bool:
    """
    Return whether ``peer`` may be included in a shareable folder link.

    Only channels qualify: either the account administers the channel
    with the right to invite users, or the channel is public (has a
    username) and so is discoverable by anyone already.
    """
    if peer.kind is not PeerNamespace.CHANNEL:
        return False
    if peer.admin_rights is not None and peer.has_permission(
        AdminRight.INVITE_USERS
    ):
        return True
    return peer.username is not None
