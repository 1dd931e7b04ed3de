import pytest

from chatfolders.peers import (
    AdminRight,
    InputPeer,
    Peer,
    PeerId,
    PeerNamespace,
    PeerPresence,
    can_share_link_to_peer,
)


def channel(**kwargs):
    return Peer(PeerId(PeerNamespace.CHANNEL, 1), access_hash=10, **kwargs)


def test_peer_id_str():
    assert str(PeerId(PeerNamespace.CHANNEL, 42)) == "channel:42"


def test_peer_id_parse():
    assert PeerId.parse("secret_chat:7") == PeerId(
        PeerNamespace.SECRET_CHAT, 7
    )


@pytest.mark.parametrize("s", ["", "42", "channel", "channel:x", "bot:1"])
def test_peer_id_parse_invalid(s):
    with pytest.raises(ValueError):
        PeerId.parse(s)


def test_peer_id_json():
    peer_id = PeerId(PeerNamespace.GROUP, 5)
    assert peer_id.to_json() == {"type": "group", "id": 5}
    assert PeerId.from_json({"type": "group", "id": "5"}) == peer_id


def test_peer_ids_are_hashable_by_value():
    a = PeerId(PeerNamespace.USER, 1)
    b = PeerId(PeerNamespace.USER, 1)
    assert {a: "x"}[b] == "x"


def test_users_and_channels_with_same_number_differ():
    assert PeerId(PeerNamespace.USER, 1) != PeerId(PeerNamespace.CHANNEL, 1)


def test_admin_rights_are_converted_to_frozenset():
    peer = channel(admin_rights=["invite_users"])
    assert peer.admin_rights == frozenset([AdminRight.INVITE_USERS])


def test_has_permission_creator():
    assert channel(is_creator=True).has_permission(AdminRight.BAN_USERS)


def test_has_permission_admin_right():
    peer = channel(admin_rights=[AdminRight.INVITE_USERS])
    assert peer.has_permission(AdminRight.INVITE_USERS)
    assert not peer.has_permission(AdminRight.BAN_USERS)


def test_has_permission_not_admin():
    assert not channel().has_permission(AdminRight.INVITE_USERS)


def test_input_peer():
    assert channel().input_peer() == InputPeer(PeerNamespace.CHANNEL, 1, 10)


def test_input_peer_channel_without_access_hash():
    peer = Peer(PeerId(PeerNamespace.CHANNEL, 1))
    assert peer.input_peer() is None


def test_input_peer_group_without_access_hash():
    peer = Peer(PeerId(PeerNamespace.GROUP, 1))
    assert peer.input_peer() == InputPeer(PeerNamespace.GROUP, 1)


def test_input_peer_secret_chat():
    peer = Peer(PeerId(PeerNamespace.SECRET_CHAT, 1), access_hash=3)
    assert peer.input_peer() is None


def test_input_peer_to_json_omits_missing_access_hash():
    assert InputPeer(PeerNamespace.GROUP, 3).to_json() == {
        "type": "group",
        "id": 3,
    }


def test_input_peer_to_json():
    assert InputPeer(PeerNamespace.USER, 3, 9).to_json() == {
        "type": "user",
        "id": 3,
        "access_hash": 9,
    }


def test_presence_last_seen_converted_to_int():
    presence = PeerPresence(PeerId(PeerNamespace.USER, 1), "offline", "12")
    assert presence.last_seen == 12


@pytest.mark.parametrize(
    "peer,shareable",
    [
        (channel(admin_rights=[AdminRight.INVITE_USERS]), True),
        (channel(admin_rights=[AdminRight.BAN_USERS]), False),
        (channel(admin_rights=[AdminRight.BAN_USERS], username="x"), True),
        (channel(admin_rights=[], is_creator=True), True),
        (channel(username="public"), True),
        (channel(), False),
        (channel(is_creator=True), False),
        (Peer(PeerId(PeerNamespace.GROUP, 1), username="g"), False),
        (Peer(PeerId(PeerNamespace.USER, 1), username="u"), False),
    ],
)
def test_can_share_link_to_peer(peer, shareable):
    assert can_share_link_to_peer(peer) is shareable


def test_peer_json():
    peer = Peer(
        PeerId(PeerNamespace.CHANNEL, 1),
        title="News",
        username="news",
        access_hash=10,
        admin_rights=["pin_messages", "invite_users"],
    )
    obj = peer.to_json()
    assert obj["admin_rights"] == ["invite_users", "pin_messages"]
    assert Peer.from_json(obj) == peer


def test_peer_json_without_admin_rights():
    peer = Peer(PeerId(PeerNamespace.USER, 2), is_creator=True)
    obj = peer.to_json()
    assert "admin_rights" not in obj
    assert Peer.from_json(obj) == peer
