from unittest.mock import Mock

import pytest
from twisted.internet.defer import fail, succeed

from chatfolders.client import InviteLinkClient
from chatfolders.errors import TransportError
from chatfolders.peers import Peer, PeerId, PeerNamespace
from chatfolders.service import FolderLinkService
from chatfolders.store import MemoryStore


def _returning(value):
    return Mock(side_effect=lambda *args, **kwargs: succeed(value))


def _failing(description):
    return Mock(
        side_effect=lambda *args, **kwargs: fail(TransportError(description))
    )


def _channel(n, **kwargs):
    kwargs.setdefault("title", f"Channel {n}")
    kwargs.setdefault("access_hash", n * 1000)
    return Peer(PeerId(PeerNamespace.CHANNEL, n), **kwargs)


def _user(n, **kwargs):
    kwargs.setdefault("title", f"User {n}")
    kwargs.setdefault("access_hash", n * 1000)
    return Peer(PeerId(PeerNamespace.USER, n), **kwargs)


@pytest.fixture()
def returning():
    """
    Make a fake transport method whose Deferred fires with the given value.
    """
    return _returning


@pytest.fixture()
def failing():
    """
    Make a fake transport method that fails with a TransportError carrying
    the given description.
    """
    return _failing


@pytest.fixture()
def make_channel():
    return _channel


@pytest.fixture()
def make_user():
    return _user


@pytest.fixture()
def transport():
    return Mock()


@pytest.fixture()
def update_sink():
    return Mock()


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def client(transport, store, update_sink):
    return InviteLinkClient(transport, store, update_sink)


@pytest.fixture()
def service(transport, store, update_sink):
    return FolderLinkService(transport, store, update_sink)
