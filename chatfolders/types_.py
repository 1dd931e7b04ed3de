# mypy: allow-any-explicit
# Named "types_" so it cannot shadow the standard library "types" module.
from typing import Any, Generator, TypeVar, Union

from twisted.internet.defer import Deferred

A = TypeVar("A")

# Return annotation for generators decorated with inlineCallbacks
TwistedDeferred = Generator[Deferred[Any], Any, A]

# Decoded JSON values. The containers are left unparameterized since mypy
# cannot express the recursion.
JSON = Union[None, int, float, str, list, dict]

# The opaque state-update payload returned by a successful join. It is
# forwarded untouched to the account's update pipeline.
UpdatesPayload = dict
