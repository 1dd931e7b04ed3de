# -*- coding: utf-8 -*-
import logging
from typing import Protocol

from chatfolders.types_ import UpdatesPayload


class UpdateSink(Protocol):
    """
    The account's update-processing pipeline. Joining a folder returns a
    state-update payload that must be applied through it.
    """

    def add_updates(self, payload: UpdatesPayload) -> None:
        ...


class LoggingUpdateSink:
    """
    Record received payloads and log them instead of applying them. Used
    when no update pipeline is attached, e.g. from the command line.
    """

    def __init__(self) -> None:
        self.received: list[UpdatesPayload] = []

    def add_updates(self, payload: UpdatesPayload) -> None:
        self.received.append(payload)
        logging.info(
            "Received updates payload with keys: %s",
            ", ".join(sorted(payload)) or "(none)",
        )
