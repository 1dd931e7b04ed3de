# -*- coding: utf-8 -*-
from __future__ import annotations

from enum import Enum
from typing import Optional

# Server error descriptions with a dedicated meaning. These are the only
# wire strings inspected anywhere in the package.
INVITES_TOO_MUCH = "INVITES_TOO_MUCH"
DIALOG_FILTERS_TOO_MUCH = "DIALOG_FILTERS_TOO_MUCH"


class ChatFoldersError(Exception):
    pass


class ConfigError(ChatFoldersError):
    pass


class TransportError(ChatFoldersError):
    """
    A remote call failed.

    :ivar description: The machine-readable error string reported by the
        server (for example ``"INVITES_TOO_MUCH"``), or a synthetic one
        such as ``"HTTP_502"`` when the server did not supply one.

    :ivar code: The HTTP status code, if the failure came with one.
    """

    def __init__(self, description: str, code: Optional[int] = None) -> None:
        super().__init__(description)
        self.description = description
        self.code = code


class FolderNotFoundError(ChatFoldersError):
    pass


class PeersNotFoundError(ChatFoldersError):
    pass


class ExportFolderLinkError(Enum):
    GENERIC = "generic"
    LIMIT_EXCEEDED = "limit_exceeded"


class JoinFolderLinkError(Enum):
    GENERIC = "generic"
    LIMIT_EXCEEDED = "limit_exceeded"


class EditFolderLinkError(Enum):
    GENERIC = "generic"


class RevokeFolderLinkError(Enum):
    GENERIC = "generic"


class CheckFolderLinkError(Enum):
    GENERIC = "generic"


class FolderLinkError(ChatFoldersError):
    def __init__(self, error: Enum) -> None:
        super().__init__(error.value)
        self.error = error


class ExportFolderLinkFailed(FolderLinkError):
    error: ExportFolderLinkError


class JoinFolderLinkFailed(FolderLinkError):
    error: JoinFolderLinkError


class EditFolderLinkFailed(FolderLinkError):
    error: EditFolderLinkError


class RevokeFolderLinkFailed(FolderLinkError):
    error: RevokeFolderLinkError


class CheckFolderLinkFailed(FolderLinkError):
    error: CheckFolderLinkError


def error_description(exc: BaseException) -> str:
    description = getattr(exc, "description", "")
    if isinstance(description, str):
        return description
    return ""


def classify_export_error(exc: BaseException) -> ExportFolderLinkError:
    if error_description(exc) == INVITES_TOO_MUCH:
        return ExportFolderLinkError.LIMIT_EXCEEDED
    return ExportFolderLinkError.GENERIC


def classify_join_error(exc: BaseException) -> JoinFolderLinkError:
    if error_description(exc) == DIALOG_FILTERS_TOO_MUCH:
        return JoinFolderLinkError.LIMIT_EXCEEDED
    return JoinFolderLinkError.GENERIC


def classify_edit_error(  # pylint: disable=unused-argument
    exc: BaseException,
) -> EditFolderLinkError:
    return EditFolderLinkError.GENERIC


def classify_revoke_error(  # pylint: disable=unused-argument
    exc: BaseException,
) -> RevokeFolderLinkError:
    return RevokeFolderLinkError.GENERIC


def classify_check_error(  # pylint: disable=unused-argument
    exc: BaseException,
) -> CheckFolderLinkError:
    return CheckFolderLinkError.GENERIC
