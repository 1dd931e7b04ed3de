#!/usr/bin/env python
# -*- coding: utf-8 -*-

import argparse
import sys
from typing import Optional, Sequence

from twisted.internet.defer import Deferred
from twisted.internet.task import react

from chatfolders import APP_NAME
from chatfolders import __doc__ as description
from chatfolders import __version__, settings
from chatfolders.errors import (
    ChatFoldersError,
    ConfigError,
    PeersNotFoundError,
)
from chatfolders.links import FolderLink, FolderLinkContents
from chatfolders.log import initialize_logger
from chatfolders.peers import PeerId
from chatfolders.service import FolderLinkService
from chatfolders.util import humanized_list


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatfolders", description=description
    )
    parser.add_argument(
        "--debug", action="store_true", help="Print debug messages to STDOUT."
    )
    parser.add_argument("--api-url", help="Base URL of the folder API.")
    parser.add_argument(
        "--store", help="JSON file holding the local folder registry."
    )
    parser.add_argument(
        "-V", "--version", action="version", version="%(prog)s " + __version__
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Show what a link offers.")
    check.add_argument("link")

    list_ = subparsers.add_parser("list", help="List a folder's links.")
    list_.add_argument("folder_id", type=int)

    export = subparsers.add_parser("export", help="Create a folder link.")
    export.add_argument("folder_id", type=int)
    export.add_argument("title")
    export.add_argument(
        "peers",
        nargs="*",
        type=PeerId.parse,
        help="Chats to offer; defaults to the shareable chats of the folder.",
    )

    delete = subparsers.add_parser("delete", help="Delete a folder link.")
    delete.add_argument("folder_id", type=int)
    delete.add_argument("link")

    join = subparsers.add_parser("join", help="Join chats via a link.")
    join.add_argument("link")
    join.add_argument("peers", nargs="+", type=PeerId.parse)

    updates = subparsers.add_parser(
        "updates", help="Show chats added to a joined folder."
    )
    updates.add_argument("folder_id", type=int)

    hide_updates = subparsers.add_parser(
        "hide-updates", help="Stop suggesting a folder's new chats."
    )
    hide_updates.add_argument("folder_id", type=int)
    return parser


def format_link(link: FolderLink) -> str:
    state = " (revoked)" if link.is_revoked else ""
    return f"{link.link}  {link.title}  [{len(link.peer_ids)} chats]{state}"


def format_contents(contents: FolderLinkContents) -> str:
    lines = [f"Folder: {contents.title or '(untitled)'}"]
    if contents.local_filter_id is not None:
        lines.append(f"Already joined as folder {contents.local_filter_id}")
    for peer in contents.peers:
        mark = "*" if peer.id in contents.already_member_peer_ids else " "
        lines.append(f" {mark} {peer.id}  {peer.title}")
    return "\n".join(lines)


async def run_command(
    service: FolderLinkService, args: argparse.Namespace
) -> None:
    if args.command == "check":
        print(format_contents(await service.check_link(args.link)))
    elif args.command == "list":
        links = await service.get_links(args.folder_id)
        if links is None:
            print("Links could not be retrieved")
        else:
            for link in links:
                print(format_link(link))
    elif args.command == "export":
        if args.peers:
            peer_ids = await service.addressable_peers(args.peers)
            if not peer_ids:
                raise PeersNotFoundError(
                    "None of the given chats are known; run 'list' or "
                    "'check' first"
                )
            link = await service.export_link(
                args.folder_id, args.title, peer_ids
            )
        else:
            link = await service.export_folder(args.folder_id, args.title)
        print(format_link(link))
    elif args.command == "delete":
        await service.delete_link(
            args.folder_id, FolderLink(title="", link=args.link, peer_ids=())
        )
        print("Deleted")
    elif args.command == "join":
        # Checking first fills the peer directory with the offered chats.
        contents = await service.check_link(args.link)
        offered = {peer.id for peer in contents.peers}
        peer_ids = await service.addressable_peers(
            [p for p in args.peers if p in offered]
        )
        if not peer_ids:
            raise PeersNotFoundError(
                "The link does not offer any of the given chats"
            )
        await service.join_link(args.link, peer_ids)
        print(f"Joined {humanized_list([str(p) for p in peer_ids])}")
    elif args.command == "updates":
        update = await service.get_updates(args.folder_id)
        if update is None:
            print("No updates available")
        else:
            print(f"{update.available_chats_to_join} chats available to join")
            for peer in update.peers():
                print(f"   {peer.id}  {peer.title}")
    elif args.command == "hide-updates":
        await service.hide_updates(args.folder_id)
    else:
        raise ValueError(f"Unknown command {args.command!r}")


async def _run(service: FolderLinkService, args: argparse.Namespace) -> None:
    try:
        await run_command(service, args)
    except ChatFoldersError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        raise SystemExit(1) from e


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    initialize_logger(to_stdout=args.debug)

    run_settings = {section: dict(d) for section, d in settings.items()}
    if args.api_url:
        run_settings.setdefault("api", {})["url"] = args.api_url
    if args.store:
        run_settings.setdefault("store", {})["path"] = args.store
    try:
        service = FolderLinkService.from_settings(run_settings)
    except ConfigError as e:
        sys.exit(f"ERROR: {APP_NAME} is not configured: {e}")

    react(lambda _: Deferred.fromCoroutine(_run(service, args)))


if __name__ == "__main__":
    main()
