"""
VOE command line - run one API operation and print its result as JSON.

Examples::

    voe account-info
    voe file-list --page 2 --per-page 50
    voe file-info abc123 def456
    voe upload ./movie.mp4
    voe --config config/voe.yaml --log-level DEBUG folder-create "Backups"

Credentials come from ``--config``, ``.env`` or ``VOE_API_KEY``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from voe.api.exceptions import VoeError
from voe.client import VoeClient
from voe.core.logger import setup_logging


def _list_params(args: argparse.Namespace) -> Dict[str, Any]:
    keys = ("page", "per_page", "fld_id", "created", "name", "preview", "last", "pending")
    return {k: getattr(args, k) for k in keys if getattr(args, k, None) is not None}


async def _dispatch(voe: VoeClient, args: argparse.Namespace) -> Any:
    cmd = args.command
    if cmd == "account-info":
        return await voe.get_account_info()
    if cmd == "account-stats":
        return await voe.get_account_stats()
    if cmd == "upload-server":
        return await voe.get_upload_server()
    if cmd == "upload":
        return await voe.upload_file(args.path, args.filename or Path(args.path).name)
    if cmd == "remote-upload":
        return await voe.add_remote_upload(args.url, args.folder_id)
    if cmd == "remote-upload-list":
        return await voe.get_remote_upload_list()
    if cmd == "file-clone":
        return await voe.clone_file(args.file_code, args.folder_id)
    if cmd == "file-info":
        return await voe.get_file_info(args.file_codes)
    if cmd == "file-list":
        return await voe.get_file_list(**_list_params(args))
    if cmd == "file-rename":
        return await voe.rename_file(args.file_code, args.title)
    if cmd == "file-move":
        return await voe.move_file_to_folder(args.file_code, args.folder_id)
    if cmd == "file-delete":
        return await voe.delete_file(args.file_codes)
    if cmd == "folder-list":
        return await voe.get_folder_list(args.folder_id)
    if cmd == "folder-create":
        return await voe.create_folder(args.name, args.parent_id)
    if cmd == "folder-rename":
        return await voe.rename_folder(args.folder_id, args.name)
    if cmd == "deleted-files":
        return await voe.get_deleted_files(**_list_params(args))
    if cmd == "dmca-list":
        return await voe.get_dmca_list(**_list_params(args))
    if cmd == "domain":
        return await voe.get_current_domain()
    if cmd == "premium-keys":
        return await voe.generate_premium_keys(args.days, args.amount)
    raise ValueError(f"Unknown command: {cmd}")


async def _run(args: argparse.Namespace) -> Any:
    async with VoeClient.from_env(args.config) as voe:
        return await _dispatch(voe, args)


def run(args: argparse.Namespace) -> int:
    try:
        result = asyncio.run(_run(args))
    except VoeError as e:
        print(json.dumps(e.to_dict(), indent=2, default=str), file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2, default=str))
    return 0


def _add_history_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--page", type=int, default=None)
    p.add_argument("--per-page", dest="per_page", type=int, default=None)
    p.add_argument("--last", type=int, default=None, help="Only the last N hours.")
    p.add_argument("--pending", action="store_const", const=True, default=None, help="Only pending entries.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="voe", description="VOE file-hosting API client.")
    parser.add_argument("--config", default=None, help="YAML config file (reads its voe: section).")
    parser.add_argument(
        "--log-level",
        default=os.getenv("VOE_LOG_LEVEL", "WARNING"),
        help="Log level (default: VOE_LOG_LEVEL or WARNING).",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines.")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("account-info", help="Account details.")
    sub.add_parser("account-stats", help="Daily account statistics.")
    sub.add_parser("upload-server", help="Next upload server URL.")

    p = sub.add_parser("upload", help="Upload a local file.")
    p.add_argument("path")
    p.add_argument("--filename", default=None, help="Name to upload as (default: basename).")

    p = sub.add_parser("remote-upload", help="Queue a remote URL upload.")
    p.add_argument("url")
    p.add_argument("--folder-id", dest="folder_id", type=int, default=None)

    sub.add_parser("remote-upload-list", help="Remote upload queue.")

    p = sub.add_parser("file-clone", help="Clone a file into this account.")
    p.add_argument("file_code")
    p.add_argument("--folder-id", dest="folder_id", type=int, default=None)

    p = sub.add_parser("file-info", help="Info for one or more files.")
    p.add_argument("file_codes", nargs="+")

    p = sub.add_parser("file-list", help="List files.")
    p.add_argument("--page", type=int, default=None)
    p.add_argument("--per-page", dest="per_page", type=int, default=None)
    p.add_argument("--folder-id", dest="fld_id", type=int, default=None)
    p.add_argument("--created", default=None, help="Created after (YYYY-MM-DD HH:MM:SS).")
    p.add_argument("--name", default=None, help="Filter by name.")
    p.add_argument("--preview", action="store_const", const=True, default=None, help="Include preview URLs.")

    p = sub.add_parser("file-rename", help="Rename a file.")
    p.add_argument("file_code")
    p.add_argument("title")

    p = sub.add_parser("file-move", help="Move a file to a folder.")
    p.add_argument("file_code")
    p.add_argument("folder_id", type=int)

    p = sub.add_parser("file-delete", help="Delete one or more files by delete code.")
    p.add_argument("file_codes", nargs="+")

    p = sub.add_parser("folder-list", help="List a folder (root by default).")
    p.add_argument("--folder-id", dest="folder_id", type=int, default=None)

    p = sub.add_parser("folder-create", help="Create a folder; prints its id.")
    p.add_argument("name")
    p.add_argument("--parent-id", dest="parent_id", type=int, default=None)

    p = sub.add_parser("folder-rename", help="Rename a folder.")
    p.add_argument("folder_id", type=int)
    p.add_argument("name")

    _add_history_args(sub.add_parser("deleted-files", help="Recently deleted files."))
    _add_history_args(sub.add_parser("dmca-list", help="DMCA reported files."))

    sub.add_parser("domain", help="Current adblock domain.")

    p = sub.add_parser("premium-keys", help="Generate premium keys (resellers).")
    p.add_argument("days", type=int)
    p.add_argument("amount", type=int)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level, json_output=args.json_logs)
    raise SystemExit(run(args))


if __name__ == "__main__":
    main()
