"""
TFS admin tool

Loads local files into the cluster and creates symbolic links. Must run on the
master host: bytes are written straight into the master's under-storage root,
metadata goes through the master API.

Usage:
    python scripts/tfs_admin.py load ./report.pdf /reports/2024/report.pdf
    python scripts/tfs_admin.py symlink /reports/latest.pdf /reports/2024/report.pdf
"""
import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from client.master_client import MasterClient
from shared import config
from shared.exceptions import TfsError, TransferError
from shared.types import ClientFileInfo
from shared.logging_config import setup_logging
from worker.block_store import BlockStore


def load_file(master, store: BlockStore, local_file: str, path: str) -> ClientFileInfo:
    """
    Register `path` with the master, then copy `local_file` into under storage.

    Nothing is written when the master refuses the path, so an existing file
    keeps both its bytes and its metadata.

    Raises:
        FileAlreadyExistsError: the path is already taken
        InvalidPathError: the master rejected the path
        TransferError: the copied bytes do not match the registered length
    """
    length = os.path.getsize(local_file)
    info = master.create_file(path, length)
    with open(local_file, "rb") as f:
        written = store.put(info.path, f)
    if written != info.length:
        store.remove(info.path)
        raise TransferError(f"{local_file} changed while loading: registered {info.length} bytes, wrote {written}")
    return info


def cmd_load(args, master: MasterClient) -> None:
    store = BlockStore(args.underfs_root, args.cache_root)
    info = load_file(master, store, args.local_file, args.path)
    print(f"Loaded {args.local_file} -> {info.path} ({info.length} bytes)")


def cmd_symlink(args, master: MasterClient) -> None:
    info = master.create_symlink(args.path, args.target)
    print(f"Linked {info.path} -> {args.target}")


def main() -> int:
    parser = argparse.ArgumentParser(description="TFS admin tool")
    parser.add_argument("--master-url", default=config.MASTER_BASE_URL)
    parser.add_argument("--underfs-root", default=config.UNDERFS_ROOT)
    parser.add_argument("--cache-root", default=config.CACHE_ROOT)
    sub = parser.add_subparsers(dest="command", required=True)

    load = sub.add_parser("load", help="Copy a local file into the cluster")
    load.add_argument("local_file")
    load.add_argument("path")
    load.set_defaults(func=cmd_load)

    link = sub.add_parser("symlink", help="Create a symbolic link")
    link.add_argument("path")
    link.add_argument("target")
    link.set_defaults(func=cmd_symlink)

    args = parser.parse_args()
    setup_logging("admin", level=config.LOG_LEVEL)
    try:
        args.func(args, MasterClient(args.master_url))
    except TfsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
