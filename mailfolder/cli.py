"""mailfolder CLI — count, list and save messages in maildir or remote IMAP folders."""
from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys

import mailfolder.config as cfg
from mailfolder.imap.connection import IMAPConnectionError
from mailfolder.imap.proxy_client import ProxyClient, ProxyError
from mailfolder.maildir.folder import MaildirFolder
from mailfolder.models.account import Account
from mailfolder.models.message import Message
from mailfolder.utils.keyring_store import delete_password, set_password

logger = logging.getLogger(__name__)


FOLDER_HELP = (
    "Maildir path or remote folder name; an existing local directory is used as a "
    "maildir, any other name without a leading / is sent to the IMAP proxy"
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mailfolder",
        description="Maildir / IMAP folder tool",
    )
    p.add_argument("--socket", default=str(cfg.PROXY_SOCKET_PATH), help="IMAP proxy socket path")
    p.add_argument("--timeout", type=float, default=cfg.PROXY_TIMEOUT_SECONDS,
                   help="Proxy timeout in seconds (default: wait forever)")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    count = sub.add_parser("count", help="Print total/unread counts")
    count.add_argument("folders", nargs="+", help=FOLDER_HELP)

    lst = sub.add_parser("list", help="List the message files of a maildir")
    lst.add_argument("folder", help=FOLDER_HELP)

    save = sub.add_parser("save", help="Save a message file into a folder")
    save.add_argument("source", help="Message file to save")
    save.add_argument("folder", help=FOLDER_HELP)

    fname = sub.add_parser("filename", help="Print a unique filename for a new message")
    fname.add_argument("folder", help=FOLDER_HELP)
    fname.add_argument("--new", action="store_true", help="Place under new/ instead of cur/")

    sub.add_parser("folders", help="List remote folders via the proxy")

    proxy = sub.add_parser("proxy", help="Run the IMAP proxy server")
    proxy.add_argument("--host", default=cfg.IMAP_HOST or None, required=not cfg.IMAP_HOST,
                       help="IMAP server hostname")
    proxy.add_argument("--port", type=int, default=cfg.IMAP_PORT, help="IMAP port (default 993)")
    proxy.add_argument("--username", default=cfg.IMAP_USERNAME or None, required=not cfg.IMAP_USERNAME,
                       help="IMAP username / email")
    proxy.add_argument("--ssl", dest="use_ssl", action="store_true", help="Use SSL/TLS")
    proxy.add_argument("--no-ssl", dest="use_ssl", action="store_false", help="Disable SSL/TLS")
    proxy.set_defaults(use_ssl=cfg.IMAP_USE_SSL)
    proxy.add_argument("--ask-password", action="store_true",
                       help="Prompt for the password and store it in the keyring")
    proxy.add_argument("--forget-password", action="store_true",
                       help="Remove the stored password from the keyring and exit")
    proxy.add_argument("--save", action="store_true",
                       help="Remember host, port, username and SSL setting as defaults")
    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    proxy = ProxyClient(args.socket, timeout=args.timeout)
    handlers = {
        "count": _cmd_count,
        "list": _cmd_list,
        "save": _cmd_save,
        "filename": _cmd_filename,
        "folders": _cmd_folders,
        "proxy": _cmd_proxy,
    }
    try:
        ok = handlers[args.command](args, proxy)
    except (ProxyError, IMAPConnectionError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    if not ok:
        sys.exit(1)


def _open_folder(name: str, proxy: ProxyClient) -> MaildirFolder:
    """Relative paths that exist on disk are local maildirs, not remote names."""
    if not name.startswith(os.sep) and os.path.isdir(name):
        name = os.path.abspath(name)
    return MaildirFolder(name, proxy=proxy)


def _cmd_count(args: argparse.Namespace, proxy: ProxyClient) -> bool:
    print(f"{'FOLDER':<50} {'TOTAL':>8} {'UNREAD':>8}")
    for name in args.folders:
        folder = _open_folder(name, proxy)
        if folder.is_remote():
            total, unread = proxy.folder_status(folder.path)
            folder.set_counts(total, unread)
        print(f"{folder.path:<50} {folder.total_count():>8} {folder.unread_count():>8}")
    return True


def _cmd_list(args: argparse.Namespace, proxy: ProxyClient) -> bool:
    folder = _open_folder(args.folder, proxy)
    if folder.is_remote():
        print(f"ERROR: {folder.path} is a remote folder; only maildirs can be listed", file=sys.stderr)
        return False
    for msg in sorted(folder.list_messages(), key=lambda m: m.filename):
        print(f"{'N' if msg.is_new() else ' '} {msg.path}")
    return True


def _cmd_save(args: argparse.Namespace, proxy: ProxyClient) -> bool:
    folder = _open_folder(args.folder, proxy)
    if not folder.save_message(Message(args.source)):
        print(f"ERROR: could not save {args.source} to {folder.path}", file=sys.stderr)
        return False
    print(f"Saved {args.source} to {folder.path}")
    return True


def _cmd_filename(args: argparse.Namespace, proxy: ProxyClient) -> bool:
    folder = _open_folder(args.folder, proxy)
    path = folder.generate_filename(args.new)
    if not path:
        print(f"ERROR: {folder.path} is not a maildir", file=sys.stderr)
        return False
    print(path)
    return True


def _cmd_folders(args: argparse.Namespace, proxy: ProxyClient) -> bool:
    for name in proxy.list_folders():
        print(name)
    return True


def _cmd_proxy(args: argparse.Namespace, proxy: ProxyClient) -> bool:
    from mailfolder.imap.proxy_server import serve

    account = Account(
        host=args.host,
        port=args.port,
        username=args.username,
        use_ssl=args.use_ssl,
    )
    if args.forget_password:
        if not delete_password(account.username, account.host):
            print(f"ERROR: could not remove the stored password for {account.username}@{account.host}",
                  file=sys.stderr)
            return False
        print(f"Removed stored password for {account.username}@{account.host}")
        return True
    if args.save:
        cfg.IMAP_HOST = account.host
        cfg.IMAP_PORT = account.port
        cfg.IMAP_USERNAME = account.username
        cfg.IMAP_USE_SSL = account.use_ssl
        cfg.save_settings()
    if args.ask_password:
        password = getpass.getpass(f"Password for {account.username}@{account.host}: ")
        set_password(account.username, account.host, password)

    print(f"Connecting to {account.host}:{account.port}…")
    serve(account, proxy.socket_path)
    return True


if __name__ == "__main__":
    main()
