"""Tests for the mailfolder CLI subcommands."""
from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

import mailfolder.config as cfg
from mailfolder.cli import build_parser, main
from mailfolder.imap.proxy_client import ProxyError


@pytest.fixture
def maildir(tmp_path):
    root = tmp_path / "Mail"
    for sub in ("cur", "new", "tmp"):
        (root / sub).mkdir(parents=True)
    (root / "cur" / "1.host:2,S").write_text("seen")
    (root / "cur" / "2.host:2,").write_text("unseen")
    (root / "new" / "3.host").write_text("new")
    return root


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_count_local(maildir, capsys):
    main(["count", str(maildir)])
    out = capsys.readouterr().out
    line = [l for l in out.splitlines() if l.startswith(str(maildir))][0]
    assert line.split()[-2:] == ["3", "2"]


def test_count_remote_uses_proxy(capsys):
    with patch("mailfolder.cli.ProxyClient.folder_status", return_value=(10, 4)) as status:
        main(["count", "INBOX"])
    status.assert_called_once_with("INBOX")
    line = [l for l in capsys.readouterr().out.splitlines() if l.startswith("INBOX")][0]
    assert line.split()[-2:] == ["10", "4"]


def test_count_proxy_down_exits(capsys):
    with patch("mailfolder.cli.ProxyClient.folder_status", side_effect=ProxyError("down")):
        with pytest.raises(SystemExit) as exc_info:
            main(["count", "INBOX"])
    assert exc_info.value.code == 1
    assert "down" in capsys.readouterr().err


def test_list_marks_unread(maildir, capsys):
    main(["list", str(maildir)])
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert sum(1 for l in lines if l.startswith("N ")) == 2


def test_save_local(maildir, tmp_path, capsys):
    src = tmp_path / "incoming.eml"
    src.write_bytes(b"Subject: saved\n\n")
    main(["save", str(src), str(maildir)])
    assert "Saved" in capsys.readouterr().out
    assert any(p.read_bytes() == b"Subject: saved\n\n" for p in (maildir / "cur").iterdir())


def test_save_local_failure_exits(maildir, tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main(["save", str(tmp_path / "missing.eml"), str(maildir)])
    assert exc_info.value.code == 1


def test_filename(maildir, capsys):
    main(["filename", str(maildir), "--new"])
    path = capsys.readouterr().out.strip()
    assert path.startswith(str(maildir / "new"))
    assert path.endswith(":2,N")


def test_filename_not_a_maildir(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["filename", str(tmp_path)])
    assert "not a maildir" in capsys.readouterr().err


def test_folders(capsys):
    with patch("mailfolder.cli.ProxyClient.list_folders", return_value=["INBOX", "Sent"]):
        main(["folders"])
    assert capsys.readouterr().out.split() == ["INBOX", "Sent"]


def test_count_relative_maildir_stays_local(maildir, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with patch("mailfolder.cli.ProxyClient.folder_status") as status:
        main(["count", "Mail"])
    status.assert_not_called()
    line = capsys.readouterr().out.splitlines()[1]
    name, total, unread = line.split()
    assert os.path.isabs(name) and name.endswith(os.sep + "Mail")
    assert (total, unread) == ("3", "2")


def test_relative_name_without_directory_is_remote(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with patch("mailfolder.cli.ProxyClient.folder_status", return_value=(1, 0)) as status:
        main(["count", "Archive"])
    status.assert_called_once_with("Archive")


class TestProxyCommand:
    @pytest.fixture
    def settings(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        monkeypatch.setattr(cfg, "SETTINGS_PATH", path)
        monkeypatch.setattr(cfg, "IMAP_HOST", "")
        monkeypatch.setattr(cfg, "IMAP_PORT", 993)
        monkeypatch.setattr(cfg, "IMAP_USERNAME", "")
        monkeypatch.setattr(cfg, "IMAP_USE_SSL", True)
        return path

    def test_serves_with_given_account(self, settings):
        with patch("mailfolder.imap.proxy_server.serve") as serve:
            main(["proxy", "--host", "imap.example.com", "--username", "me", "--no-ssl"])
        account, socket_path = serve.call_args.args
        assert (account.host, account.username, account.use_ssl) == ("imap.example.com", "me", False)
        assert not settings.exists()

    def test_save_persists_account_defaults(self, settings):
        with patch("mailfolder.imap.proxy_server.serve") as serve:
            main(["proxy", "--host", "imap.example.com", "--port", "143",
                  "--username", "me", "--no-ssl", "--save"])
        serve.assert_called_once()
        data = json.loads(settings.read_text())
        assert data["imap_host"] == "imap.example.com"
        assert data["imap_port"] == 143
        assert data["imap_username"] == "me"
        assert data["imap_use_ssl"] is False

    def test_ssl_default_follows_settings(self, settings, monkeypatch):
        monkeypatch.setattr(cfg, "IMAP_USE_SSL", False)
        args = build_parser().parse_args(["proxy", "--host", "h", "--username", "u"])
        assert args.use_ssl is False
        args = build_parser().parse_args(["proxy", "--host", "h", "--username", "u", "--ssl"])
        assert args.use_ssl is True

    def test_host_and_username_default_to_settings(self, settings, monkeypatch):
        monkeypatch.setattr(cfg, "IMAP_HOST", "imap.example.com")
        monkeypatch.setattr(cfg, "IMAP_USERNAME", "me")
        args = build_parser().parse_args(["proxy"])
        assert (args.host, args.username) == ("imap.example.com", "me")

    def test_forget_password(self, settings, capsys):
        with patch("mailfolder.cli.delete_password", return_value=True) as delete, \
             patch("mailfolder.imap.proxy_server.serve") as serve:
            main(["proxy", "--host", "h", "--username", "u", "--forget-password"])
        delete.assert_called_once_with("u", "h")
        serve.assert_not_called()
        assert "Removed stored password for u@h" in capsys.readouterr().out

    def test_forget_password_failure_exits(self, settings):
        with patch("mailfolder.cli.delete_password", return_value=False), \
             patch("mailfolder.imap.proxy_server.serve") as serve:
            with pytest.raises(SystemExit) as exc_info:
                main(["proxy", "--host", "h", "--username", "u", "--forget-password"])
        assert exc_info.value.code == 1
        serve.assert_not_called()
