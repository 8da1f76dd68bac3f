"""Tests for whispir_sdk.cli.

Tests cover:
- send and workspaces subcommands with required and optional arguments
- HOST:PORT proxy parsing
- Error cases (missing required args, bad proxy values)
- run_send / run_workspaces exit codes and output with a patched client
"""

import argparse
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from whispir_sdk.cli import (
    SendArgs,
    WorkspacesArgs,
    build_client,
    main,
    parse_args,
    parse_proxy,
    run_send,
    run_workspaces,
)
from whispir_sdk.errors import ConfigurationError


# =============================================================================
# Argument Parsing Tests
# =============================================================================


class TestParseProxy:
    def test_valid(self):
        assert parse_proxy("proxy.local:3128") == ("proxy.local", 3128)

    def test_ipv6_like_host_splits_on_last_colon(self):
        assert parse_proxy("::1:8080") == ("::1", 8080)

    @pytest.mark.parametrize("value", ["proxy.local", ":3128", "proxy.local:abc", "proxy.local:0", "h:70000"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_proxy(value)


class TestSendArgs:
    def test_basic_send(self):
        args = parse_args(
            ["send", "--config", "w.yaml", "--to", "+614", "--subject", "Hi", "--body", "Hello"]
        )
        assert isinstance(args, SendArgs)
        assert args.config == Path("w.yaml")
        assert args.to == "+614"
        assert args.subject == "Hi"
        assert args.body == "Hello"
        assert args.workspace == ""
        assert args.email is None
        assert args.debug_host is None
        assert args.proxy is None
        assert args.proxy_https is False
        assert args.verbose is False

    def test_send_all_options(self):
        args = parse_args(
            [
                "send",
                "--config", "w.yaml",
                "--to", "a@b.com",
                "--subject", "Hi",
                "--body", "sms",
                "--workspace", "WS1",
                "--email", "mail",
                "--debug-host", "app.whispir.net",
                "--proxy", "proxy.local:3128",
                "--proxy-https",
                "--verbose",
            ]
        )
        assert args.workspace == "WS1"
        assert args.email == "mail"
        assert args.debug_host == "app.whispir.net"
        assert args.proxy == ("proxy.local", 3128)
        assert args.proxy_https is True
        assert args.verbose is True

    def test_send_missing_to(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["send", "--config", "w.yaml", "--subject", "Hi", "--body", "x"])
        assert exc_info.value.code == 2

    def test_bad_proxy_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["workspaces", "--config", "w.yaml", "--proxy", "nope"])
        assert exc_info.value.code == 2


class TestWorkspacesArgs:
    def test_basic_workspaces(self):
        args = parse_args(["workspaces", "--config", "w.yaml"])
        assert isinstance(args, WorkspacesArgs)
        assert args.config == Path("w.yaml")

    def test_missing_config(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["workspaces"])
        assert exc_info.value.code == 2

    def test_no_subcommand(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])
        assert exc_info.value.code == 2


# =============================================================================
# Execution Tests
# =============================================================================


def _config_file(tmp_path: Path) -> Path:
    path = tmp_path / "whispir.yaml"
    path.write_text("apikey: K1\nusername: user\npassword: secret\n", encoding="utf-8")
    return path


def _send_args(config: Path, **overrides) -> SendArgs:
    values = dict(
        config=config,
        debug_host=None,
        proxy=None,
        proxy_https=False,
        verbose=False,
        to="+614",
        subject="Hi",
        body="Hello",
        workspace="",
        email=None,
    )
    values.update(overrides)
    return SendArgs(**values)


def _mock_client() -> MagicMock:
    client = MagicMock()
    client.__enter__.return_value = client
    return client


class TestBuildClient:
    def test_overrides_applied(self, tmp_path: Path):
        args = _send_args(
            _config_file(tmp_path),
            debug_host="foo.whispir.net:8080",
            proxy=("proxy.local", 3128),
            proxy_https=True,
        )
        client = build_client(args)
        try:
            assert client.config.debug_host == "foo.whispir.net:8080"
            assert client.config.proxy.url == "https://proxy.local:3128"
        finally:
            client.close()

    def test_no_overrides(self, tmp_path: Path):
        client = build_client(_send_args(_config_file(tmp_path)))
        try:
            assert client.config.debug is False
            assert client.config.proxy is None
        finally:
            client.close()


class TestRunSend:
    def test_success(self, tmp_path: Path, capsys):
        client = _mock_client()
        client.send_message.return_value = 202

        with patch("whispir_sdk.cli.build_client", return_value=client):
            exit_code = run_send(_send_args(_config_file(tmp_path)))

        assert exit_code == 0
        assert "Status: 202" in capsys.readouterr().out
        client.send_message.assert_called_once_with("+614", "Hi", "Hello", "")

    def test_email_makes_rich_content(self, tmp_path: Path):
        client = _mock_client()
        client.send_message.return_value = 202

        with patch("whispir_sdk.cli.build_client", return_value=client):
            run_send(_send_args(_config_file(tmp_path), email="mail", workspace="WS1"))

        client.send_message.assert_called_once_with(
            "+614", "Hi", {"body": "Hello", "email": "mail"}, "WS1"
        )

    def test_error_status(self, tmp_path: Path):
        client = _mock_client()
        client.send_message.return_value = 403

        with patch("whispir_sdk.cli.build_client", return_value=client):
            assert run_send(_send_args(_config_file(tmp_path))) == 1

    def test_no_response(self, tmp_path: Path, capsys):
        client = _mock_client()
        client.send_message.return_value = 0

        with patch("whispir_sdk.cli.build_client", return_value=client):
            assert run_send(_send_args(_config_file(tmp_path))) == 1
        assert "no response" in capsys.readouterr().err


class TestRunWorkspaces:
    def test_lists_sorted_by_name(self, tmp_path: Path, capsys):
        client = _mock_client()
        client.get_workspaces.return_value = {"Ops": "B2", "Marketing": "A1"}
        args = WorkspacesArgs(
            config=_config_file(tmp_path),
            debug_host=None,
            proxy=None,
            proxy_https=False,
            verbose=False,
        )

        with patch("whispir_sdk.cli.build_client", return_value=client):
            assert run_workspaces(args) == 0

        assert capsys.readouterr().out.splitlines() == ["A1\tMarketing", "B2\tOps"]


class TestMain:
    def test_config_error_reported(self, tmp_path: Path, capsys):
        exit_code = main(["workspaces", "--config", str(tmp_path / "missing.yaml")])
        assert exit_code == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_dispatches_send(self, tmp_path: Path):
        config = _config_file(tmp_path)
        with patch("whispir_sdk.cli.run_send", return_value=0) as mock_run:
            exit_code = main(
                ["send", "--config", str(config), "--to", "1", "--subject", "s", "--body", "b"]
            )
        assert exit_code == 0
        assert isinstance(mock_run.call_args.args[0], SendArgs)

    def test_whispir_error_from_run(self, tmp_path: Path, capsys):
        with patch("whispir_sdk.cli.run_workspaces", side_effect=ConfigurationError("boom")):
            exit_code = main(["workspaces", "--config", str(_config_file(tmp_path))])
        assert exit_code == 1
        assert "Error: boom" in capsys.readouterr().err
