"""CLI entry point for whispir-sdk.

Handles argument parsing and dispatches to send or workspaces mode.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from whispir_sdk.client import WhispirClient
from whispir_sdk.config_loader import load_client_config
from whispir_sdk.errors import WhispirError


def parse_proxy(value: str) -> tuple[str, int]:
    """Parse HOST:PORT format.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if ":" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid format '{value}'. Expected HOST:PORT (e.g., 'proxy.local:3128')"
        )
    host, port_str = value.rsplit(":", 1)
    if not host:
        raise argparse.ArgumentTypeError(f"Invalid format '{value}'. Host cannot be empty.")
    try:
        port = int(port_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid port '{port_str}'. Must be an integer.")
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"Invalid port '{port}'. Must be 1-65535.")
    return (host, port)


@dataclass
class CommonArgs:
    """Options shared by every subcommand."""

    config: Path
    debug_host: str | None
    proxy: tuple[str, int] | None
    proxy_https: bool
    verbose: bool


@dataclass
class SendArgs(CommonArgs):
    """Parsed arguments for send mode."""

    to: str
    subject: str
    body: str
    workspace: str
    email: str | None


@dataclass
class WorkspacesArgs(CommonArgs):
    """Parsed arguments for workspaces mode."""


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="YAML file with apikey, username and password (supports ${ENV_VAR})",
    )
    parser.add_argument(
        "--debug-host",
        default=None,
        help="Send requests to this host instead of the production API",
    )
    parser.add_argument(
        "--proxy",
        type=parse_proxy,
        default=None,
        metavar="HOST:PORT",
        help="Route requests through an HTTP proxy",
    )
    parser.add_argument(
        "--proxy-https",
        action="store_true",
        help="Connect to the proxy over https",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log requests and response bodies",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with send and workspaces subcommands."""
    parser = argparse.ArgumentParser(
        prog="whispir",
        description="Send messages and list workspaces through the Whispir API.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    send_parser = subparsers.add_parser("send", help="Send a message")
    _add_common_arguments(send_parser)
    send_parser.add_argument("--to", required=True, help="Recipient")
    send_parser.add_argument("--subject", required=True, help="Message subject")
    send_parser.add_argument("--body", required=True, help="SMS body")
    send_parser.add_argument(
        "--workspace",
        default="",
        help="Workspace id to send from (default: the account's default workspace)",
    )
    send_parser.add_argument(
        "--email",
        default=None,
        help="Also send this text as a plain-text email body",
    )

    workspaces_parser = subparsers.add_parser("workspaces", help="List workspaces")
    _add_common_arguments(workspaces_parser)

    return parser


def _common_kwargs(namespace: argparse.Namespace) -> dict:
    return {
        "config": namespace.config,
        "debug_host": namespace.debug_host,
        "proxy": namespace.proxy,
        "proxy_https": namespace.proxy_https,
        "verbose": namespace.verbose,
    }


def parse_args(args: list[str] | None = None) -> SendArgs | WorkspacesArgs:
    """Parse command-line arguments and return typed args dataclass.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "send":
        return SendArgs(
            **_common_kwargs(namespace),
            to=namespace.to,
            subject=namespace.subject,
            body=namespace.body,
            workspace=namespace.workspace,
            email=namespace.email,
        )
    return WorkspacesArgs(**_common_kwargs(namespace))


def build_client(args: CommonArgs) -> WhispirClient:
    """Create a client from the config file, applying CLI overrides."""
    config = load_client_config(args.config)
    client = WhispirClient.from_config(config)
    if args.debug_host is not None:
        client.set_debug_host(args.debug_host)
    if args.proxy is not None:
        host, port = args.proxy
        client.set_proxy(host, port, args.proxy_https)
    return client


def run_send(args: SendArgs) -> int:
    content: str | dict[str, str] = args.body
    if args.email is not None:
        content = {"body": args.body, "email": args.email}

    with build_client(args) as client:
        status = client.send_message(args.to, args.subject, content, args.workspace)

    if status == 0:
        print("Message failed: no response from server", file=sys.stderr)
        return 1
    print(f"Status: {status}")
    return 0 if 200 <= status < 300 else 1


def run_workspaces(args: WorkspacesArgs) -> int:
    with build_client(args) as client:
        workspaces = client.get_workspaces()

    for name, workspace_id in sorted(workspaces.items()):
        print(f"{workspace_id}\t{name}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if isinstance(parsed, SendArgs):
            return run_send(parsed)
        return run_workspaces(parsed)
    except WhispirError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1
