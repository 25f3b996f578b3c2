"""CLI entry point for rage.

Builds one request from the command line, executes it and prints the
response body.

    rage send GET https://api.github.com/users/{user} -p user=octocat -q per_page=5
    rage send POST /items --config client.yaml --data '{"name": "widget"}'
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from rage.models import ContentType, HttpMethod, StubMode


def parse_header(value: str) -> tuple[str, str]:
    """Parse 'NAME:VALUE' header format.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if ":" not in value:
        raise argparse.ArgumentTypeError(f"Invalid header '{value}'. Expected NAME:VALUE.")
    name, header_value = value.split(":", 1)
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid header '{value}'. Header name is empty.")
    return (name, header_value.strip())


def parse_pair(value: str) -> tuple[str, str]:
    """Parse 'KEY=VALUE' format used by query, path and form parameters.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"Invalid parameter '{value}'. Expected KEY=VALUE.")
    key, pair_value = value.split("=", 1)
    if not key:
        raise argparse.ArgumentTypeError(f"Invalid parameter '{value}'. Key is empty.")
    return (key, pair_value)


def non_negative_int(value: str) -> int:
    """Parse a non-negative integer (milliseconds).

    Raises:
        argparse.ArgumentTypeError: If value is not a non-negative integer.
    """
    try:
        result = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{value}'.")
    if result < 0:
        raise argparse.ArgumentTypeError(f"Value must be non-negative, got {result}.")
    return result


def http_method(value: str) -> HttpMethod:
    try:
        return HttpMethod(value.upper())
    except ValueError:
        choices = ", ".join(m.value for m in HttpMethod)
        raise argparse.ArgumentTypeError(f"Unknown HTTP method '{value}'. Choose from: {choices}.")


@dataclass
class SendArgs:
    """Parsed arguments for send mode."""

    method: HttpMethod
    url: str
    config: Path | None
    headers: list[tuple[str, str]]
    query: list[tuple[str, str]]
    path_params: list[tuple[str, str]]
    data: str | None
    form: list[tuple[str, str]]
    content_type: str | None
    timeout_millis: int | None
    stub: str | None
    stub_delay_millis: int | None
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the send subcommand."""
    parser = argparse.ArgumentParser(
        prog="rage",
        description="Build and execute declarative HTTP requests.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Execution mode")

    send_parser = subparsers.add_parser(
        "send",
        help="Execute one request and print the response body",
    )
    send_parser.add_argument(
        "method",
        type=http_method,
        help="HTTP method (GET, POST, PUT, PATCH, DELETE, HEAD, OPTIONS)",
    )
    send_parser.add_argument(
        "url",
        help="Absolute URL, or a path relative to the base_url of --config; may contain {name} placeholders",
    )
    send_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to client config YAML file",
    )
    send_parser.add_argument(
        "-H", "--header",
        type=parse_header,
        action="append",
        default=[],
        metavar="NAME:VALUE",
        dest="headers",
        help="Add a header (can be repeated)",
    )
    send_parser.add_argument(
        "-q", "--query",
        type=parse_pair,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Add a query parameter (can be repeated)",
    )
    send_parser.add_argument(
        "-p", "--path",
        type=parse_pair,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        dest="path_params",
        help="Fill a {KEY} placeholder in the URL (can be repeated)",
    )
    body_group = send_parser.add_mutually_exclusive_group()
    body_group.add_argument(
        "--data",
        default=None,
        help="Raw request body",
    )
    body_group.add_argument(
        "--form",
        type=parse_pair,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Add a urlencoded form field (can be repeated)",
    )
    send_parser.add_argument(
        "--content-type",
        default=None,
        help="json, url_encoded, multipart_form_data or a MIME type",
    )
    send_parser.add_argument(
        "--timeout-millis",
        type=non_negative_int,
        default=None,
        help="Timeout in milliseconds (default: from config, else 60000)",
    )
    send_parser.add_argument(
        "--stub",
        default=None,
        help="Return this string instead of calling the network",
    )
    send_parser.add_argument(
        "--stub-delay-millis",
        type=non_negative_int,
        default=None,
        help="Delay before the stub is returned",
    )
    send_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Log request lifecycle to stderr",
    )

    return parser


def parse_send_args(namespace: argparse.Namespace) -> SendArgs:
    """Convert parsed namespace to SendArgs dataclass."""
    return SendArgs(
        method=namespace.method,
        url=namespace.url,
        config=namespace.config,
        headers=namespace.headers or [],
        query=namespace.query or [],
        path_params=namespace.path_params or [],
        data=namespace.data,
        form=namespace.form or [],
        content_type=namespace.content_type,
        timeout_millis=namespace.timeout_millis,
        stub=namespace.stub,
        stub_delay_millis=namespace.stub_delay_millis,
        verbose=namespace.verbose,
    )


def parse_args(args: list[str] | None = None) -> SendArgs:
    """Parse command-line arguments and return typed args dataclass.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "send":
        if namespace.stub_delay_millis is not None and namespace.stub is None:
            parser.error("--stub-delay-millis requires --stub")
        if (namespace.data is not None or namespace.form) and not namespace.method.has_body():
            parser.error(f"{namespace.method.value} requests cannot carry a body")
        return parse_send_args(namespace)
    else:
        # Should not happen with required=True on subparsers
        parser.error(f"Unknown command: {namespace.command}")


def main() -> int:
    """Main entry point."""
    try:
        return run_send(parse_args())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


def run_send(args: SendArgs) -> int:
    """Run send mode.

    Returns:
        0 if the request succeeded, 1 otherwise.
    """
    # Import here to keep --help fast
    from rage.client import RageClient
    from rage.config_loader import ConfigError
    from rage.plugins import LoggingPlugin
    from rage.request import RageRequest
    from rage.url_builder import split_url

    plugins = []
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        plugins.append(LoggingPlugin())

    if args.config is not None:
        try:
            client = RageClient.from_config_file(args.config, plugins=plugins)
        except ConfigError as e:
            print(f"Error loading config: {e}", file=sys.stderr)
            return 1
        request = client.request(args.method, args.url)
    else:
        # The URL path becomes the method path so -p fills its placeholders
        base_url, method_path, url_query = split_url(args.url)
        request = RageRequest(args.method, base_url).with_plugins(plugins)
        request.method_path = method_path
        request.query_dictionary(url_query)

    for name, value in args.headers:
        request.header(name, value)
    for key, value in args.query:
        request.query(key, value)
    for key, value in args.path_params:
        request.path(key, value)
    if args.timeout_millis is not None:
        request.with_timeout_millis(args.timeout_millis)

    if args.stub is not None:
        mode = (
            StubMode.delayed(args.stub_delay_millis)
            if args.stub_delay_millis is not None
            else StubMode.IMMEDIATE
        )
        request.stub(args.stub, mode=mode)

    if args.form:
        request = request.form_url_encoded().field_dictionary(dict(args.form))
    elif args.data is not None:
        request = request.with_body().body_string(args.data)

    if args.content_type is not None:
        request.content_type(ContentType.parse(args.content_type))

    result = request.execute()

    if result.is_failure:
        error = result.error
        print(f"Error: {error}", file=sys.stderr)
        if error.rage_response is not None and error.rage_response.data:
            print(error.rage_response.data.decode("utf-8", errors="replace"), file=sys.stderr)
        return 1

    response = result.value
    status = response.status_code()
    print(f"Status: {status if status is not None else 'stub'}", file=sys.stderr)
    if response.data:
        print(response.data.decode("utf-8", errors="replace"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
