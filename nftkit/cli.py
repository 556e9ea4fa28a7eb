"""Command-line entry point for the MCP servers.

Usage:
    nftkit-mcp read                      # stdio
    nftkit-mcp read --transport sse      # HTTP/SSE on PORT (default 3035)
    nftkit-mcp actions --port 3050
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

import structlog
from mcp.server.fastmcp import FastMCP

from nftkit.nft.config import NftKitSettings
from nftkit.nft.opensea_client import OpenSeaClient
from nftkit.plugins import build_default_registry
from nftkit.servers.opensea_actions import OpenSeaActionTools, create_actions_server
from nftkit.servers.opensea_read import OpenSeaReadTools, create_read_server
from nftkit.utils.logging import configure_logging

log = structlog.get_logger()

DEFAULT_PORTS = {"read": 3035, "actions": 3050}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nftkit-mcp",
        description="OpenSea MCP tool servers for Arbitrum",
    )
    parser.add_argument(
        "server",
        choices=sorted(DEFAULT_PORTS),
        help="Which tool server to run",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default=None,
        help="Transport (default: stdio, or sse when ENABLE_HTTP=true)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="HTTP port for the sse transport (default: PORT or the server default)",
    )
    return parser


def resolve_transport(args: argparse.Namespace, settings: NftKitSettings) -> str:
    if args.transport:
        return args.transport
    return "sse" if settings.enable_http else "stdio"


def resolve_port(args: argparse.Namespace, settings: NftKitSettings) -> int:
    return args.port or settings.port or DEFAULT_PORTS[args.server]


def build_server(
    name: str,
    client: OpenSeaClient,
    settings: NftKitSettings,
    *,
    port: int | None = None,
) -> FastMCP:
    """Wire client, plugin registry and handlers into the named server."""
    registry = build_default_registry(client)
    if name == "read":
        return create_read_server(OpenSeaReadTools(client, registry, settings), port=port)
    return create_actions_server(OpenSeaActionTools(registry, settings), port=port)


async def serve(name: str, transport: str, port: int, settings: NftKitSettings) -> None:
    client = OpenSeaClient.from_settings(settings)
    try:
        server = build_server(name, client, settings, port=port)
        log.info(
            "server.starting",
            server=name,
            transport=transport,
            port=port if transport == "sse" else None,
            write_enabled=settings.enable_write,
            api_key_set=bool(settings.api_key()),
        )
        if transport == "sse":
            await server.run_sse_async()
        else:
            await server.run_stdio_async()
    finally:
        await client.close()
        log.info("server.stopped", server=name)


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = NftKitSettings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)

    transport = resolve_transport(args, settings)
    port = resolve_port(args, settings)

    try:
        asyncio.run(serve(args.server, transport, port, settings))
    except KeyboardInterrupt:
        log.info("server.interrupted", server=args.server)


if __name__ == "__main__":
    main()
