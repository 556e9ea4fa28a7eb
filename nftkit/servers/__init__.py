"""MCP tool servers: OpenSea read and OpenSea actions."""

from nftkit.servers.opensea_actions import OpenSeaActionTools, create_actions_server
from nftkit.servers.opensea_read import OpenSeaReadTools, create_read_server

__all__ = [
    "OpenSeaActionTools",
    "OpenSeaReadTools",
    "create_actions_server",
    "create_read_server",
]
