"""MCP tool servers and plugin registry for NFT marketplaces (OpenSea, Magic Eden)."""

__version__ = "0.1.0"
