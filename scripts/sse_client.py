#!/usr/bin/env python3
"""
Smoke-test a running read server over HTTP/SSE.

Start the server first:
    ENABLE_HTTP=true nftkit-mcp read

Then:
    python scripts/sse_client.py
    SSE_URL=http://localhost:3035/sse python scripts/sse_client.py alchemy-denver2025-blue
"""

import asyncio
import json
import os
import sys

from mcp import ClientSession
from mcp.client.sse import sse_client

DEFAULT_SSE_URL = "http://localhost:3035/sse"
DEFAULT_SLUG = "alchemy-denver2025-blue"


async def main() -> int:
    sse_url = os.getenv("SSE_URL", DEFAULT_SSE_URL)
    slug = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SLUG

    async with sse_client(url=sse_url) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()
            print(f"[client] connected to {sse_url}")

            tools = await session.list_tools()
            print("[client] tools:", ", ".join(tool.name for tool in tools.tools))

            result = await session.call_tool("get_collection", {"collection_slug": slug})
            for block in result.content:
                text = getattr(block, "text", None)
                if text is None:
                    continue
                try:
                    print(json.dumps(json.loads(text), indent=2))
                except json.JSONDecodeError:
                    print(text)

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
