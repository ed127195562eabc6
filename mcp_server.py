#!/usr/bin/env python3
"""
Thumbnail Editor - MCP Server (stdio transport)

Run: python mcp_server.py
"""

import asyncio

from thumbnail_editor.server import main


if __name__ == "__main__":
    asyncio.run(main())
