#!/usr/bin/env python3
"""Main entry point for MCP Aggregator when run as a script."""

import asyncio
import sys

from mcp_aggregator.core.manager import MCPAggregator


async def main():
    """Main entry point."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        aggregator = MCPAggregator(config_path)
        await aggregator.start()
    except KeyboardInterrupt:
        print("\nShutting down MCP Aggregator...")
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
