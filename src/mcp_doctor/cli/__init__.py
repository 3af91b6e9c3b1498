"""Command line interface for MCP Doctor."""
