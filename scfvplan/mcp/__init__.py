"""SCFV Plan MCP server."""
