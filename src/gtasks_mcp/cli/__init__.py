"""Command-line interface for gtasks-mcp."""
