"""MCP server exposing Autobound, PredictLeads and You.com APIs as tools."""

__version__ = "1.0.0"
