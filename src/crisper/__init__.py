"""Crisper backend: social-posting API, MCP tool server and agent bridge."""

__version__ = "1.0.0"
