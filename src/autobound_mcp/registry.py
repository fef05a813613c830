from __future__ import annotations

from typing import Any, Iterable, Mapping

from autobound_config.settings import Credentials, ProviderUrls
from autobound_mcp.http_client import HttpClient
from autobound_mcp.tools import ToolDefinition, build_tools


class ToolRegistry:
    """Name -> tool adapter mapping; each name maps to exactly one adapter."""

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for t in tools:
            self.register(t)

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool.

        Raises:
            ValueError: If a tool with the same name is already registered.
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition:
        """Get a tool by name.

        Raises:
            KeyError: If the tool is not found.
        """
        if name not in self._tools:
            raise KeyError(f"Tool not found: {name}")
        return self._tools[name]

    def names(self) -> list[str]:
        return list(self._tools)

    async def invoke(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict:
        return await self.get(name).invoke(arguments)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def build_registry(
    credentials: Credentials,
    http_client: HttpClient | None = None,
    urls: ProviderUrls | None = None,
) -> ToolRegistry:
    return ToolRegistry(build_tools(credentials, http_client=http_client, urls=urls))
