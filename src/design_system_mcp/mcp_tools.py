"""MCP tools exposing the design system query services.

The tools are registered as an in-process MCP server for minimal latency.
Every tool answers with JSON text; failures become ``is_error`` results
whose text is the error's user message with its suggestions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from claude_agent_sdk import McpSdkServerConfig, SdkMcpTool, create_sdk_mcp_server, tool

from .context import ServerContext
from .errors import DesignSystemError, normalize_error

logger = logging.getLogger(__name__)

ToolResult = dict[str, Any]


def _text(payload: Any) -> ToolResult:
    return {"content": [{"type": "text", "text": json.dumps(payload, indent=2, default=str)}]}


def _error(err: DesignSystemError) -> ToolResult:
    return {
        "content": [{"type": "text", "text": f"Error: {err.user_message()}"}],
        "is_error": True,
    }


async def _respond(call: Callable[[], Awaitable[Any]]) -> ToolResult:
    """Run a service call and wrap the outcome as a tool result."""
    try:
        return _text(await call())
    except Exception as exc:
        return _error(normalize_error(exc))


def _optional_bool(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes")


def build_tools(context: ServerContext) -> list[SdkMcpTool[Any]]:
    """Create the tool set bound to one ServerContext."""

    @tool(
        "get_design_tokens",
        "List design tokens, optionally filtered by category "
        "(color, typography, spacing, elevation, motion) and deprecated status.",
        {
            "type": "object",
            "properties": {
                "category": {"type": "string"},
                "deprecated": {"type": "boolean"},
            },
        },
    )
    async def get_design_tokens(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            tokens = await context.tokens.get_tokens(
                category=args.get("category") or None,
                deprecated=_optional_bool(args.get("deprecated")),
            )
            return [t.to_json_dict() for t in tokens]

        return await _respond(call)

    @tool("get_design_token", "Get one design token by name.", {"name": str})
    async def get_design_token(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            return (await context.tokens.get_token(args.get("name", ""))).to_json_dict()

        return await _respond(call)

    @tool(
        "search_design_tokens",
        "Search design tokens by name, value, description, usage or alias.",
        {"query": str},
    )
    async def search_design_tokens(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            tokens = await context.tokens.search_tokens(args.get("query", ""))
            return [t.to_json_dict() for t in tokens]

        return await _respond(call)

    @tool(
        "get_design_token_categories",
        "List the design token categories present in the data.",
        {"type": "object", "properties": {}},
    )
    async def get_design_token_categories(args: dict[str, Any]) -> ToolResult:
        return await _respond(context.tokens.get_categories)

    @tool(
        "get_components",
        "List components, optionally filtered by category and by a name fragment.",
        {
            "type": "object",
            "properties": {
                "category": {"type": "string"},
                "name": {"type": "string"},
            },
        },
    )
    async def get_components(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            components = await context.components.get_components(
                category=args.get("category") or None,
                name=args.get("name") or None,
            )
            return [c.to_json_dict() for c in components]

        return await _respond(call)

    @tool(
        "get_component",
        "Get a component with its props, variants, examples and accessibility notes.",
        {"name": str},
    )
    async def get_component(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            return (await context.components.get_component(args.get("name", ""))).to_json_dict()

        return await _respond(call)

    @tool(
        "get_component_examples",
        "Get the code examples of a component.",
        {"name": str},
    )
    async def get_component_examples(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            examples = await context.components.get_examples(args.get("name", ""))
            return [e.to_json_dict() for e in examples]

        return await _respond(call)

    @tool(
        "search_components",
        "Search components by name, description, category or prop name.",
        {"query": str},
    )
    async def search_components(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            components = await context.components.search_components(args.get("query", ""))
            return [c.to_json_dict() for c in components]

        return await _respond(call)

    @tool(
        "get_guidelines",
        "List design guidelines, optionally filtered by category and tag.",
        {
            "type": "object",
            "properties": {
                "category": {"type": "string"},
                "tag": {"type": "string"},
            },
        },
    )
    async def get_guidelines(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            guidelines = await context.guidelines.get_guidelines(
                category=args.get("category") or None,
                tag=args.get("tag") or None,
            )
            return [g.to_json_dict() for g in guidelines]

        return await _respond(call)

    @tool("get_guideline", "Get a design guideline by id.", {"id": str})
    async def get_guideline(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            return (await context.guidelines.get_guideline(args.get("id", ""))).to_json_dict()

        return await _respond(call)

    @tool(
        "search_guidelines",
        "Search design guidelines by title, content, category or tag.",
        {"query": str},
    )
    async def search_guidelines(args: dict[str, Any]) -> ToolResult:
        async def call() -> Any:
            guidelines = await context.guidelines.search_guidelines(args.get("query", ""))
            return [g.to_json_dict() for g in guidelines]

        return await _respond(call)

    return [
        get_design_tokens,
        get_design_token,
        search_design_tokens,
        get_design_token_categories,
        get_components,
        get_component,
        get_component_examples,
        search_components,
        get_guidelines,
        get_guideline,
        search_guidelines,
    ]


def create_design_system_mcp_server(context: ServerContext) -> McpSdkServerConfig:
    """Create MCP server with the design system tools.

    Args:
        context: Started ServerContext the tools query.

    Returns:
        McpSdkServerConfig ready for use with ClaudeAgentOptions
    """
    tools = build_tools(context)
    logger.debug("Registering %d MCP tools", len(tools))
    return create_sdk_mcp_server(
        name=context.config.server.name,
        version=context.config.server.version,
        tools=tools,
    )
