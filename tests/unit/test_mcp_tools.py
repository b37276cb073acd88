"""Unit tests for the MCP tool adapters."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from design_system_mcp.config import AppConfig, DataSettings
from design_system_mcp.context import ServerContext
from design_system_mcp.mcp_tools import build_tools, create_design_system_mcp_server


async def _started(data_dir: Path) -> ServerContext:
    context = ServerContext.build(
        AppConfig(data=DataSettings(data_path=data_dir, enable_file_watching=False))
    )
    await context.start()
    return context


async def _call(context: ServerContext, name: str, args: dict[str, Any]) -> dict[str, Any]:
    tools = {t.name: t for t in build_tools(context)}
    return await tools[name].handler(args)


def _payload(result: dict[str, Any]) -> Any:
    return json.loads(result["content"][0]["text"])


class TestToolSet:
    """Tests for tool registration."""

    @pytest.mark.asyncio
    async def test_tool_names(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            assert [t.name for t in build_tools(context)] == [
                "get_design_tokens",
                "get_design_token",
                "search_design_tokens",
                "get_design_token_categories",
                "get_components",
                "get_component",
                "get_component_examples",
                "search_components",
                "get_guidelines",
                "get_guideline",
                "search_guidelines",
            ]
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_server_config(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            server = create_design_system_mcp_server(context)
            assert server["type"] == "sdk"
            assert server["name"] == "design-system-mcp"
        finally:
            context.close()


class TestToolResults:
    """Tests for tool answers and error results."""

    @pytest.mark.asyncio
    async def test_get_design_tokens(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            result = await _call(context, "get_design_tokens", {"category": "spacing"})
            assert "is_error" not in result
            assert [t["name"] for t in _payload(result)] == ["spacing-sm"]

            result = await _call(context, "get_design_tokens", {"deprecated": "false"})
            assert [t["name"] for t in _payload(result)] == ["primary-blue", "font-body"]
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_lookups(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            token = _payload(await _call(context, "get_design_token", {"name": "font-body"}))
            assert token["category"] == "typography"
            component = _payload(await _call(context, "get_component", {"name": "card"}))
            assert component["name"] == "Card"
            guideline = _payload(await _call(context, "get_guideline", {"id": "color-usage"}))
            assert guideline["relatedTokens"] == ["primary-blue"]
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_listings(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            categories = _payload(await _call(context, "get_design_token_categories", {}))
            assert categories == ["color", "spacing", "typography"]

            components = _payload(await _call(context, "get_components", {"name": "butt"}))
            assert [c["name"] for c in components] == ["Button"]
            components = _payload(await _call(context, "get_components", {"category": "layout"}))
            assert [c["name"] for c in components] == ["Card"]

            guidelines = _payload(
                await _call(context, "get_guidelines", {"category": "color", "tag": "brand"})
            )
            assert [g["id"] for g in guidelines] == ["color-usage"]
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_component_examples(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            examples = _payload(await _call(context, "get_component_examples", {"name": "Button"}))
            assert [e["title"] for e in examples] == ["Basic"]
            assert examples[0]["language"] == "tsx"

            result = await _call(context, "get_component_examples", {"name": "Modal"})
            assert result["is_error"] is True
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_searches(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            tokens = _payload(await _call(context, "search_design_tokens", {"query": "links"}))
            assert [t["name"] for t in tokens] == ["primary-blue"]
            components = _payload(await _call(context, "search_components", {"query": "variant"}))
            assert [c["name"] for c in components] == ["Button"]
            guidelines = _payload(await _call(context, "search_guidelines", {"query": "brand"}))
            assert [g["id"] for g in guidelines] == ["color-usage"]
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_not_found_is_error_result_with_suggestions(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            result = await _call(context, "get_component", {"name": "Modal"})
            assert result["is_error"] is True
            text = result["content"][0]["text"]
            assert text.startswith('Error: Component "Modal" not found')
            assert "• Available components: Button, Card" in text
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_missing_argument_is_invalid_query(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            result = await _call(context, "search_guidelines", {})
            assert result["is_error"] is True
            assert "Search query must be a non-empty string" in result["content"][0]["text"]
        finally:
            context.close()

    @pytest.mark.asyncio
    async def test_unknown_category_is_error_result(self, data_dir: Path) -> None:
        context = await _started(data_dir)
        try:
            result = await _call(context, "get_design_tokens", {"category": "shadow"})
            assert result["is_error"] is True
            assert "Valid categories: color, typography" in result["content"][0]["text"]
        finally:
            context.close()
