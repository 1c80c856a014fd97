"""
Tests for tool definition, validation and invocation.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest

from toolloop.exceptions import ToolExecutionError, ToolValidationError
from toolloop.tools import Tool, ToolParameter, tool


def _noop(**kwargs):
    return kwargs


class TestToolDefinition:
    def test_empty_name_is_rejected(self) -> None:
        with pytest.raises(ToolValidationError, match="name cannot be empty"):
            Tool(name=" ", description="x", function=_noop)

    def test_empty_description_is_rejected(self) -> None:
        with pytest.raises(ToolValidationError, match="description cannot be empty"):
            Tool(name="t", description="", function=_noop)

    def test_function_must_be_callable(self) -> None:
        with pytest.raises(ToolValidationError, match="must be callable"):
            Tool(name="t", description="x", function=None)

    def test_duplicate_parameters_are_rejected(self) -> None:
        params = [
            ToolParameter(name="a", param_type=str, description="a"),
            ToolParameter(name="a", param_type=int, description="a again"),
        ]
        with pytest.raises(ToolValidationError, match="Duplicate"):
            Tool(name="t", description="x", parameters=params, function=_noop)

    def test_unsupported_parameter_type(self) -> None:
        params = [ToolParameter(name="a", param_type=set, description="a")]
        with pytest.raises(ToolValidationError, match="Unsupported parameter type"):
            Tool(name="t", description="x", parameters=params, function=_noop)

    def test_parameter_must_exist_in_signature(self) -> None:
        def fn(city: str) -> str:
            return city

        params = [ToolParameter(name="town", param_type=str, description="typo")]
        with pytest.raises(ToolValidationError, match="not found in function signature"):
            Tool(name="t", description="x", parameters=params, function=fn)

    def test_parameters_and_json_schema_are_exclusive(self) -> None:
        params = [ToolParameter(name="a", param_type=str, description="a")]
        with pytest.raises(ToolValidationError, match="json_schema"):
            Tool(
                name="t",
                description="x",
                parameters=params,
                function=_noop,
                json_schema={"type": "object"},
            )


class TestSchema:
    def test_declared_parameters(self) -> None:
        params = [
            ToolParameter(name="city", param_type=str, description="City"),
            ToolParameter(
                name="unit", param_type=str, description="Unit", required=False, enum=["c", "f"]
            ),
        ]
        schema = Tool(name="weather", description="Weather", parameters=params, function=_noop).schema()

        assert schema["name"] == "weather"
        assert schema["parameters"]["required"] == ["city"]
        assert schema["parameters"]["properties"]["unit"] == {
            "type": "string",
            "description": "Unit",
            "enum": ["c", "f"],
        }

    def test_json_schema_passes_through(self) -> None:
        raw = {"properties": {"query": {"type": "string"}}, "required": ["query"]}
        schema = Tool(name="search", description="Search", function=_noop, json_schema=raw).schema()

        assert schema["parameters"] == {
            "type": "object",
            "properties": {"query": {"type": "string"}},
            "required": ["query"],
        }


class TestDecorator:
    def test_infers_types_defaults_and_docstring(self) -> None:
        @tool()
        def search(query: str, limit: int = 5, tags: Optional[List[str]] = None) -> str:
            """Search the catalogue."""
            return query

        assert search.name == "search"
        assert search.description == "Search the catalogue."
        by_name = {p.name: p for p in search.parameters}
        assert by_name["query"].required is True
        assert by_name["limit"].param_type is int and by_name["limit"].required is False
        assert by_name["tags"].param_type is list

    def test_injected_kwargs_are_hidden(self) -> None:
        @tool(description="Look up a user", injected_kwargs={"db": {"u1": "Ada"}})
        def lookup(user_id: str, db: dict) -> str:
            return db[user_id]

        assert [p.name for p in lookup.parameters] == ["user_id"]
        assert asyncio.run(lookup.ainvoke({"user_id": "u1"})) == "Ada"


class TestValidation:
    @pytest.fixture
    def add(self) -> Tool:
        @tool(description="Add numbers")
        def add(a: int, b: float) -> float:
            return a + b

        return add

    def test_typo_gets_a_suggestion(self, add) -> None:
        with pytest.raises(ToolValidationError) as exc_info:
            add.validate({"a": 1, "bb": 2})

        assert "Did you mean 'b'" in str(exc_info.value)

    def test_missing_required_parameter(self, add) -> None:
        with pytest.raises(ToolValidationError, match="Missing required parameter"):
            add.validate({"a": 1})

    def test_bool_is_not_an_int(self, add) -> None:
        with pytest.raises(ToolValidationError):
            add.validate({"a": True, "b": 1.0})

    def test_int_is_accepted_as_float(self, add) -> None:
        add.validate({"a": 1, "b": 2})


class TestInvocation:
    @pytest.mark.asyncio
    async def test_sync_function_returns_raw_value(self) -> None:
        @tool(description="Pair")
        def pair(a: int, b: int) -> dict:
            return {"sum": a + b}

        assert await pair.ainvoke({"a": 2, "b": 3}) == {"sum": 5}

    @pytest.mark.asyncio
    async def test_async_function_is_awaited(self) -> None:
        @tool(description="Async echo")
        async def echo(text: str) -> str:
            await asyncio.sleep(0)
            return text.upper()

        assert echo.is_async
        assert await echo.ainvoke({"text": "hi"}) == "HI"

    @pytest.mark.asyncio
    async def test_json_schema_tools_receive_the_argument_dict(self) -> None:
        received = []
        search = Tool(
            name="search",
            description="Search",
            function=lambda args: received.append(args) or "ok",
            json_schema={"properties": {"q": {"type": "string"}}},
        )

        assert await search.ainvoke({"q": "cats", "extra": 1}) == "ok"
        assert received == [{"q": "cats", "extra": 1}]

    @pytest.mark.asyncio
    async def test_function_errors_are_wrapped(self) -> None:
        @tool(description="Divide")
        def divide(a: float, b: float) -> float:
            return a / b

        with pytest.raises(ToolExecutionError) as exc_info:
            await divide.ainvoke({"a": 1, "b": 0})

        assert isinstance(exc_info.value.error, ZeroDivisionError)
        assert exc_info.value.tool_name == "divide"
