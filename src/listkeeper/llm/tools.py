"""Tool declarations offered to the chat model.

Each tool has a pydantic model for its arguments. The same model produces
the JSON schema bound to the LLM and validates the arguments the LLM sends
back before anything is dispatched.

Tools:
    - add_to_grocery_list: Add one or more items
    - search_grocery_item: Search the full catalog
    - remove_from_grocery_list: Remove an item
    - show_grocery_list: Show the list
    - clear_grocery_list: Clear the list
    - select_item: Pick from the last numbered menu
"""

from dataclasses import dataclass
from typing import Any

from langchain_core.utils.function_calling import convert_to_openai_tool
from pydantic import BaseModel, Field


class AddToGroceryListArgs(BaseModel):
    items: list[str] = Field(
        min_length=1,
        description='List of items to add (e.g., ["milk", "eggs", "bread"])',
    )


class SearchGroceryItemArgs(BaseModel):
    query: str = Field(min_length=1, description="Search query for the item")


class RemoveFromGroceryListArgs(BaseModel):
    item: str = Field(min_length=1, description="Name of the item to remove")


class NoArgs(BaseModel):
    pass


class SelectItemArgs(BaseModel):
    selection: int = Field(description="The number of the item to select (1-based)")


@dataclass(frozen=True)
class ToolSpec:
    """A tool the model may call."""

    name: str
    description: str
    args_model: type[BaseModel]

    def to_openai(self) -> dict[str, Any]:
        """OpenAI function-tool schema, accepted by ``bind_tools``."""
        schema = convert_to_openai_tool(self.args_model)
        schema["function"]["name"] = self.name
        schema["function"]["description"] = self.description
        schema["function"]["parameters"].setdefault("properties", {})
        return schema


TOOL_DEFINITIONS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="add_to_grocery_list",
        description=(
            "Add one or more items to the shopping list. Searches past purchases first "
            "for quick matching, then falls back to full catalog search."
        ),
        args_model=AddToGroceryListArgs,
    ),
    ToolSpec(
        name="search_grocery_item",
        description=(
            "Search the full catalog for an item, skipping past purchases. Use this when "
            "the user wants to find something new or specific."
        ),
        args_model=SearchGroceryItemArgs,
    ),
    ToolSpec(
        name="remove_from_grocery_list",
        description="Remove an item from the shopping list",
        args_model=RemoveFromGroceryListArgs,
    ),
    ToolSpec(
        name="show_grocery_list",
        description="Show the current shopping list",
        args_model=NoArgs,
    ),
    ToolSpec(
        name="clear_grocery_list",
        description="Clear all items from the shopping list",
        args_model=NoArgs,
    ),
    ToolSpec(
        name="select_item",
        description="Select an item from the previously shown options by number",
        args_model=SelectItemArgs,
    ),
)

TOOLS_BY_NAME: dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_DEFINITIONS}

TOOL_SCHEMAS: list[dict[str, Any]] = [spec.to_openai() for spec in TOOL_DEFINITIONS]
