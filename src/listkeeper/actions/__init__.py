"""Shopping list operations and their supporting state.

Main components:
- commands: priority-ordered command grammar
- pending: per-user disambiguation menus with a TTL
- shopping_list: ShoppingListAction, the add/search/pick/remove/list/clear flow
- router: CommandRouter for direct (non-LLM) mode
"""

from listkeeper.actions.base import ActionResult
from listkeeper.actions.commands import COMMAND_PATTERNS, HELP_TEXT, ParsedCommand, is_small_talk, parse_command
from listkeeper.actions.pending import PendingSelection, PendingSelectionStore, SelectionSource
from listkeeper.actions.router import CommandRouter
from listkeeper.actions.shopping_list import ShoppingListAction

__all__ = [
    "ActionResult",
    # Grammar
    "COMMAND_PATTERNS",
    "HELP_TEXT",
    "ParsedCommand",
    "parse_command",
    "is_small_talk",
    # Pending selections
    "PendingSelection",
    "PendingSelectionStore",
    "SelectionSource",
    # Actions
    "ShoppingListAction",
    "CommandRouter",
]
