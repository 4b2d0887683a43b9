"""Command grammar for direct (non-LLM) messages.

A priority-ordered table of regex patterns, each naming the shopping list
operation it triggers. Parsing has no side effects, so the grammar can be
exercised without a browser.
"""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CommandPattern:
    """One grammar rule.

    Attributes:
        operation: Operation name on ShoppingListAction (e.g., "add")
        regex: Compiled pattern. Group 1, when present, is the argument.
    """

    operation: str
    regex: re.Pattern

    def match(self, text: str) -> Optional[re.Match]:
        return self.regex.match(text)


@dataclass
class ParsedCommand:
    """A message matched against the grammar."""

    operation: str
    argument: Optional[str]
    raw: str


def _pattern(operation: str, expression: str) -> CommandPattern:
    return CommandPattern(operation=operation, regex=re.compile(expression, re.IGNORECASE))


# Evaluated top to bottom; the first match wins.
COMMAND_PATTERNS: tuple[CommandPattern, ...] = (
    _pattern("help", r"^help$"),
    _pattern("pick", r"^(?:pick|select|choose)\s+(\d+)$"),
    _pattern("clear", r"^clear\s+list$"),
    _pattern("list", r"^(?:list|show\s+list|shopping\s+list)$"),
    _pattern("search", r"^search\s+(.+)$"),
    _pattern("remove", r"^remove\s+(.+)$"),
    _pattern("add", r"^add\s+(.+)$"),
)

SMALL_TALK_PATTERNS = (
    re.compile(r"^(hi|hello|hey|yo|sup|what'?s up)\b", re.IGNORECASE),
    re.compile(r"^(thanks|thank you|thx)\b", re.IGNORECASE),
    re.compile(r"^(ok|okay|k|sure|got it)\b", re.IGNORECASE),
)

HELP_TEXT = """Available commands:

  • add <item> - Add from past purchases or search
  • search <item> - Search full catalog (skip past purchases)
  • remove <item> - Remove from list
  • list - Show current list
  • clear list - Clear all items
  • pick <number> - Select from options"""


def parse_command(text: str) -> Optional[ParsedCommand]:
    """Match ``text`` against the grammar.

    Returns:
        The first matching command, or None if no rule matches
    """
    stripped = text.strip()
    for pattern in COMMAND_PATTERNS:
        match = pattern.match(stripped)
        if match:
            argument = match.group(1).strip() if match.groups() else None
            return ParsedCommand(operation=pattern.operation, argument=argument, raw=stripped)
    return None


def is_small_talk(text: str) -> bool:
    """Greetings, thanks and acknowledgements that are not commands."""
    stripped = text.strip()
    return any(pattern.match(stripped) for pattern in SMALL_TALK_PATTERNS)
