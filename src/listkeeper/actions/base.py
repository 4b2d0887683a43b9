"""Result type shared by every action."""

from dataclasses import dataclass
from typing import Any


@dataclass
class ActionResult:
    """Outcome of one user-facing operation.

    Attributes:
        success: Whether the operation did what was asked
        message: Reply text for the user
        data: Optional structured payload (results, items, counts)
        cached: True when the reply came from the local mirror
    """

    success: bool
    message: str
    data: Any = None
    cached: bool = False
