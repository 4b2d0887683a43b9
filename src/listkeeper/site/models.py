"""Data returned by the store page routines."""

from dataclasses import dataclass


@dataclass
class SearchResult:
    """A product offered for selection.

    Attributes:
        name: Product name as displayed
        index: Position on the page it came from, used to click it later
        price: Price as displayed (e.g., "$4.99")
        size: Package size as displayed (e.g., "1 gal")
    """

    name: str
    index: int
    price: str | None = None
    size: str | None = None

    def display_name(self) -> str:
        """Name with size and price, for numbered menus."""
        line = self.name
        if self.size:
            line += f" ({self.size})"
        if self.price:
            line += f" - {self.price}"
        return line


@dataclass
class ListItem:
    """An entry on the remote shopping list."""

    name: str
    price: str | None = None
    size: str | None = None

    def display_name(self) -> str:
        line = self.name
        if self.size:
            line += f" ({self.size})"
        if self.price:
            line += f" - {self.price}"
        return line
