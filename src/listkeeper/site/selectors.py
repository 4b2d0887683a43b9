"""DOM selectors and URLs for the target store.

Kept as plain data so a site redesign only touches this file.
"""

from dataclasses import dataclass
from urllib.parse import quote_plus

SELECTORS = {
    "login": {
        "email_input": 'input[name="email"], input[type="email"], #email',
        "password_input": 'input[name="password"], input[type="password"], #password',
        "submit_button": 'button[type="submit"], input[type="submit"]',
    },
    "nav": {
        "account_menu": '[data-testid="account-menu"], .account-menu, button:has-text("Account")',
    },
    "search": {
        "product_card": '.product-card, [data-testid="product-card"], .product-tile, [data-testid="product-tile"]',
        "product_name": '.product-name, .product-title, h3, [data-testid="product-name"]',
        "product_price": '.product-price, .price, [data-testid="product-price"]',
        "product_size": '.product-size, .size, [data-testid="product-size"]',
        "add_to_list_button": (
            'button:has-text("Add to List"), button:has-text("Add to Shopping List"), '
            '[data-testid="add-to-list"]'
        ),
        "no_results": '.no-results, :text("No results"), :text("couldn\'t find")',
    },
    "my_items": {
        "search_input": 'input[placeholder*="Search"], input[type="search"]',
        "item": '.my-items-item, [data-testid="my-items-item"], .past-purchase-item, .product-card',
        "item_name": '.item-name, .product-name, [data-testid="product-name"]',
        "add_to_list_button": 'button:has-text("Add to List"), [data-testid="add-to-list"]',
    },
    "list": {
        "container": '.shopping-list, [data-testid="shopping-list"], .my-list',
        "item": '.list-item, [data-testid="list-item"], .shopping-list-item',
        "item_name": ".item-name, .product-name, span",
        "item_price": ".price, .product-price",
        "item_size": ".size, .product-size",
        "remove_button": (
            'button:has-text("Remove"), button[aria-label*="Remove"], .remove-btn, '
            '[data-testid="remove-item"]'
        ),
        "empty_message": '.empty-list, :text("Your list is empty")',
        "clear_all_button": 'button:has-text("Clear All"), button:has-text("Remove All")',
        "confirm_button": 'button:has-text("Confirm"), button:has-text("Yes")',
    },
    "common": {
        "error_message": '.error, .alert-error, [role="alert"]',
    },
}

# URL fragments that mean the site bounced us to its sign-in flow
LOGIN_URL_MARKERS = ("sign-in", "login")


@dataclass(frozen=True)
class StoreUrls:
    """Page URLs derived from the store's base URL."""

    base: str = "https://www.wegmans.com"

    @property
    def login(self) -> str:
        return f"{self.base}/sign-in/"

    @property
    def shopping_list(self) -> str:
        return f"{self.base}/shopping-list/"

    @property
    def my_items(self) -> str:
        return f"{self.base}/my-items/"

    def search(self, query: str) -> str:
        return f"{self.base}/search/?q={quote_plus(query)}"


def is_login_url(url: str) -> bool:
    return any(marker in url for marker in LOGIN_URL_MARKERS)
