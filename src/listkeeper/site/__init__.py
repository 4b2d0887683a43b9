"""Browser automation for the grocery store site.

Main components:
- selectors: DOM selectors and page URLs
- auth: login probe and form login
- session: AuthenticatedSession, one lock-serialized logged-in page
- pages: Playwright page routines
- client: ShoppingListClient used by the command layer
"""

from listkeeper.site.auth import StoreCredentials, is_logged_in, login
from listkeeper.site.client import ShoppingListClient
from listkeeper.site.models import ListItem, SearchResult
from listkeeper.site.selectors import SELECTORS, StoreUrls, is_login_url
from listkeeper.site.session import AuthenticatedSession, AuthState

__all__ = [
    # Auth
    "StoreCredentials",
    "is_logged_in",
    "login",
    # Session
    "AuthenticatedSession",
    "AuthState",
    # Client
    "ShoppingListClient",
    "SearchResult",
    "ListItem",
    # Selectors
    "SELECTORS",
    "StoreUrls",
    "is_login_url",
]
