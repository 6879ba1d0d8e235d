"""User accounts, favorites and their HTTP routes."""

from .queries import AccountQueries
from .routes import configure_account_router
from .service import AccountService

__all__ = ["AccountQueries", "AccountService", "configure_account_router"]
