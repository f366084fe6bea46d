"""Query Console: gateway client, state and rendering."""
from .client import GatewayClient, QueryOutcome
from .state import QueryConsole, ConsoleView

__all__ = ["GatewayClient", "QueryOutcome", "QueryConsole", "ConsoleView"]
