"""Query Console state: query text, last result or error, table selection."""
from enum import Enum
from typing import Any, Optional

from ..errors import DatabaseError, TransportError
from ..logging import logger
from .canned import CannedQuery, canned_queries
from .client import GatewayClient

CONNECT_FAILED = "Failed to connect to the database server"
EXECUTE_FAILED = "Failed to execute query"


class ConsoleView(Enum):
    """What the result area currently shows."""
    IDLE = "idle"          # Nothing submitted yet
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"        # Successful query, zero rows
    RESULTS = "results"


class QueryConsole:
    """State machine behind the console page.

    At most one query is in flight: while `loading` is true, further
    submissions are refused. After a submission completes exactly one of
    `results` and `error` is set.
    """

    def __init__(self, client: GatewayClient) -> None:
        self._client = client
        self.query_text: str = ""
        self.results: Optional[list[dict[str, Any]]] = None
        self.error: Optional[str] = None
        self.loading: bool = False
        self.tables: list[str] = []
        self.selected_table: Optional[str] = None

    @property
    def gateway_url(self) -> str:
        return self._client.base_url

    @property
    def view(self) -> ConsoleView:
        if self.loading:
            return ConsoleView.LOADING
        if self.error is not None:
            return ConsoleView.ERROR
        if self.results is None:
            return ConsoleView.IDLE
        return ConsoleView.RESULTS if self.results else ConsoleView.EMPTY

    @property
    def can_submit(self) -> bool:
        return not self.loading and bool(self.query_text.strip())

    def load_tables(self) -> bool:
        """Fetch the table list. Failure is reported, never raised.

        Returns:
            True if the list was loaded.
        """
        try:
            self.tables = self._client.list_tables()
        except (TransportError, DatabaseError) as e:
            logger.warning("Could not load table list: %s", e.message)
            self.tables = []
            self.results = None
            self.error = CONNECT_FAILED
            return False
        if self.selected_table not in self.tables:
            self.selected_table = None
        if self.error == CONNECT_FAILED:
            self.error = None
        return True

    def select_table(self, name: str) -> bool:
        """Select a table from the loaded list; unknown names are ignored."""
        if name not in self.tables:
            return False
        self.selected_table = name
        return True

    def canned_actions(self) -> list[CannedQuery]:
        if self.selected_table is None:
            return []
        return canned_queries(self.selected_table)

    def run_canned(self, label: str) -> bool:
        """Submit the selected table's canned query called `label`.

        Raises:
            KeyError: If no canned query has that label.
        """
        actions = {action.label: action for action in self.canned_actions()}
        if not actions:
            return False
        action = actions[label]
        if self.loading:
            return False
        self.query_text = action.sql
        return self.submit(action.sql)

    def submit(self, text: Optional[str] = None) -> bool:
        """Send `text` (default: the current query text) to the Gateway.

        Blank text is a no-op, as is a submission while another one is in
        flight.

        Returns:
            True if a request was made.
        """
        sql = self.query_text if text is None else text
        if not sql.strip():
            return False
        if self.loading:
            logger.info("Ignoring submission while a query is running")
            return False

        self.loading = True
        self.error = None
        try:
            outcome = self._client.run_query(sql)
        except TransportError as e:
            logger.warning("Query round trip failed: %s", e.message)
            self.error = EXECUTE_FAILED
            self.results = None
        else:
            if outcome.ok:
                self.results = outcome.results
                self.error = None
            else:
                self.error = outcome.error
                self.results = None
        finally:
            self.loading = False
        return True
