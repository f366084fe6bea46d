"""Tests for the Query Console state machine and canned queries."""
from unittest.mock import Mock

import pytest

from db_explorer.console.canned import canned_queries, quote_identifier, quote_literal
from db_explorer.console.client import GatewayClient, QueryOutcome
from db_explorer.console.state import CONNECT_FAILED, EXECUTE_FAILED, ConsoleView, QueryConsole
from db_explorer.errors import DatabaseError, TransportError


@pytest.fixture
def gateway():
    client = Mock(spec=GatewayClient)
    client.base_url = "http://localhost:5000"
    client.list_tables.return_value = ["event", "person"]
    client.run_query.return_value = QueryOutcome(results=[{"x": 1}])
    return client


@pytest.fixture
def console(gateway):
    return QueryConsole(gateway)


def snapshot(console):
    return (console.query_text, console.results, console.error, console.loading,
            console.tables, console.selected_table)


class TestInitialState:

    def test_idle(self, console):
        assert console.view is ConsoleView.IDLE
        assert console.results is None
        assert console.error is None
        assert not console.loading
        assert not console.can_submit


class TestLoadTables:

    def test_tables_become_selectable(self, console):
        assert console.load_tables() is True
        assert console.tables == ["event", "person"]
        assert console.error is None

    def test_failure_is_non_fatal(self, console, gateway):
        gateway.list_tables.side_effect = TransportError("Gateway request failed: refused")

        assert console.load_tables() is False
        assert console.tables == []
        assert console.error == CONNECT_FAILED

    def test_resubmission_still_works_after_connect_failure(self, console, gateway):
        gateway.list_tables.side_effect = TransportError("refused")
        console.load_tables()

        assert console.submit("SELECT 1 as x") is True
        assert console.results == [{"x": 1}]
        assert console.error is None

    def test_successful_reload_clears_connect_error(self, console, gateway):
        gateway.list_tables.side_effect = TransportError("refused")
        console.load_tables()
        gateway.list_tables.side_effect = None

        assert console.load_tables() is True
        assert console.error is None
        assert console.view is ConsoleView.IDLE

    def test_reload_keeps_query_error(self, console, gateway):
        gateway.run_query.return_value = QueryOutcome(error="syntax error")
        console.submit("SELEC 1")

        console.load_tables()

        assert console.error == "syntax error"

    def test_gateway_error_payload_is_a_connect_failure(self, console, gateway):
        gateway.list_tables.side_effect = DatabaseError("permission denied for schema public")

        assert console.load_tables() is False
        assert console.tables == []
        assert console.error == CONNECT_FAILED

    def test_failed_reload_drops_previous_results(self, console, gateway):
        console.load_tables()
        console.submit("SELECT 1 as x")
        gateway.list_tables.side_effect = TransportError("refused")

        console.load_tables()

        assert (console.results is None) != (console.error is None)
        assert console.results is None
        assert console.view is ConsoleView.ERROR

    def test_reload_drops_stale_selection(self, console, gateway):
        console.load_tables()
        console.select_table("event")
        gateway.list_tables.return_value = ["person"]

        console.load_tables()

        assert console.selected_table is None


class TestSubmit:

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    def test_blank_text_is_a_no_op(self, console, gateway, text):
        console.query_text = text
        before = snapshot(console)

        assert console.submit() is False
        assert console.submit(text) is False
        assert snapshot(console) == before
        gateway.run_query.assert_not_called()

    def test_select_one_as_x(self, console, gateway):
        console.query_text = "SELECT 1 as x"

        assert console.submit() is True

        gateway.run_query.assert_called_once_with("SELECT 1 as x")
        assert console.results == [{"x": 1}]
        assert console.error is None
        assert console.view is ConsoleView.RESULTS
        assert not console.loading

    def test_error_clears_results(self, console, gateway):
        console.submit("SELECT 1 as x")
        message = 'relation "nonexistent_table" does not exist'
        gateway.run_query.return_value = QueryOutcome(error=message)

        console.submit("SELECT * FROM nonexistent_table")

        assert console.error == message
        assert console.results is None
        assert console.view is ConsoleView.ERROR

    def test_success_clears_error(self, console, gateway):
        gateway.run_query.return_value = QueryOutcome(error="boom")
        console.submit("bad sql")
        gateway.run_query.return_value = QueryOutcome(results=[])

        console.submit("SELECT * FROM event WHERE false")

        assert console.error is None
        assert console.results == []
        assert console.view is ConsoleView.EMPTY

    def test_transport_failure_is_generic_and_clears_loading(self, console, gateway):
        gateway.run_query.side_effect = TransportError("Gateway request failed: DNS")

        assert console.submit("SELECT 1") is True

        assert console.error == EXECUTE_FAILED
        assert console.results is None
        assert not console.loading

    def test_loading_cleared_on_unexpected_failure(self, console, gateway):
        gateway.run_query.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            console.submit("SELECT 1")
        assert not console.loading

    def test_exactly_one_of_results_or_error(self, console, gateway):
        outcomes = [
            QueryOutcome(results=[{"x": 1}]),
            QueryOutcome(error="boom"),
            QueryOutcome(results=[]),
            TransportError("down"),
        ]
        for outcome in outcomes:
            if isinstance(outcome, Exception):
                gateway.run_query.side_effect = outcome
            else:
                gateway.run_query.side_effect = None
                gateway.run_query.return_value = outcome
            console.submit("SELECT 1")
            assert (console.results is None) != (console.error is None)

    def test_no_second_submission_while_loading(self, console, gateway):
        seen = []

        def nested_submit(sql):
            # A second click arriving while the first query is in flight
            seen.append(console.submit("SELECT 2"))
            return QueryOutcome(results=[{"n": 1}])

        gateway.run_query.side_effect = nested_submit

        assert console.submit("SELECT 1") is True
        assert seen == [False]
        assert gateway.run_query.call_count == 1
        assert console.results == [{"n": 1}]

    def test_loading_view_while_in_flight(self, console, gateway):
        views = []

        def observe(sql):
            views.append((console.view, console.can_submit))
            return QueryOutcome(results=[])

        gateway.run_query.side_effect = observe
        console.query_text = "SELECT 1"
        console.submit()

        assert views == [(ConsoleView.LOADING, False)]


class TestCannedQueries:

    def test_selecting_a_table_exposes_three_actions(self, console):
        console.load_tables()

        assert console.canned_actions() == []
        assert console.select_table("event") is True
        assert [a.label for a in console.canned_actions()] == ["Show all", "Count", "Describe structure"]

    def test_unknown_table_cannot_be_selected(self, console):
        console.load_tables()

        assert console.select_table("secrets; DROP TABLE person") is False
        assert console.selected_table is None

    def test_run_canned_behaves_like_submit(self, console, gateway):
        console.load_tables()
        console.select_table("event")

        assert console.run_canned("Show all") is True

        gateway.run_query.assert_called_once_with('SELECT * FROM "event" LIMIT 10')
        assert console.query_text == 'SELECT * FROM "event" LIMIT 10'
        assert console.results == [{"x": 1}]

    def test_run_canned_without_selection(self, console, gateway):
        assert console.run_canned("Count") is False
        gateway.run_query.assert_not_called()

    def test_run_canned_unknown_label(self, console):
        console.load_tables()
        console.select_table("event")

        with pytest.raises(KeyError):
            console.run_canned("Drop")

    def test_templates(self):
        queries = {q.label: q.sql for q in canned_queries("person")}

        assert queries["Show all"] == 'SELECT * FROM "person" LIMIT 10'
        assert queries["Count"] == 'SELECT COUNT(*) AS total FROM "person"'
        assert "information_schema.columns" in queries["Describe structure"]
        assert "table_name = 'person'" in queries["Describe structure"]

    def test_quoting(self):
        assert quote_identifier('we"ird') == '"we""ird"'
        assert quote_literal("o'brien") == "'o''brien'"
