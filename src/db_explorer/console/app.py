"""Streamlit page for the Query Console.

Run with `db-explorer-console`, or `streamlit run src/db_explorer/console/app.py`.

Button callbacks run to completion before the page is drawn again, so the
page never renders while a query is in flight. The one-query-at-a-time rule
lives in `QueryConsole.submit`, which refuses work while `loading` is set.
"""
import sys

import streamlit as st

from db_explorer.config import settings
from db_explorer.console.client import GatewayClient
from db_explorer.console.render import STYLES, render_error_html, render_results_html
from db_explorer.console.state import ConsoleView, QueryConsole
from db_explorer.logging import setup_logging

QUERY_KEY = "query_text"


def get_console() -> QueryConsole:
    """One console per browser session; tables are loaded on first render."""
    if "console" not in st.session_state:
        client = GatewayClient(settings.gateway_url, timeout=settings.gateway_timeout_seconds)
        console = QueryConsole(client)
        console.load_tables()
        st.session_state.console = console
        st.session_state[QUERY_KEY] = ""
    return st.session_state.console


def _execute(console: QueryConsole) -> None:
    console.query_text = st.session_state[QUERY_KEY]
    console.submit()


def _run_canned(console: QueryConsole, label: str) -> None:
    console.run_canned(label)
    st.session_state[QUERY_KEY] = console.query_text


def render_sidebar(console: QueryConsole) -> None:
    with st.sidebar:
        st.header("Tables")
        if not console.tables:
            st.caption("No tables loaded.")
        for table in console.tables:
            selected = console.selected_table == table
            st.button(
                table,
                key=f"table_{table}",
                on_click=console.select_table,
                args=(table,),
                type="primary" if selected else "secondary",
            )
            if selected:
                for action in console.canned_actions():
                    st.button(
                        action.label,
                        key=f"canned_{table}_{action.label}",
                        on_click=_run_canned,
                        args=(console, action.label),
                    )
        st.button("Reload tables", on_click=console.load_tables)


def render_result_area(console: QueryConsole) -> None:
    view = console.view
    if view is ConsoleView.ERROR:
        st.markdown(render_error_html(console.error or ""), unsafe_allow_html=True)
    elif view in (ConsoleView.EMPTY, ConsoleView.RESULTS):
        st.subheader("Query Results")
        st.markdown(render_results_html(console.results or []), unsafe_allow_html=True)


def main() -> None:
    st.set_page_config(page_title="Database Explorer", layout="wide")
    setup_logging(settings.log_level)
    st.markdown(STYLES, unsafe_allow_html=True)
    console = get_console()

    st.title("Database Explorer")
    st.caption(f"Connected to: {console.gateway_url}")
    render_sidebar(console)

    st.subheader("SQL Query")
    st.text_area(
        "SQL query",
        key=QUERY_KEY,
        height=160,
        placeholder="Enter your SQL query here...",
        label_visibility="collapsed",
    )
    st.button(
        "Execute Query",
        on_click=_execute,
        args=(console,),
        type="primary",
    )
    render_result_area(console)


def run() -> None:
    """Console script entry point: launch this page under Streamlit."""
    from streamlit.web import cli as stcli

    sys.argv = ["streamlit", "run", __file__, *sys.argv[1:]]
    sys.exit(stcli.main())


if __name__ == "__main__":
    main()
