"""
Paginated table viewer for record lists.

paginate() and to_csv() are plain functions; TableViewer.render() draws one
page with Streamlit, one st.columns row per record, and dispatches row
actions only when their button is clicked.
"""

import streamlit as st
import pandas as pd
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .data_fetcher import FetchState
from .ui_feedback import LoadingIndicator

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5
EMPTY_MESSAGE = "No records found."


@dataclass
class Page:
    """One window of a record list."""

    rows: List[Any] = field(default_factory=list)
    page_index: int = 0
    page_count: int = 1
    total: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index < self.page_count - 1

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass
class CellAction:
    """Button drawn inside a cell; ``callback(record)`` runs on click."""

    label: str
    callback: Optional[Callable[[Any], None]] = None


@dataclass(frozen=True)
class Column:
    """Binds a record key (possibly synthetic) to a header and an optional render transform."""

    key: str
    label: str
    render: Optional[Callable[[Any], Any]] = None
    width: float = 2


def paginate(data: Sequence[Any], page_size: int, page_index: int) -> Page:
    """
    Slice ``data`` into a fixed-size page.

    Args:
        data: Full record list
        page_size: Rows per page (must be positive)
        page_index: Requested zero-based page; clamped to the valid range

    Returns:
        Page holding the rows of the clamped page index
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    total = len(data)
    page_count = max(1, -(-total // page_size))
    index = min(max(0, int(page_index)), page_count - 1)
    start = index * page_size
    return Page(rows=list(data[start:start + page_size]), page_index=index,
                page_count=page_count, total=total)


def cell_value(record: Any, column: Column) -> Any:
    """Raw value for ``column.key`` or the column's render transform applied to the record."""
    if column.render is not None:
        return column.render(record)
    if isinstance(record, Mapping):
        return record.get(column.key)
    return getattr(record, column.key, None)


def to_csv(data: Sequence[Any], columns: Sequence[Column]) -> str:
    """
    Export the full record list as CSV.

    Render transforms are applied; columns whose cells are actions are skipped.
    """
    rows = []
    data_columns: List[Column] = []
    for column in columns:
        if data and isinstance(cell_value(data[0], column), CellAction):
            continue
        data_columns.append(column)

    for record in data:
        rows.append({column.label: cell_value(record, column) for column in data_columns})

    df = pd.DataFrame(rows, columns=[column.label for column in data_columns])
    return df.to_csv(index=False)


class TableViewer:
    """Renders a fetched record list as a paginated table."""

    @staticmethod
    def page_state_key(key: str) -> str:
        return f"{key}_page_index"

    @staticmethod
    def render(
        fetch: FetchState,
        columns: Sequence[Column],
        key: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        on_action: Optional[Callable[[Any], None]] = None,
        empty_message: str = EMPTY_MESSAGE,
        export_name: Optional[str] = None,
    ) -> Optional[Page]:
        """
        Render loading, error, empty or populated state for one fetch.

        Args:
            fetch: State of the list fetch
            columns: Column definitions
            key: Widget/session key prefix for this table
            page_size: Rows per page
            on_action: Fallback callback for CellActions without their own
            empty_message: Text shown for an empty record list
            export_name: When set, offer a CSV download under this file name

        Returns:
            The rendered Page, or None when no rows were drawn
        """
        if fetch.is_loading:
            LoadingIndicator.placeholder("Loading...")
            return None

        if fetch.is_error:
            st.error(fetch.error)
            return None

        records = list(fetch.data or [])
        if not records:
            TableViewer._render_empty_state(empty_message)
            return None

        state_key = TableViewer.page_state_key(key)
        page = paginate(records, page_size, st.session_state.get(state_key, 0))
        st.session_state[state_key] = page.page_index

        TableViewer._render_header(columns)
        for offset, record in enumerate(page.rows):
            row_index = page.page_index * page_size + offset
            TableViewer._render_row(record, columns, f"{key}_{row_index}", on_action)

        TableViewer._render_pagination(page, state_key, key)

        if export_name:
            st.download_button(
                label="📥 Download CSV",
                data=to_csv(records, columns),
                file_name=export_name,
                mime="text/csv",
                key=f"{key}_export",
            )
        return page

    @staticmethod
    def _render_empty_state(message: str):
        st.info(message)

    @staticmethod
    def _render_header(columns: Sequence[Column]):
        cols = st.columns([column.width for column in columns])
        for col, column in zip(cols, columns):
            with col:
                st.markdown(f"**{column.label}**")

    @staticmethod
    def _render_row(record: Any, columns: Sequence[Column], row_key: str,
                    on_action: Optional[Callable[[Any], None]]):
        cols = st.columns([column.width for column in columns])
        for col, column in zip(cols, columns):
            value = cell_value(record, column)
            with col:
                if isinstance(value, CellAction):
                    if st.button(value.label, key=f"{row_key}_{column.key}"):
                        callback = value.callback or on_action
                        if callback is not None:
                            logger.debug(f"Row action '{value.label}' clicked on {row_key}")
                            callback(record)
                else:
                    st.write("" if value is None else value)

    @staticmethod
    def _render_pagination(page: Page, state_key: str, key: str):
        if page.page_count <= 1:
            return

        col1, col2, col3 = st.columns([1, 2, 1])
        with col1:
            if st.button("◀ Previous", key=f"{key}_prev", disabled=not page.has_previous):
                st.session_state[state_key] = page.page_index - 1
                st.rerun()
        with col2:
            st.caption(f"Page {page.page_index + 1} of {page.page_count} ({page.total} records)")
        with col3:
            if st.button("Next ▶", key=f"{key}_next", disabled=not page.has_next):
                st.session_state[state_key] = page.page_index + 1
                st.rerun()
