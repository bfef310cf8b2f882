from __future__ import annotations

__all__ = ["IDs", "facet_id"]


class IDs:
    class Store:
        # mirrors the browser's local store (session + favourites keys)
        CLIENT_STATE = "client-state"
        FILTER_STATE = "filter-state"

    class Control:
        # Auth
        LOGIN_CARD = "login-card"
        LOGIN_IDENTIFIER = "login-identifier"
        LOGIN_SECRET = "login-secret"
        LOGIN_BTN = "login-btn"
        LOGIN_MESSAGE = "login-message"
        LOGOUT_BTN = "logout-btn"
        USER_BADGE = "user-badge"
        PLATFORM_TOOLS = "platform-tools"

        # Dataset + filters
        DATASET_SELECT = "dataset-select"
        FACET_CONTAINER = "facet-container"
        SEARCH_INPUT = "search-input"
        SORT_SELECT = "sort-select"
        CLEAR_FILTERS_BTN = "clear-filters-btn"

        # Results
        ACCESS_MESSAGE = "access-message"
        RESULTS_TABLE = "results-table"
        RESULT_SUMMARY = "result-summary"
        METRICS_ROW = "metrics-row"
        PREV_PAGE_BTN = "prev-page-btn"
        NEXT_PAGE_BTN = "next-page-btn"
        PAGE_LABEL = "page-label"
        CHARTS = "charts"
        FAVORITE_BTN = "favorite-btn"
        FAVORITE_STATUS = "favorite-status"
        RECORD_DETAIL = "record-detail"

        # Downloads
        EXPORT_CSV_BTN = "export-csv-btn"
        EXPORT_JSON_BTN = "export-json-btn"
        EXPORT_REPORT_BTN = "export-report-btn"
        DOWNLOAD = "download"

    class Pattern:
        # pattern-matching "type" strings
        FACET = "facet-select"


def facet_id(attribute: str) -> dict:
    return {"type": IDs.Pattern.FACET, "attribute": attribute}
