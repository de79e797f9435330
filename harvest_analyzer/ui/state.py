"""
Session state management for Streamlit app.

Filter widgets write into session state; the client -> project -> task
cascade is applied in the widget callbacks through FilterCriteria so the
reset happens in the same rerun as the selection.
"""
import streamlit as st
from typing import Any, Dict

from harvest_analyzer.config import ALL
from harvest_analyzer.data.filters import FilterCriteria


# =============================================================================
# STATE KEYS
# =============================================================================

STATE_KEYS = {
    "employee": "filter_employee",
    "client": "filter_client",
    "project": "filter_project",
    "task": "filter_task",
    "date_range": "filter_date_range",
}


# =============================================================================
# DEFAULT VALUES
# =============================================================================

DEFAULTS = {
    "filter_employee": ALL,
    "filter_client": ALL,
    "filter_project": ALL,
    "filter_task": ALL,
    "filter_date_range": "all",
    "upload_digest": None,
}


# =============================================================================
# STATE HELPERS
# =============================================================================

def init_state():
    """Initialize all session state keys with defaults."""
    for key, default in DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = default


def get_state(key: str) -> Any:
    """Get state value with default fallback."""
    init_state()
    return st.session_state.get(key, DEFAULTS.get(key))


def set_state(key: str, value: Any):
    """Set state value."""
    st.session_state[key] = value


def reset_state():
    """Reset all state to defaults."""
    for key, default in DEFAULTS.items():
        st.session_state[key] = default


# =============================================================================
# FILTER CRITERIA
# =============================================================================

def get_criteria() -> FilterCriteria:
    """Current filter snapshot."""
    return FilterCriteria(**{field: get_state(key) for field, key in STATE_KEYS.items()})


def set_criteria(criteria: FilterCriteria):
    """Write a filter snapshot back to session state."""
    values: Dict[str, Any] = {
        "employee": criteria.employee,
        "client": criteria.client,
        "project": criteria.project,
        "task": criteria.task,
        "date_range": criteria.date_range,
    }
    for field, key in STATE_KEYS.items():
        set_state(key, values[field])


def on_client_change():
    """Client changed: project and task reset."""
    set_criteria(get_criteria().with_client(get_state("filter_client")))


def on_project_change():
    """Project changed: task resets."""
    set_criteria(get_criteria().with_project(get_state("filter_project")))


def reset_filters():
    """Clear every filter."""
    set_criteria(FilterCriteria())
