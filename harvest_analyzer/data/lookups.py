"""
Filter option sets derived from the normalized entries.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

import pandas as pd

from harvest_analyzer.config import ALL, AnalyticsConfig, config as default_config


@dataclass(frozen=True)
class FilterOptions:
    """Choices available to each filter control."""
    employees: Tuple[str, ...] = ()
    clients: Tuple[str, ...] = ()
    client_is_internal: Mapping[str, bool] = field(default_factory=dict, hash=False)
    projects: Tuple[str, ...] = ()
    tasks: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "client_is_internal", MappingProxyType(dict(self.client_is_internal)))

    @property
    def internal_clients(self) -> Tuple[str, ...]:
        return tuple(c for c in self.clients if self.client_is_internal.get(c, False))

    @property
    def external_clients(self) -> Tuple[str, ...]:
        return tuple(c for c in self.clients if not self.client_is_internal.get(c, False))


def _sorted_unique(values: pd.Series, drop_empty: bool = True) -> List[str]:
    unique = values.dropna().astype(str).unique().tolist()
    if drop_empty:
        unique = [value for value in unique if value]
    return sorted(unique)


def build_filter_options(df: pd.DataFrame,
                         selected_client: Optional[str] = ALL,
                         selected_project: Optional[str] = ALL,
                         config: Optional[AnalyticsConfig] = None) -> FilterOptions:
    """
    Build filter options from the full normalized set.

    Projects are scoped to the selected client. Tasks are looked up by project
    name alone, so clients sharing a project name share its task list.
    """
    config = config or default_config

    employees = _sorted_unique(df["employee_name"], drop_empty=False)
    clients = _sorted_unique(df["client"])

    projects: List[str] = []
    if selected_client not in (None, ALL):
        projects = _sorted_unique(df.loc[df["client"] == selected_client, "project"])

    tasks: List[str] = []
    if selected_project not in (None, ALL):
        tasks = _sorted_unique(df.loc[df["project"] == selected_project, "task"])

    return FilterOptions(
        employees=tuple(employees),
        clients=tuple(clients),
        client_is_internal={c: config.is_internal_client(c) for c in clients},
        projects=tuple(projects),
        tasks=tuple(tasks),
    )
