"""
Internal time rollup: client -> project -> task.

Only internally attributed entries populate the tree. Leaves own the entries;
project and client totals are summed from their leaves each time they are read.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd

from harvest_analyzer.config import NO_PROJECT, NO_TASK
from harvest_analyzer.data.normalize import TimeEntry, to_entries


@dataclass(frozen=True)
class TaskNode:
    """Leaf: one task within an internal project."""
    name: str
    hours: float = 0.0
    billable_hours: float = 0.0
    entries: Tuple[TimeEntry, ...] = ()

    def sorted_entries(self) -> List[TimeEntry]:
        """Entries newest first."""
        return sorted(self.entries, key=lambda e: e.work_date, reverse=True)


@dataclass(frozen=True)
class ProjectNode:
    name: str
    tasks: Dict[str, TaskNode] = field(default_factory=dict)

    @property
    def hours(self) -> float:
        return sum(task.hours for task in self.tasks.values())

    @property
    def billable_hours(self) -> float:
        return sum(task.billable_hours for task in self.tasks.values())

    def task(self, name: str) -> Optional[TaskNode]:
        return self.tasks.get(name)


@dataclass(frozen=True)
class ClientNode:
    name: str
    projects: Dict[str, ProjectNode] = field(default_factory=dict)

    @property
    def hours(self) -> float:
        return sum(project.hours for project in self.projects.values())

    @property
    def billable_hours(self) -> float:
        return sum(project.billable_hours for project in self.projects.values())

    def project(self, name: str) -> Optional[ProjectNode]:
        return self.projects.get(name)


@dataclass(frozen=True)
class InternalRollup:
    """Root of the internal time tree."""
    clients: Dict[str, ClientNode] = field(default_factory=dict)

    @property
    def total_hours(self) -> float:
        return sum(client.hours for client in self.clients.values())

    @property
    def total_billable_hours(self) -> float:
        return sum(client.billable_hours for client in self.clients.values())

    def client(self, name: str) -> Optional[ClientNode]:
        return self.clients.get(name)

    def leaves(self) -> Iterator[Tuple[str, str, TaskNode]]:
        """Yield (client, project, task node) for every leaf."""
        for client in self.clients.values():
            for project in client.projects.values():
                for task in project.tasks.values():
                    yield client.name, project.name, task

    def __len__(self) -> int:
        return len(self.clients)


def rollup_path(entry: TimeEntry) -> Tuple[str, str, str]:
    """Tree position of an entry, with placeholders for empty project/task."""
    return entry.client, entry.project or NO_PROJECT, entry.task or NO_TASK


def build_internal_rollup(df: pd.DataFrame) -> InternalRollup:
    """
    Build the client -> project -> task tree from internal entries of ``df``.

    Keys keep first-appearance order of ``df``.
    """
    internal = df[df["is_internal"].astype(bool)]

    # client -> project -> task -> [hours, billable_hours, entries]
    tree: Dict[str, Dict[str, Dict[str, list]]] = {}
    for entry in to_entries(internal):
        client, project, task = rollup_path(entry)
        leaf = tree.setdefault(client, {}).setdefault(project, {}).setdefault(task, [0.0, 0.0, []])
        leaf[0] += entry.hours
        if entry.is_billable:
            leaf[1] += entry.hours
        leaf[2].append(entry)

    return InternalRollup(clients={
        client: ClientNode(client, {
            project: ProjectNode(project, {
                task: TaskNode(task, hours, billable, tuple(entries))
                for task, (hours, billable, entries) in tasks.items()
            })
            for project, tasks in projects.items()
        })
        for client, projects in tree.items()
    })


def rollup_frame(rollup: InternalRollup) -> pd.DataFrame:
    """Flatten the rollup to one row per leaf for tabular display."""
    rows = [
        {
            "client": client,
            "project": project,
            "task": task.name,
            "hours": task.hours,
            "billable_hours": task.billable_hours,
            "entry_count": len(task.entries),
        }
        for client, project, task in rollup.leaves()
    ]
    return pd.DataFrame(rows, columns=["client", "project", "task", "hours", "billable_hours", "entry_count"])
