"""
Transition tables for every status-bearing entity.

Each table is closed: any (from, to) pair not listed is illegal. Tables are
built once at import and shared by the engine and the API layer.
"""

from typing import Dict, FrozenSet, Iterable, Mapping

from app.core.errors import InvalidTransition


class TransitionTable:
    def __init__(self, entity: str, initial: str, edges: Mapping[str, Iterable[str]]):
        self.entity = entity
        self.initial = initial
        self._edges: Dict[str, FrozenSet[str]] = {state: frozenset(targets) for state, targets in edges.items()}
        for targets in list(self._edges.values()):
            for target in targets:
                self._edges.setdefault(target, frozenset())
        if initial not in self._edges:
            raise ValueError(f"Initial state '{initial}' is not part of the {entity} table")

    @property
    def states(self) -> FrozenSet[str]:
        return frozenset(self._edges)

    @property
    def terminal_states(self) -> FrozenSet[str]:
        return frozenset(state for state, targets in self._edges.items() if not targets)

    def allowed_from(self, state: str) -> FrozenSet[str]:
        return self._edges.get(state, frozenset())

    def is_allowed(self, from_state: str, to_state: str) -> bool:
        return to_state in self.allowed_from(from_state)

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def check(self, from_state: str, to_state: str) -> None:
        if not self.is_allowed(from_state, to_state):
            raise InvalidTransition(self.entity, from_state, to_state)


APPLICATION = TransitionTable("application", "Pending", {
    "Pending": {"Under Review", "Rejected"},
    "Under Review": {"Shortlisted", "Rejected"},
    "Shortlisted": {"Selected", "Rejected"},
    "Selected": set(),
    "Rejected": set(),
})

INTERVIEW = TransitionTable("interview", "Scheduled", {
    "Scheduled": {"Completed", "Cancelled", "Rescheduled"},
    "Rescheduled": {"Scheduled"},
    "Completed": set(),
    "Cancelled": set(),
})

JOB = TransitionTable("job", "Active", {
    "Active": {"Paused", "Closed"},
    "Paused": {"Active", "Closed"},
    "Closed": set(),
})

INTERNSHIP = TransitionTable("internship", "Active", {
    "Active": {"On Hold", "Completed", "Cancelled"},
    "On Hold": {"Active", "Completed", "Cancelled"},
    "Completed": set(),
    "Cancelled": set(),
})

# Manual availability moves only. Applied/Selected are derived by the engine
# from open applications and internships; Completed is set when an internship completes.
STUDENT = TransitionTable("student", "Available", {
    "Available": {"Inactive"},
    "Inactive": {"Available"},
    "Completed": {"Available", "Inactive"},
    "Applied": set(),
    "Selected": set(),
})

TABLES: Dict[str, TransitionTable] = {
    table.entity: table for table in (APPLICATION, INTERVIEW, JOB, INTERNSHIP, STUDENT)
}

# Application states that block deleting the owning student/job/company
OPEN_APPLICATION_STATES = ("Pending", "Under Review", "Shortlisted")
OPEN_INTERNSHIP_STATES = ("Active", "On Hold")
OPEN_JOB_STATES = ("Active", "Paused")
