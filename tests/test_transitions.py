"""Transition tables: closed, complete and consistent with the status enums."""

import pytest

from app.core.errors import InvalidTransition
from app.schemas.schemas import ApplicationStatus, InterviewStatus, InternshipStatus, JobStatus, StudentStatus
from app.services.transitions import APPLICATION, INTERNSHIP, INTERVIEW, JOB, STUDENT, TABLES, TransitionTable


class TestTransitionTables:
    @pytest.mark.parametrize("table, enum", [
        (APPLICATION, ApplicationStatus),
        (INTERVIEW, InterviewStatus),
        (JOB, JobStatus),
        (INTERNSHIP, InternshipStatus),
        (STUDENT, StudentStatus),
    ])
    def test_states_match_api_enums(self, table, enum):
        assert table.states == {member.value for member in enum}

    def test_every_pair_is_decided(self):
        """Each (from, to) pair is either allowed or rejected with InvalidTransition."""
        for table in TABLES.values():
            for from_state in table.states:
                for to_state in table.states:
                    if table.is_allowed(from_state, to_state):
                        table.check(from_state, to_state)
                    else:
                        with pytest.raises(InvalidTransition):
                            table.check(from_state, to_state)

    def test_application_workflow(self):
        assert APPLICATION.initial == "Pending"
        assert APPLICATION.allowed_from("Pending") == {"Under Review", "Rejected"}
        assert APPLICATION.allowed_from("Under Review") == {"Shortlisted", "Rejected"}
        assert APPLICATION.allowed_from("Shortlisted") == {"Selected", "Rejected"}
        assert APPLICATION.terminal_states == {"Selected", "Rejected"}
        assert not APPLICATION.is_allowed("Pending", "Selected")

    def test_interview_can_return_to_scheduled_only_after_reschedule(self):
        assert INTERVIEW.is_allowed("Rescheduled", "Scheduled")
        assert not INTERVIEW.is_allowed("Completed", "Scheduled")
        assert not INTERVIEW.is_allowed("Cancelled", "Scheduled")

    def test_closed_job_is_terminal(self):
        assert JOB.is_terminal("Closed")
        assert JOB.is_allowed("Paused", "Active")
        assert not JOB.is_allowed("Closed", "Active")

    def test_student_engine_states_are_not_manually_reachable(self):
        for state in STUDENT.states:
            assert not STUDENT.is_allowed(state, "Applied")
            assert not STUDENT.is_allowed(state, "Selected")

    def test_self_transitions_are_illegal(self):
        for table in TABLES.values():
            for state in table.states:
                assert not table.is_allowed(state, state)

    def test_unknown_state_has_no_successors(self):
        assert APPLICATION.allowed_from("Archived") == frozenset()
        with pytest.raises(InvalidTransition) as exc_info:
            APPLICATION.check("Archived", "Pending")
        assert exc_info.value.status_code == 422

    def test_initial_state_must_belong_to_table(self):
        with pytest.raises(ValueError):
            TransitionTable("widget", "Draft", {"Open": {"Closed"}})
