import unittest
import uuid
from datetime import datetime, timedelta, timezone

from core.context import RequestContext
from core.exceptions import AuthorizationError, InvalidStateTransition, NotFoundError, ValidationError
from core.lifecycle import ApplicationStatus, JobStatus, UserRole, is_terminal
from core.lifecycle.state_machine import ApplicationStateMachine, InterviewDetails
from database.models import Job

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestApplicationStateMachine(unittest.TestCase):

    def setUp(self):
        self.machine = ApplicationStateMachine()
        self.employer_id = uuid.uuid4()
        self.candidate_id = uuid.uuid4()
        self.job = Job(id=uuid.uuid4(), employer_id=self.employer_id, status=JobStatus.ACTIVE.value)
        self.candidate = RequestContext(self.candidate_id, UserRole.CANDIDATE, NOW)
        self.employer = RequestContext(self.employer_id, UserRole.EMPLOYER, NOW)

    def _submitted(self):
        return self.machine.submit(self.job, self.candidate, "I am a great fit").application

    def _interview(self):
        return InterviewDetails(scheduled_date=NOW + timedelta(days=1), type="phone")

    def test_submit_seeds_pending_history(self):
        outcome = self.machine.submit(self.job, self.candidate, "  I am a great fit  ")
        application = outcome.application

        self.assertEqual(application.status, ApplicationStatus.PENDING.value)
        self.assertEqual(application.cover_letter, "I am a great fit")
        self.assertEqual(application.employer_id, self.employer_id)
        self.assertEqual(len(application.status_history), 1)
        self.assertIsNone(application.status_history[0].updated_by)
        self.assertEqual(outcome.delta.applications, 1)
        self.assertIsNone(outcome.previous_status)

    def test_submit_requires_active_job(self):
        self.job.status = JobStatus.CLOSED.value
        with self.assertRaises(NotFoundError):
            self.machine.submit(self.job, self.candidate, "Hello")
        with self.assertRaises(NotFoundError):
            self.machine.submit(None, self.candidate, "Hello")

    def test_submit_requires_candidate_and_cover_letter(self):
        with self.assertRaises(AuthorizationError):
            self.machine.submit(self.job, self.employer, "Hello")
        with self.assertRaises(ValidationError):
            self.machine.submit(self.job, self.candidate, "   ")

    def test_each_transition_appends_history(self):
        application = self._submitted()
        self.machine.transition(application, ApplicationStatus.REVIEWED, self.employer)
        self.machine.schedule_interview(application, self._interview(), self.employer)
        outcome = self.machine.transition(application, ApplicationStatus.HIRED, self.employer)

        self.assertEqual(len(application.status_history), 4)
        self.assertEqual(application.status_history[-1].updated_by, self.employer_id)
        self.assertEqual(application.interview_details['type'], 'phone')
        self.assertEqual(outcome.delta.hired, 1)
        self.assertEqual(outcome.previous_status, ApplicationStatus.INTERVIEW.value)

    def test_default_note(self):
        application = self._submitted()
        self.machine.transition(application, ApplicationStatus.SHORTLISTED, self.employer)
        self.assertEqual(application.status_history[-1].note, "Status updated to shortlisted")

    def test_interview_note_carries_date(self):
        application = self._submitted()
        self.machine.schedule_interview(application, self._interview(), self.employer)
        self.assertEqual(application.status_history[-1].note, "Interview scheduled for 3/2/2024")

    def test_repeated_hired_counts_again(self):
        application = self._submitted()
        first = self.machine.transition(application, ApplicationStatus.HIRED, self.employer)
        second = self.machine.transition(application, ApplicationStatus.HIRED, self.employer)
        self.assertEqual(first.delta.hired + second.delta.hired, 2)
        self.assertEqual(len(application.status_history), 3)

    def test_idempotent_mode_skips_same_status(self):
        machine = ApplicationStateMachine(idempotent=True)
        application = machine.submit(self.job, self.candidate, "Hello").application
        machine.transition(application, ApplicationStatus.HIRED, self.employer)
        repeat = machine.transition(application, ApplicationStatus.HIRED, self.employer)

        self.assertFalse(repeat.changed)
        self.assertTrue(repeat.delta.is_empty)
        self.assertEqual(len(application.status_history), 2)

    def test_terminal_status_can_be_overwritten_by_employer(self):
        application = self._submitted()
        self.machine.transition(application, ApplicationStatus.REJECTED, self.employer)
        self.machine.transition(application, ApplicationStatus.REVIEWED, self.employer)
        self.assertEqual(application.status, ApplicationStatus.REVIEWED.value)

    def test_withdrawn_not_reachable_by_transition(self):
        application = self._submitted()
        with self.assertRaises(ValidationError):
            self.machine.transition(application, ApplicationStatus.WITHDRAWN, self.employer)

    def test_interview_requires_details(self):
        application = self._submitted()
        with self.assertRaises(ValidationError):
            self.machine.transition(application, ApplicationStatus.INTERVIEW, self.employer)

    def test_other_employer_cannot_transition(self):
        application = self._submitted()
        stranger = RequestContext(uuid.uuid4(), UserRole.EMPLOYER, NOW)
        with self.assertRaises(AuthorizationError):
            self.machine.transition(application, ApplicationStatus.REVIEWED, stranger)

    def test_admin_can_transition(self):
        application = self._submitted()
        admin = RequestContext(uuid.uuid4(), UserRole.ADMIN, NOW)
        self.machine.transition(application, ApplicationStatus.REVIEWED, admin)
        self.assertEqual(application.status, ApplicationStatus.REVIEWED.value)

    def test_withdraw(self):
        application = self._submitted()
        outcome = self.machine.withdraw(application, self.candidate, "Took another offer")

        self.assertTrue(application.is_deleted)
        self.assertEqual(application.deleted_at, NOW)
        self.assertEqual(application.withdrawal_reason, "Took another offer")
        self.assertEqual(application.status, ApplicationStatus.WITHDRAWN.value)
        self.assertEqual(outcome.delta.applications, -1)
        self.assertEqual(len(application.status_history), 2)

    def test_withdraw_default_reason(self):
        application = self._submitted()
        self.machine.withdraw(application, self.candidate, "   ")
        self.assertEqual(application.withdrawal_reason, "Withdrawn by candidate")

    def test_withdraw_blocked_from_hired_and_rejected(self):
        for status in (ApplicationStatus.HIRED, ApplicationStatus.REJECTED):
            application = self._submitted()
            self.machine.transition(application, status, self.employer)
            with self.assertRaises(InvalidStateTransition):
                self.machine.withdraw(application, self.candidate)
            self.assertFalse(application.is_deleted)

    def test_withdraw_only_by_applicant(self):
        application = self._submitted()
        other = RequestContext(uuid.uuid4(), UserRole.CANDIDATE, NOW)
        with self.assertRaises(AuthorizationError):
            self.machine.withdraw(application, other)

    def test_withdrawn_application_is_frozen(self):
        application = self._submitted()
        self.machine.withdraw(application, self.candidate)
        with self.assertRaises(NotFoundError):
            self.machine.transition(application, ApplicationStatus.REVIEWED, self.employer)
        with self.assertRaises(NotFoundError):
            self.machine.add_note(application, "late note", self.employer)
        with self.assertRaises(NotFoundError):
            self.machine.withdraw(application, self.candidate)

    def test_add_note(self):
        application = self._submitted()
        note = self.machine.add_note(application, "  Strong SQL  ", self.employer)
        self.assertEqual(note.text, "Strong SQL")
        self.assertEqual(note.created_by, self.employer_id)
        self.assertEqual(len(application.notes), 1)
        with self.assertRaises(ValidationError):
            self.machine.add_note(application, "  ", self.employer)


class TestStates(unittest.TestCase):

    def test_terminal_states(self):
        self.assertTrue(is_terminal("hired"))
        self.assertTrue(is_terminal("rejected"))
        self.assertTrue(is_terminal("withdrawn"))
        self.assertFalse(is_terminal("interview"))
        self.assertFalse(is_terminal("unknown"))

    def test_interview_details_serialize_camel_case(self):
        details = InterviewDetails.model_validate({
            'scheduledDate': '2024-03-02T10:00:00Z',
            'type': 'in-person',
            'location': 'HQ',
        })
        doc = details.to_document()
        self.assertEqual(doc['type'], 'in-person')
        self.assertEqual(doc['duration'], 60)
        self.assertIn('scheduledDate', doc)
        self.assertIn('meetingLink', doc)


if __name__ == "__main__":
    unittest.main()
