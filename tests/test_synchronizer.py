"""
Aggregate counter and flag propagation against a real (SQLite) session.
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from core.aggregates import AggregateSynchronizer
from core.context import utcnow
from core.exceptions import AggregateSyncError
from core.lifecycle.state_machine import ApplicationStateMachine, CounterDelta
from core.lifecycle.states import ApplicationStatus, JobStatus
from database.models import Job, User

pytestmark = pytest.mark.db


def test_apply_job_deltas_increments_counters(db_session, make_user, make_job):
    job = make_job(make_user("employer"))
    sync = AggregateSynchronizer(db_session)

    sync.apply_job_deltas(job.id, CounterDelta(applications=1))
    sync.apply_job_deltas(job.id, CounterDelta(applications=1, hired=1))
    sync.apply_job_deltas(job.id, CounterDelta(applications=-1))

    db_session.refresh(job)
    assert job.applications_count == 1
    assert job.hired_count == 1


def test_empty_delta_writes_nothing(db_session, make_user, make_job):
    job = make_job(make_user("employer"))
    sync = AggregateSynchronizer(db_session)
    with patch.object(sync, "_execute") as execute:
        sync.apply_job_deltas(job.id, CounterDelta())
    execute.assert_not_called()


def test_failed_counter_update_raises_sync_error(db_session, make_user, make_job):
    job = make_job(make_user("employer"))
    job_id = job.id
    sync = AggregateSynchronizer(db_session)
    with patch.object(db_session, "execute", side_effect=OperationalError("UPDATE", {}, Exception("locked"))):
        with pytest.raises(AggregateSyncError):
            sync.apply_job_deltas(job_id, CounterDelta(hired=1))


def test_profile_completion_only_written_when_changed(db_session, make_user):
    user = make_user("candidate")
    sync = AggregateSynchronizer(db_session)

    assert sync.sync_profile_completion(user.id, False) is False
    assert sync.sync_profile_completion(user.id, True) is True
    assert sync.sync_profile_completion(user.id, True) is False

    db_session.refresh(user)
    assert user.is_profile_complete is True

    assert sync.reset_profile_completion(user.id) is True
    db_session.refresh(user)
    assert user.is_profile_complete is False


def test_recompute_job_counters(db_session, make_user, make_job, ctx_for):
    employer = make_user("employer")
    job = make_job(employer, applications_count=7, hired_count=3)
    machine = ApplicationStateMachine()

    for _ in range(2):
        candidate = make_user("candidate")
        outcome = machine.submit(job, ctx_for(candidate), "Please consider me")
        db_session.add(outcome.application)
    db_session.commit()

    hired = db_session.get(Job, job.id).applications[0]
    machine.transition(hired, ApplicationStatus.HIRED, ctx_for(employer))
    db_session.commit()

    counts = AggregateSynchronizer(db_session).recompute_job_counters(job.id)
    assert counts == {'applicationsCount': 2, 'hiredCount': 1}
    db_session.refresh(job)
    assert job.applications_count == 2


def test_refresh_job_status_expires_overdue_job(db_session, make_user, make_job):
    now = utcnow()
    job = make_job(make_user("employer"), expiration_date=now - timedelta(days=1))
    sync = AggregateSynchronizer(db_session)

    assert sync.refresh_job_status(job, now) is True
    assert job.status == JobStatus.EXPIRED.value
    assert sync.refresh_job_status(job, now) is False


def test_expire_overdue_jobs_scoped_to_employer(db_session, make_user, make_job):
    now = utcnow()
    mine, theirs = make_user("employer"), make_user("employer")
    make_job(mine, expiration_date=now - timedelta(days=2))
    other = make_job(theirs, expiration_date=now - timedelta(days=2))
    fresh = make_job(mine)

    assert AggregateSynchronizer(db_session).expire_overdue_jobs(now, employer_id=mine.id) == 1
    db_session.refresh(other)
    db_session.refresh(fresh)
    assert other.status == JobStatus.ACTIVE.value
    assert fresh.status == JobStatus.ACTIVE.value


def test_missing_user_is_not_an_error(db_session):
    assert AggregateSynchronizer(db_session).sync_profile_completion(uuid.uuid4(), True) is False
    assert db_session.query(User).count() == 0
