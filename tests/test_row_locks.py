"""
Tests that read-modify-write paths take their row locks.

SQLite ignores FOR UPDATE, so these assert the locking queryset is built
rather than exercising real contention.
"""

import pytest
from complaints.models import Citizen, Complaint, PointTransaction
from complaints.services.complaint_service import ComplaintService
from complaints.services.gamification_service import GamificationService
from complaints.services.lifecycle_service import LifecycleService
from complaints.services.verification_service import VerificationService


@pytest.mark.django_db
class TestComplaintRowLock:
    """Status, vote and reclassification changes lock the complaint row."""

    def test_transition_locks_complaint(self, mocker, create_complaint):
        complaint = create_complaint()
        spy = mocker.spy(Complaint.objects, "select_for_update")

        LifecycleService().transition(complaint.complaint_id, Complaint.STATUS_ASSIGNED)

        spy.assert_called_once_with()

    def test_vote_locks_complaint(self, mocker, create_user, create_complaint):
        complaint = create_complaint()
        voter = create_user()
        spy = mocker.spy(Complaint.objects, "select_for_update")

        VerificationService().cast_vote(complaint.complaint_id, voter.pk, "yes")

        spy.assert_called_once_with()

    def test_consensus_resolution_locks_once(self, mocker, create_user, create_complaint):
        complaint = create_complaint()
        VerificationService().cast_vote(complaint.complaint_id, create_user().pk, "no")
        spy = mocker.spy(Complaint.objects, "select_for_update")

        result = VerificationService().cast_vote(complaint.complaint_id, create_user().pk, "no")

        assert result["complaint"].status == Complaint.STATUS_RESOLVED
        spy.assert_called_once_with()

    def test_reclassification_locks_complaint(self, mocker, create_complaint):
        complaint = create_complaint()
        spy = mocker.spy(Complaint.objects, "select_for_update")

        ComplaintService().apply_classification(complaint.complaint_id, "drainage", 70)

        spy.assert_called_once_with()


@pytest.mark.django_db
class TestUserRowLock:
    """Point awards lock the citizen row."""

    def test_award_points_locks_user(self, mocker, create_user):
        user = create_user()
        spy = mocker.spy(Citizen.objects, "select_for_update")

        result = GamificationService().award_points(user.pk, PointTransaction.ACTION_VERIFY_COMPLAINT)

        spy.assert_called_once_with()
        assert result["points_earned"] == 5

    def test_vote_reward_locks_voter(self, mocker, create_user, create_complaint):
        complaint = create_complaint()
        voter = create_user()
        spy = mocker.spy(Citizen.objects, "select_for_update")

        VerificationService().cast_vote(complaint.complaint_id, voter.pk, "cant_verify")

        assert spy.call_count >= 1
