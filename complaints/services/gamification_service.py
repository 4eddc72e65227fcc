import logging
from datetime import timedelta
from django.db import transaction
from django.db.models import Count, F, Min
from django.db.models.functions import TruncDate
from django.utils import timezone
from complaints.exceptions import UserNotFound
from complaints.models import (
    Badge,
    Challenge,
    Citizen,
    Complaint,
    Notification,
    PointTransaction,
    UserBadge,
    UserChallenge,
)
from complaints.rabbitmq.publisher import publish_badge_unlocked
from complaints.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

POINT_VALUES = {
    PointTransaction.ACTION_REPORT_COMPLAINT: 10,
    PointTransaction.ACTION_COMPLAINT_RESOLVED: 20,
    PointTransaction.ACTION_VERIFY_COMPLAINT: 5,
    PointTransaction.ACTION_FIRST_IN_AREA: 15,
    PointTransaction.ACTION_DAILY_STREAK: 5,
}

# Outcomes of an award request
AWARDED = "awarded"
UNRECOGNIZED_ACTION = "unrecognized_action"

NIGHT_STARTS_AT_HOUR = 22


def _reports_progress(user, badge):
    return user.total_reports


def _verifications_progress(user, badge):
    return user.total_verifications


def _streak_progress(user, badge):
    return user.streak


def _area_progress(user, badge):
    """Most complaints the user filed under a single location label."""
    busiest = (
        Complaint.objects.filter(user=user)
        .values("location")
        .annotate(total=Count("id"))
        .order_by("-total")
        .first()
    )
    return busiest["total"] if busiest else 0


def _first_of_day_count(user):
    """Complaints by ``user`` that were the first filed by anyone on their local day."""
    user_days = (
        Complaint.objects.filter(user=user).annotate(day=TruncDate("created_at")).values("day")
    )
    day_openers = (
        Complaint.objects.annotate(day=TruncDate("created_at"))
        .filter(day__in=user_days)
        .values("day")
        .annotate(first=Min("created_at"))
        .values("first")
    )
    return Complaint.objects.filter(user=user, created_at__in=day_openers).count()


def _night_report_count(user):
    return sum(
        1
        for created_at in Complaint.objects.filter(user=user).values_list("created_at", flat=True)
        if timezone.localtime(created_at).hour >= NIGHT_STARTS_AT_HOUR
    )


TIMING_CRITERIA = {
    Badge.CRITERION_FIRST_OF_DAY: _first_of_day_count,
    Badge.CRITERION_NIGHT_REPORT: _night_report_count,
}


def _timing_progress(user, badge):
    counter = TIMING_CRITERIA.get(badge.criterion)
    if counter is None:
        logger.warning(f"Badge {badge.key} has unknown timing criterion {badge.criterion!r}")
        return 0
    return counter(user)


def _complaint_category_progress(user, badge):
    return Complaint.objects.filter(user=user, category=badge.criterion).count()


# One progress function per badge category
BADGE_PROGRESS = {
    Badge.CATEGORY_REPORTS: _reports_progress,
    Badge.CATEGORY_VERIFICATIONS: _verifications_progress,
    Badge.CATEGORY_STREAK: _streak_progress,
    Badge.CATEGORY_AREA: _area_progress,
    Badge.CATEGORY_TIMING: _timing_progress,
    Badge.CATEGORY_COMPLAINT_TYPE: _complaint_category_progress,
}


def badge_progress(user: Citizen, badge: Badge) -> int:
    progress = BADGE_PROGRESS.get(badge.category)
    if progress is None:
        logger.warning(f"No unlock rule for badge category {badge.category!r} ({badge.key})")
        return 0
    return progress(user, badge)


class GamificationService:
    """Points, badges, streaks and challenges."""

    def __init__(self):
        self.notifications = NotificationService()

    def _lock_user(self, user_id: int) -> Citizen:
        user = Citizen.objects.select_for_update().filter(pk=user_id).first()
        if user is None:
            raise UserNotFound(f"User {user_id} not found")
        return user

    def award_points(
        self, user_id: int, action: str, description: str = None, reference=None
    ) -> dict:
        """
        Credit the configured value of ``action`` and evaluate badge unlocks.

        The increment, the ledger entry and the badge evaluation share one
        transaction holding the user's row lock.

        Args:
            user_id: Receiving user
            action: One of the PointTransaction actions
            description: Free text for the ledger entry
            reference: Optional model instance that triggered the award

        Returns:
            dict: ``outcome`` (AWARDED or UNRECOGNIZED_ACTION), ``points_earned``,
            ``total_points`` and ``new_badges``
        """
        points = POINT_VALUES.get(action, 0)
        if points <= 0:
            user = Citizen.objects.filter(pk=user_id).first()
            if user is None:
                raise UserNotFound(f"User {user_id} not found")
            logger.warning(f"Unrecognized point action {action!r} for user {user_id}")
            return {
                "outcome": UNRECOGNIZED_ACTION,
                "points_earned": 0,
                "total_points": user.points,
                "new_badges": [],
            }

        with transaction.atomic():
            user = self._lock_user(user_id)
            Citizen.objects.filter(pk=user.pk).update(points=F("points") + points)
            user.refresh_from_db()

            PointTransaction.objects.create(
                user=user,
                points=points,
                action=action,
                description=description,
                reference_type=reference._meta.model_name if reference is not None else None,
                reference_id=reference.pk if reference is not None else None,
            )
            self._advance_challenges(user, action)
            new_badges = self._evaluate_badges(user)

        logger.info(f"Awarded {points} points to user {user.pk} for {action} (total {user.points})")
        return {
            "outcome": AWARDED,
            "points_earned": points,
            "total_points": user.points,
            "new_badges": new_badges,
        }

    def check_unlocks(self, user_id: int) -> list:
        """Evaluate every badge the user does not own yet and grant the satisfied ones."""
        with transaction.atomic():
            user = self._lock_user(user_id)
            return self._evaluate_badges(user)

    def _evaluate_badges(self, user: Citizen) -> list:
        owned = UserBadge.objects.filter(user=user).values_list("badge_id", flat=True)
        new_badges = []

        for badge in Badge.objects.exclude(pk__in=list(owned)):
            if badge_progress(user, badge) < badge.threshold:
                continue

            _, created = UserBadge.objects.get_or_create(user=user, badge=badge)
            if not created:
                continue

            new_badges.append(badge)
            logger.info(f"User {user.pk} unlocked badge {badge.key}")
            self.notifications.notify(
                user,
                title=f"Badge earned: {badge.name}",
                body=badge.description,
                type=Notification.TYPE_BADGE_EARNED,
                data={"badgeKey": badge.key},
            )
            transaction.on_commit(
                lambda user_id=user.pk, key=badge.key: publish_badge_unlocked(user_id, key)
            )

        return new_badges

    def _advance_challenges(self, user: Citizen, action: str):
        now = timezone.now()
        active = Challenge.objects.filter(
            is_active=True, target_action=action, starts_at__lte=now, ends_at__gte=now
        )
        for challenge in active:
            participation, _ = UserChallenge.objects.get_or_create(user=user, challenge=challenge)
            if participation.completed:
                continue
            participation.progress += 1
            if participation.progress >= challenge.target_count:
                participation.completed = True
                logger.info(f"User {user.pk} completed challenge {challenge.pk}")
            participation.save(update_fields=["progress", "completed"])

    def record_activity(self, user_id: int):
        """
        Update the daily streak. A second consecutive day earns ``daily_streak``
        points; a gap resets the streak to one.

        Returns:
            dict or None: award result when streak points were granted
        """
        with transaction.atomic():
            user = self._lock_user(user_id)
            today = timezone.localdate()

            if user.last_active_date == today:
                return None

            continued = user.last_active_date == today - timedelta(days=1)
            user.streak = user.streak + 1 if continued else 1
            user.last_active_date = today
            user.save(update_fields=["streak", "last_active_date", "updated_at"])

            if continued:
                return self.award_points(
                    user.pk, PointTransaction.ACTION_DAILY_STREAK, f"{user.streak}-day streak"
                )
        return None

    def record_report(self, user_id: int, complaint: Complaint, first_in_area: bool = False) -> dict:
        """Bookkeeping for a submitted complaint."""
        with transaction.atomic():
            self._lock_user(user_id)
            Citizen.objects.filter(pk=user_id).update(total_reports=F("total_reports") + 1)

            results = [self.record_activity(user_id)]
            results.append(
                self.award_points(
                    user_id,
                    PointTransaction.ACTION_REPORT_COMPLAINT,
                    f"Reported {complaint.category} at {complaint.location}",
                    reference=complaint,
                )
            )
            if first_in_area:
                results.append(
                    self.award_points(
                        user_id,
                        PointTransaction.ACTION_FIRST_IN_AREA,
                        f"First {complaint.category} report near {complaint.location}",
                        reference=complaint,
                    )
                )
        return self._merge(results)

    def record_verification(self, user_id: int, complaint: Complaint) -> dict:
        """Bookkeeping for a cast vote."""
        with transaction.atomic():
            self._lock_user(user_id)
            Citizen.objects.filter(pk=user_id).update(
                total_verifications=F("total_verifications") + 1
            )
            results = [
                self.record_activity(user_id),
                self.award_points(
                    user_id,
                    PointTransaction.ACTION_VERIFY_COMPLAINT,
                    f"Verified complaint {complaint.complaint_id}",
                    reference=complaint,
                ),
            ]
        return self._merge(results)

    def record_resolution(self, complaint: Complaint):
        """
        Reward the reporter of a resolved complaint. A complaint earns its
        reporter resolution points at most once.
        """
        if complaint.user_id is None:
            return None

        already_rewarded = PointTransaction.objects.filter(
            action=PointTransaction.ACTION_COMPLAINT_RESOLVED,
            reference_type=complaint._meta.model_name,
            reference_id=complaint.pk,
        ).exists()
        if already_rewarded:
            logger.info(f"Resolution points already granted for {complaint.complaint_id}")
            return None

        return self.award_points(
            complaint.user_id,
            PointTransaction.ACTION_COMPLAINT_RESOLVED,
            f"Complaint {complaint.complaint_id} resolved",
            reference=complaint,
        )

    @staticmethod
    def _merge(results) -> dict:
        results = [result for result in results if result]
        return {
            "points_earned": sum(result["points_earned"] for result in results),
            "total_points": results[-1]["total_points"] if results else None,
            "new_badges": [badge for result in results for badge in result["new_badges"]],
        }

    def leaderboard(self, limit: int = 50) -> list:
        """
        Users ordered by points. Ties share a rank and the next rank skips
        accordingly (1, 2, 2, 4).
        """
        users = list(Citizen.objects.order_by("-points", "id")[:limit])
        previous_points = None
        rank = 0
        for position, user in enumerate(users, start=1):
            if user.points != previous_points:
                rank = position
                previous_points = user.points
            user.computed_rank = rank
        return users
