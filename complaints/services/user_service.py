import logging
import secrets
from django.db import IntegrityError, transaction
from django.utils import timezone
from complaints.exceptions import InvalidInput, UserNotFound
from complaints.models import Challenge, Citizen, UserChallenge

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ["en", "hi", "kn", "ta", "te"]


class UserService:
    """Phone login and profile management."""

    def login(self, phone: str, name: str = None) -> dict:
        """
        Fetch or create the account for a phone number and issue a fresh
        opaque session token.

        Returns:
            dict: ``user``, ``token`` and whether the account was ``created``
        """
        phone = (phone or "").strip()
        if not phone:
            raise InvalidInput("Phone number is required")

        try:
            with transaction.atomic():
                user, created = Citizen.objects.get_or_create(
                    phone=phone, defaults={"name": name or None}
                )
        except IntegrityError:
            # Lost a race with a concurrent first login for the same phone
            user, created = Citizen.objects.get(phone=phone), False

        if not created and name and not user.name:
            user.name = name

        user.auth_token = secrets.token_hex(32)
        user.save(update_fields=["name", "auth_token", "updated_at"])

        logger.info(f"User {user.pk} logged in ({'new' if created else 'existing'} account)")
        return {"user": user, "token": user.auth_token, "created": created}

    def get_profile(self, user_id: int) -> Citizen:
        user = Citizen.objects.prefetch_related("badges").filter(pk=user_id).first()
        if user is None:
            raise UserNotFound(f"User {user_id} not found")
        return user

    def update_profile(self, user_id: int, name: str = None, language: str = None) -> Citizen:
        user = self.get_profile(user_id)

        if language is not None and language not in SUPPORTED_LANGUAGES:
            raise InvalidInput(
                f"Unsupported language: {language}", details={"allowed": SUPPORTED_LANGUAGES}
            )

        if name is not None:
            user.name = name
        if language is not None:
            user.language = language
        user.save(update_fields=["name", "language", "updated_at"])
        return user

    def challenges(self, user_id: int) -> list:
        """Active challenges with the user's progress on each."""
        user = self.get_profile(user_id)
        now = timezone.now()
        progress = {
            participation.challenge_id: participation
            for participation in UserChallenge.objects.filter(user=user)
        }

        challenges = list(
            Challenge.objects.filter(is_active=True, starts_at__lte=now, ends_at__gte=now)
        )
        for challenge in challenges:
            participation = progress.get(challenge.pk)
            challenge.progress = participation.progress if participation else 0
            challenge.completed = participation.completed if participation else False
        return challenges
