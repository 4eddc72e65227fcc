import logging
from django.db import transaction

logger = logging.getLogger(__name__)


class FollowUps:
    """
    Runs bookkeeping that must not undo the primary mutation.

    Each call executes in its own savepoint. A failure rolls back only that
    savepoint, is logged, and is remembered in ``warnings`` so the response can
    report a degraded-but-successful result.
    """

    def __init__(self):
        self.warnings = []

    def run(self, label: str, func, *args, **kwargs):
        try:
            with transaction.atomic():
                return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Follow-up '{label}' failed: {str(e)}", exc_info=True)
            self.warnings.append(f"{label}_failed")
            return None

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)
