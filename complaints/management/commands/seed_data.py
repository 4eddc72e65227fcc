"""
Django management command to seed reference and demo data.

Seeds the badge catalog, a set of sample complaints with a coherent status
history, and the hotspot forecasts. Each table is only seeded while empty,
so running the command twice is harmless.

Usage:
    python manage.py seed_data
"""
import random
from datetime import timedelta
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from complaints.models import Badge, Complaint, Hotspot, StatusHistory
from complaints.services.complaint_service import describe, generate_complaint_id
from complaints.services.geo_service import CITY_LANDMARKS

BADGES = [
    {"key": "first_reporter", "name": "First Reporter", "description": "Submitted first complaint",
     "icon": "🏅", "threshold": 1, "category": Badge.CATEGORY_REPORTS},
    {"key": "civic_hero", "name": "Civic Hero", "description": "50+ complaints reported",
     "icon": "🦸", "threshold": 50, "category": Badge.CATEGORY_REPORTS},
    {"key": "neighborhood_watch", "name": "Neighborhood Watch", "description": "10 complaints in same area",
     "icon": "👁️", "threshold": 10, "category": Badge.CATEGORY_AREA},
    {"key": "verifier", "name": "Verifier", "description": "Verified 20 complaints",
     "icon": "✅", "threshold": 20, "category": Badge.CATEGORY_VERIFICATIONS},
    {"key": "streak_7", "name": "Week Warrior", "description": "7-day streak",
     "icon": "🔥", "threshold": 7, "category": Badge.CATEGORY_STREAK},
    {"key": "early_bird", "name": "Early Bird", "description": "First complaint of the day 5 times",
     "icon": "🌅", "threshold": 5, "category": Badge.CATEGORY_TIMING,
     "criterion": Badge.CRITERION_FIRST_OF_DAY},
    {"key": "night_owl", "name": "Night Owl", "description": "Reported after 10 PM 3 times",
     "icon": "🦉", "threshold": 3, "category": Badge.CATEGORY_TIMING,
     "criterion": Badge.CRITERION_NIGHT_REPORT},
    {"key": "pothole_patrol", "name": "Pothole Patrol", "description": "Reported 10 potholes",
     "icon": "🕳️", "threshold": 10, "category": Badge.CATEGORY_COMPLAINT_TYPE,
     "criterion": Complaint.CATEGORY_POTHOLE},
    {"key": "green_guardian", "name": "Green Guardian", "description": "Reported 10 garbage issues",
     "icon": "♻️", "threshold": 10, "category": Badge.CATEGORY_COMPLAINT_TYPE,
     "criterion": Complaint.CATEGORY_GARBAGE},
    {"key": "light_keeper", "name": "Light Keeper", "description": "Reported 10 streetlight issues",
     "icon": "💡", "threshold": 10, "category": Badge.CATEGORY_COMPLAINT_TYPE,
     "criterion": Complaint.CATEGORY_STREETLIGHT},
]

SAMPLE_COMPLAINTS = 30
SAMPLE_HOTSPOTS = 8

CATEGORY_WEIGHTS = {
    Complaint.CATEGORY_POTHOLE: 0.4,
    Complaint.CATEGORY_GARBAGE: 0.25,
    Complaint.CATEGORY_STREETLIGHT: 0.2,
    Complaint.CATEGORY_DRAINAGE: 0.1,
    Complaint.CATEGORY_OTHER: 0.05,
}

STATUS_WEIGHTS = {
    Complaint.STATUS_REPORTED: 0.55,
    Complaint.STATUS_ASSIGNED: 0.25,
    Complaint.STATUS_IN_PROGRESS: 0.15,
    Complaint.STATUS_RESOLVED: 0.05,
}

# (status, note, minimum hours after the previous step, random extra hours)
HISTORY_STEPS = [
    (Complaint.STATUS_ASSIGNED, "Assigned to ward officer", 1, 24),
    (Complaint.STATUS_IN_PROGRESS, "Work commenced", 2, 48),
    (Complaint.STATUS_RESOLVED, "Issue resolved successfully", 4, 72),
]

HOTSPOT_FACTORS = ["high_past_complaints", "rainfall_forecast", "traffic_density"]


class Command(BaseCommand):
    help = "Seed badges, sample complaints and hotspots into empty tables"

    def handle(self, *args, **options):
        self.stdout.write("Starting database seed...")

        with transaction.atomic():
            self._seed_badges()
            self._seed_complaints()
            self._seed_hotspots()

        self.stdout.write(self.style.SUCCESS("Database seed completed"))

    def _seed_badges(self):
        if Badge.objects.exists():
            self.stdout.write("  Badges already present, skipping")
            return
        Badge.objects.bulk_create([Badge(**badge) for badge in BADGES])
        self.stdout.write(f"  Seeded {len(BADGES)} badges")

    def _seed_complaints(self):
        if Complaint.objects.exists():
            self.stdout.write("  Complaints already present, skipping")
            return

        now = timezone.now()
        for _ in range(SAMPLE_COMPLAINTS):
            category = random.choices(
                list(CATEGORY_WEIGHTS), weights=list(CATEGORY_WEIGHTS.values())
            )[0]
            status = random.choices(list(STATUS_WEIGHTS), weights=list(STATUS_WEIGHTS.values()))[0]
            landmark = random.choice(CITY_LANDMARKS)
            location = f"{landmark['name']}, {landmark['area']}"
            created_at = (timezone.localtime(now) - timedelta(days=random.randrange(1, 11))).replace(
                hour=8 + random.randrange(12), minute=random.randrange(60)
            )

            history = [(Complaint.STATUS_REPORTED, None, created_at)]
            step_time = created_at
            for step_status, note, min_hours, extra_hours in HISTORY_STEPS:
                if history[-1][0] == status:
                    break
                step_time = step_time + timedelta(hours=min_hours + random.randrange(extra_hours))
                history.append((step_status, note, step_time))

            complaint = Complaint.objects.create(
                complaint_id=generate_complaint_id(),
                image="",
                latitude=landmark["lat"] + (random.random() - 0.5) * 0.01,
                longitude=landmark["lng"] + (random.random() - 0.5) * 0.01,
                location=location,
                category=category,
                severity=random.choices(["high", "medium", "low"], weights=[0.3, 0.4, 0.3])[0],
                status=status,
                description=describe(category, location),
                confidence_score=85 + random.randrange(15),
                ai_models_used=["florence", "blip", "clip"],
            )

            # bulk_create skips post_save, so seeding publishes no status events
            StatusHistory.objects.bulk_create(
                [
                    StatusHistory(complaint=complaint, status=entry_status, notes=note)
                    for entry_status, note, _ in history
                ]
            )
            # auto_now fields ignore assigned values, so backdate through update()
            entries = complaint.status_history.order_by("id")
            for entry, (_, _, timestamp) in zip(entries, history):
                StatusHistory.objects.filter(pk=entry.pk).update(timestamp=timestamp)
            Complaint.objects.filter(pk=complaint.pk).update(
                created_at=created_at, updated_at=history[-1][2]
            )

        self.stdout.write(f"  Seeded {SAMPLE_COMPLAINTS} sample complaints")

    def _seed_hotspots(self):
        if Hotspot.objects.exists():
            self.stdout.write("  Hotspots already present, skipping")
            return

        predicted_date = timezone.now() + timedelta(days=7)
        Hotspot.objects.bulk_create(
            [
                Hotspot(
                    latitude=landmark["lat"],
                    longitude=landmark["lng"],
                    category=random.choice(
                        [Complaint.CATEGORY_POTHOLE, Complaint.CATEGORY_GARBAGE, Complaint.CATEGORY_DRAINAGE]
                    ),
                    risk_score=60 + random.randrange(40),
                    predicted_date=predicted_date,
                    factors=HOTSPOT_FACTORS,
                    recommended_action="Schedule preventive maintenance inspection",
                )
                for landmark in CITY_LANDMARKS[:SAMPLE_HOTSPOTS]
            ]
        )
        self.stdout.write(f"  Seeded {SAMPLE_HOTSPOTS} hotspots")
