from django.db import models


class Hotspot(models.Model):
    """Seeded risk forecast for an area. Read-only for the service."""

    latitude = models.FloatField()
    longitude = models.FloatField()
    category = models.CharField(max_length=50)
    risk_score = models.PositiveSmallIntegerField(help_text="0-100")
    predicted_date = models.DateTimeField()
    factors = models.JSONField(default=list, blank=True)
    recommended_action = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "hotspots"
        ordering = ["-risk_score"]

    def __str__(self):
        return f"{self.category} risk {self.risk_score} @ ({self.latitude}, {self.longitude})"
