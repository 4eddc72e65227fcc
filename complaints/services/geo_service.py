import math
import logging
from django.conf import settings
from complaints.models import Complaint

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Known Bangalore landmarks used to label a reported coordinate
CITY_LANDMARKS = [
    {"name": "MG Road", "lat": 12.9716, "lng": 77.604, "area": "near Trinity Metro Station"},
    {"name": "Indiranagar", "lat": 12.9784, "lng": 77.6408, "area": "100 Feet Road junction"},
    {"name": "Koramangala", "lat": 12.9352, "lng": 77.6245, "area": "5th Block main road"},
    {"name": "Whitefield", "lat": 12.9698, "lng": 77.7499, "area": "ITPL Main Road"},
    {"name": "HSR Layout", "lat": 12.9121, "lng": 77.6446, "area": "Sector 1 junction"},
    {"name": "Jayanagar", "lat": 12.925, "lng": 77.5838, "area": "4th Block"},
    {"name": "Electronic City", "lat": 12.8456, "lng": 77.6603, "area": "Phase 1 entrance"},
    {"name": "Marathahalli", "lat": 12.9591, "lng": 77.7011, "area": "Outer Ring Road"},
    {"name": "Banashankari", "lat": 12.925, "lng": 77.5486, "area": "2nd Stage"},
    {"name": "Yelahanka", "lat": 13.1007, "lng": 77.5963, "area": "New Town main road"},
    {"name": "BTM Layout", "lat": 12.9166, "lng": 77.6101, "area": "2nd Stage"},
    {"name": "JP Nagar", "lat": 12.9063, "lng": 77.5857, "area": "6th Phase"},
    {"name": "Malleshwaram", "lat": 13.0035, "lng": 77.5647, "area": "8th Cross"},
    {"name": "Rajajinagar", "lat": 12.9914, "lng": 77.5538, "area": "Industrial Town"},
    {"name": "Hebbal", "lat": 13.0358, "lng": 77.5971, "area": "Outer Ring Road junction"},
]


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in kilometers."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def reverse_geocode(latitude: float, longitude: float) -> str:
    """Label a coordinate with the closest known landmark."""
    closest = min(
        CITY_LANDMARKS,
        key=lambda loc: (latitude - loc["lat"]) ** 2 + (longitude - loc["lng"]) ** 2,
    )
    return f"{closest['name']}, {closest['area']}"


def bounding_box(latitude: float, longitude: float, radius_km: float) -> dict:
    """
    Flat approximation of a radius as a degree delta (~111 km per degree).
    Over-selects near the poles and the date line; fine at city scale.
    """
    delta = radius_km / settings.KM_PER_DEGREE
    return {
        "latitude__gte": latitude - delta,
        "latitude__lte": latitude + delta,
        "longitude__gte": longitude - delta,
        "longitude__lte": longitude + delta,
    }


class GeoService:
    """Location based complaint queries."""

    def nearby_unverified(self, latitude: float, longitude: float, radius_km: float = None):
        """
        Complaints inside the bounding box around a point that still need
        community verification, closest first.

        Args:
            latitude: Center latitude
            longitude: Center longitude
            radius_km: Search radius, defaults to NEARBY_DEFAULT_RADIUS_KM

        Returns:
            list: Complaint instances with a ``distance_km`` attribute
        """
        if radius_km is None:
            radius_km = settings.NEARBY_DEFAULT_RADIUS_KM

        complaints = list(
            Complaint.objects.filter(
                verification_count__lte=settings.NEARBY_MAX_VERIFICATIONS,
                **bounding_box(latitude, longitude, radius_km),
            ).prefetch_related("status_history")
        )

        for complaint in complaints:
            complaint.distance_km = haversine_km(
                latitude, longitude, complaint.latitude, complaint.longitude
            )
        complaints.sort(key=lambda c: c.distance_km)

        logger.info(
            f"Found {len(complaints)} unverified complaints within {radius_km}km of ({latitude}, {longitude})"
        )
        return complaints

    def has_open_complaint_nearby(
        self, latitude: float, longitude: float, category: str, exclude_pk: int = None
    ) -> bool:
        """Whether an open complaint of the same category already exists close by."""
        queryset = Complaint.objects.filter(
            category=category,
            status__in=Complaint.OPEN_STATUSES,
            **bounding_box(latitude, longitude, settings.FIRST_IN_AREA_RADIUS_KM),
        )
        if exclude_pk is not None:
            queryset = queryset.exclude(pk=exclude_pk)
        return queryset.exists()
