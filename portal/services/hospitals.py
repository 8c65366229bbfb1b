import math
from typing import Optional, List, Dict, Any, Tuple

from portal.models import Hospital

EARTH_RADIUS_M = 6371e3


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres."""
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp = math.radians(lat2 - lat1)
    dl = math.radians(lng2 - lng1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def serialize_hospital(h: Hospital) -> Dict[str, Any]:
    return {
        "id": h.id,
        "name": h.name,
        "city": h.city,
        "type": h.type,
        "beds": {
            "total": h.beds_total,
            "available": h.beds_available,
            "icu": h.icu_total,
            "icuAvailable": h.icu_available,
        },
        "resources": {
            "oxygen": h.has_oxygen,
            "ventilators": h.has_ventilators,
            "bloodBank": h.has_blood_bank,
        },
        "contact": {"phone": h.phone, "email": h.email, "emergency": h.emergency_phone},
        "address": h.address,
        "location": {"lat": h.latitude, "lng": h.longitude},
        "rating": h.rating,
        "departments": h.departments or [],
        "createdAt": h.created_at.isoformat() if h.created_at else None,
    }


def list_hospitals(*, city: Optional[str]=None, htype: Optional[str]=None, page: int=1, limit: int=20) -> Tuple[List[Dict[str, Any]], int]:
    qs = Hospital.objects.all()
    if city:
        qs = qs.filter(city__icontains=city)
    if htype:
        qs = qs.filter(type=htype)
    total = qs.count()
    page = max(1, int(page or 1))
    limit = min(100, max(1, int(limit or 20)))
    start = (page - 1) * limit
    items = qs.order_by('-rating', 'name')[start:start + limit]
    return [serialize_hospital(h) for h in items], total


def nearby_hospitals(lat: float, lng: float, max_distance: float=50000) -> List[Dict[str, Any]]:
    out = []
    qs = Hospital.objects.filter(latitude__isnull=False, longitude__isnull=False)
    for h in qs:
        distance = round(haversine_m(lat, lng, h.latitude, h.longitude))
        if distance <= max_distance:
            item = serialize_hospital(h)
            item["distance"] = distance
            out.append(item)
    out.sort(key=lambda x: x["distance"])
    return out
