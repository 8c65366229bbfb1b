"""
Fill the public-health log table with synthetic cases for the analytics
dashboard.
"""
import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from portal.models import PublicHealthLog

CITIES = [
    ('New Delhi', 'Delhi', 28.6139, 77.2090),
    ('Mumbai', 'Maharashtra', 19.0760, 72.8777),
    ('Bengaluru', 'Karnataka', 12.9716, 77.5946),
    ('Chennai', 'Tamil Nadu', 13.0827, 80.2707),
    ('Kolkata', 'West Bengal', 22.5726, 88.3639),
    ('Hyderabad', 'Telangana', 17.3850, 78.4867),
    ('Pune', 'Maharashtra', 18.5204, 73.8567),
    ('Ahmedabad', 'Gujarat', 23.0225, 72.5714),
    ('Jaipur', 'Rajasthan', 26.9124, 75.7873),
    ('Lucknow', 'Uttar Pradesh', 26.8467, 80.9462),
    ('Patna', 'Bihar', 25.5941, 85.1376),
    ('Bhopal', 'Madhya Pradesh', 23.2599, 77.4126),
]

DISEASES = ['COVID-19', 'Dengue', 'Malaria', 'Tuberculosis', 'Influenza']

# city -> (disease, probability of overriding the random pick)
OUTBREAKS = {
    'Mumbai': ('COVID-19', 0.6),
    'New Delhi': ('Dengue', 0.5),
    'Kolkata': ('Malaria', 0.4),
}


def build_log(rng: random.Random, now) -> PublicHealthLog:
    city, state, lat, lng = rng.choice(CITIES)
    disease = rng.choice(DISEASES)
    if city in OUTBREAKS and rng.random() < OUTBREAKS[city][1]:
        disease = OUTBREAKS[city][0]

    roll = rng.random()
    if roll > 0.95:
        status = PublicHealthLog.STATUS_DECEASED
    elif roll > 0.7:
        status = PublicHealthLog.STATUS_RECOVERED
    else:
        status = PublicHealthLog.STATUS_ACTIVE

    return PublicHealthLog(
        disease=disease,
        state=state,
        city=city,
        # jitter so the heatmap shows clusters instead of single points
        lat=lat + (rng.random() - 0.5) * 0.05,
        lng=lng + (rng.random() - 0.5) * 0.05,
        status=status,
        date_reported=now - timedelta(days=rng.randrange(30)),
    )


class Command(BaseCommand):
    help = "Replace public health logs with N random cases over the last 30 days"

    def add_arguments(self, parser):
        parser.add_argument('--count', type=int, default=2000)
        parser.add_argument('--seed', type=int, default=None, help='random seed for reproducible data')

    @transaction.atomic
    def handle(self, *args, **opts):
        rng = random.Random(opts['seed'])
        now = timezone.now()
        PublicHealthLog.objects.all().delete()
        self.stdout.write('Cleared existing logs')
        logs = [build_log(rng, now) for _ in range(max(0, opts['count']))]
        PublicHealthLog.objects.bulk_create(logs, batch_size=500)
        self.stdout.write(self.style.SUCCESS(f'Seeded {len(logs)} health logs successfully!'))
