"""
Air quality lookups against the WAQI geo feed.
"""
import logging
from typing import Dict, Any

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

# US EPA bands: (upper bound inclusive, level)
AQI_BANDS = (
    (50, 'Good'),
    (100, 'Moderate'),
    (150, 'Unhealthy for Sensitive Groups'),
    (200, 'Unhealthy'),
    (300, 'Very Unhealthy'),
)


class AqiProviderError(Exception):
    pass


def classify_aqi(aqi: int) -> str:
    for upper, level in AQI_BANDS:
        if aqi <= upper:
            return level
    return 'Hazardous'


def fetch_aqi(lat: float, lon: float) -> Dict[str, Any]:
    token = settings.WAQI_TOKEN
    if not token:
        return {'aqi': 0, 'level': 'Unknown', 'message': 'AQI integration not configured'}

    url = settings.WAQI_URL.format(lat=lat, lon=lon)
    try:
        r = requests.get(url, params={'token': token}, timeout=settings.WAQI_TIMEOUT)
        r.raise_for_status()
        body = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning('WAQI request failed: %s', e)
        raise AqiProviderError('Air quality provider unavailable') from e

    if body.get('status') != 'ok' or not isinstance(body.get('data'), dict):
        logger.warning('WAQI returned an error: %s', body.get('data'))
        raise AqiProviderError('Air quality provider unavailable')

    data = body['data']
    try:
        aqi = int(data.get('aqi'))
    except (TypeError, ValueError):
        raise AqiProviderError('Air quality data unavailable for this location')

    return {
        'aqi': aqi,
        'level': classify_aqi(aqi),
        'station': (data.get('city') or {}).get('name'),
        'dominantPollutant': data.get('dominentpol'),
        'updatedAt': (data.get('time') or {}).get('iso'),
    }
