from django.conf import settings
from django.db import DatabaseError, connections
from django.db.models import Case, IntegerField, Value, When
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from portal.models import HealthAlert
from portal.serializers.hospital import AqiQuerySerializer
from portal.services.aqi import AqiProviderError, fetch_aqi

SEVERITY_RANK = Case(
    When(severity=HealthAlert.SEVERITY_HIGH, then=Value(0)),
    When(severity=HealthAlert.SEVERITY_MODERATE, then=Value(1)),
    When(severity=HealthAlert.SEVERITY_LOW, then=Value(2)),
    default=Value(3),
    output_field=IntegerField(),
)


def serialize_alert(a: HealthAlert) -> dict:
    return {
        'id': a.id,
        'title': a.title,
        'severity': a.severity,
        'type': a.type,
        'description': a.description,
        'symptoms': a.symptoms or [],
        'prevention': a.prevention or [],
        'affectedAreas': a.affected_areas or [],
        'riskLevel': a.risk_level,
        'isActive': a.is_active,
        'source': a.source,
        'createdAt': a.created_at.isoformat(),
    }


@api_view(['GET'])
@permission_classes([AllowAny])
def health_alerts(request):
    qs = (HealthAlert.objects.filter(is_active=True)
          .annotate(severity_rank=SEVERITY_RANK)
          .order_by('severity_rank', '-created_at')[:10])
    data = [serialize_alert(a) for a in qs]
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def air_quality(request):
    q = AqiQuerySerializer(data=request.query_params)
    if not q.is_valid():
        return Response({'success': False, 'message': 'Latitude and longitude are required'}, status=400)
    try:
        data = fetch_aqi(q.validated_data['lat'], q.validated_data['lon'])
    except AqiProviderError as e:
        return Response({'success': False, 'message': str(e)}, status=502)
    return Response({'success': True, 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    payload = {
        'success': True,
        'message': 'SwasthyaSetu API is running',
        'timestamp': timezone.now().isoformat(),
        'environment': settings.ENV,
        'version': settings.API_VERSION,
    }
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError:
        payload.update(success=False, message='Database unavailable', database=False)
        return Response(payload, status=500)
    payload['database'] = bool(row and row[0] == 1)
    return Response(payload)


@api_view(['GET'])
@permission_classes([AllowAny])
def root(request):
    return Response({
        'success': True,
        'message': 'Welcome to SwasthyaSetu API',
        'documentation': '/api/health-check',
        'version': settings.API_VERSION,
    })
