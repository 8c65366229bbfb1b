from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from portal.permissions import IsGovernmentOrAdmin
from portal.services import analytics


@api_view(['GET'])
@permission_classes([IsGovernmentOrAdmin])
def disease_map(request):
    return Response({'success': True, 'data': analytics.disease_map()})


@api_view(['GET'])
@permission_classes([IsGovernmentOrAdmin])
def crisis_alerts(request):
    data = analytics.crisis_alerts()
    return Response({'success': True, 'count': len(data), 'data': data})


@api_view(['GET'])
@permission_classes([IsGovernmentOrAdmin])
def hospital_performance(request):
    return Response({'success': True, **analytics.hospital_performance()})


@api_view(['GET'])
@permission_classes([IsGovernmentOrAdmin])
def outcomes(request):
    return Response({'success': True, 'data': analytics.outcome_stats()})
