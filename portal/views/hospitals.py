import math

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from portal.models import Hospital
from portal.serializers.hospital import HospitalListQuerySerializer, NearbyQuerySerializer
from portal.services.hospitals import list_hospitals, nearby_hospitals, serialize_hospital


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_list(request):
    q = HospitalListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    page = q.validated_data.get('page', 1)
    limit = min(100, q.validated_data.get('limit', 20))
    data, total = list_hospitals(
        city=q.validated_data.get('city'),
        htype=q.validated_data.get('type'),
        page=page,
        limit=limit,
    )
    return Response({
        'success': True,
        'count': len(data),
        'total': total,
        'page': page,
        'pages': math.ceil(total / limit),
        'data': data,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_detail(request, pk: int):
    h = Hospital.objects.filter(pk=pk).first()
    if h is None:
        return Response({'success': False, 'message': 'Hospital not found'}, status=404)
    return Response({'success': True, 'data': serialize_hospital(h)})


@api_view(['GET'])
@permission_classes([AllowAny])
def hospitals_nearby(request, lat: str, lng: str):
    try:
        lat_f, lng_f = float(lat), float(lng)
    except ValueError:
        return Response({'success': False, 'message': 'Invalid coordinates'}, status=400)
    if not (-90 <= lat_f <= 90 and -180 <= lng_f <= 180):
        return Response({'success': False, 'message': 'Invalid coordinates'}, status=400)
    q = NearbyQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = nearby_hospitals(lat_f, lng_f, q.validated_data.get('maxDistance', 50000))
    return Response({'success': True, 'count': len(data), 'data': data})
