from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.serializers.profile import ProfileUpdateSerializer
from portal.services.users import medical_records, serialize_user, update_profile


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile(request):
    if request.method == 'GET':
        return Response({'success': True, 'data': serialize_user(request.user)})
    s = ProfileUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    user = update_profile(request.user, s.validated_data)
    return Response({'success': True, 'message': 'Profile updated successfully', 'data': serialize_user(user)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def records(request):
    data = medical_records(request.user)
    return Response({'success': True, 'count': len(data), 'data': data})
