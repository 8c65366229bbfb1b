from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from portal.models import User
from portal.permissions import IsAdminRole
from portal.serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentUpdateSerializer,
    DocumentUploadSerializer,
    HospitalAppointmentsQuerySerializer,
    TransferSerializer,
)
from portal.services import appointments as svc


def _error(message, code):
    return Response({'success': False, 'message': message}, status=code)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    if request.method == 'GET':
        data = [svc.serialize_appointment(a) for a in svc.list_for_patient(request.user)]
        return Response({'success': True, 'message': 'Appointments retrieved successfully', 'data': data, 'count': len(data)})

    if request.user.role != User.ROLE_PATIENT:
        return _error('User role is not authorized to access this route', 403)
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        appt = svc.create_appointment(request.user, s.validated_data)
    except ValueError as e:
        return _error(str(e), 400)
    return Response({'success': True, 'message': 'Appointment request created successfully',
                     'data': svc.serialize_appointment(appt)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def hospital_appointments(request):
    q = HospitalAppointmentsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    try:
        qs = svc.list_for_hospital(request.user, status=q.validated_data.get('status'))
    except PermissionError as e:
        return _error(str(e), 403)
    data = [svc.serialize_appointment(a) for a in qs]
    return Response({'success': True, 'message': 'Hospital appointments retrieved successfully', 'data': data, 'count': len(data)})


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, pk: int):
    if request.method == 'PUT' and not IsAdminRole().has_permission(request, None):
        return _error('User role is not authorized to access this route', 403)
    try:
        appt = svc.get_appointment(pk)
    except LookupError as e:
        return _error(str(e), 404)

    if request.method == 'DELETE':
        try:
            appt = svc.cancel_appointment(appt, request.user)
        except PermissionError as e:
            return _error(str(e), 403)
        return Response({'success': True, 'message': 'Appointment cancelled successfully',
                         'data': svc.serialize_appointment(appt)})

    s = AppointmentUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        appt = svc.update_appointment(
            appt, request.user,
            status=vd.get('status'),
            notes=vd.get('notes'),
            transfer_status=vd.get('transferStatus'),
            cancel_reason=vd.get('cancelReason'),
        )
    except PermissionError as e:
        return _error(str(e), 403)
    return Response({'success': True, 'message': 'Appointment updated successfully',
                     'data': svc.serialize_appointment(appt)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def upload_document(request, pk: int):
    s = DocumentUploadSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        appt = svc.get_appointment(pk)
        docs = svc.add_document(
            appt, request.user,
            doc_type=s.validated_data.get('type'),
            url=s.validated_data.get('url'),
            file=request.FILES.get('file'),
            notes=s.validated_data.get('notes'),
        )
    except LookupError as e:
        return _error(str(e), 404)
    except PermissionError as e:
        return _error(str(e), 403)
    except ValueError as e:
        return _error(str(e), 400)
    return Response({'success': True, 'message': 'Document uploaded successfully', 'data': docs})


@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def delete_document(request, pk: int, doc_index: int):
    try:
        appt = svc.get_appointment(pk)
        docs = svc.delete_document(appt, request.user, doc_index)
    except PermissionError as e:
        return _error(str(e), 403)
    except LookupError as e:
        return _error(str(e), 404)
    return Response({'success': True, 'message': 'Document deleted successfully', 'data': docs})


@api_view(['PUT'])
@permission_classes([IsAdminRole])
def transfer(request, pk: int):
    try:
        appt = svc.get_appointment(pk)
    except LookupError as e:
        return _error(str(e), 404)
    s = TransferSerializer(data=request.data)
    if not s.is_valid():
        return _error('Invalid action. Use "approve" or "reject"', 400)
    action = s.validated_data['action']
    appt = svc.handle_transfer(appt, request.user, action)
    return Response({'success': True, 'message': f'Transfer {action}d successfully',
                     'data': svc.serialize_appointment(appt)})
