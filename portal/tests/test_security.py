import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.testing import WebsocketCommunicator
from rest_framework.test import APIClient

from portal.models import Appointment
from portal.realtime.consumers import AppointmentUpdatesConsumer
from portal.services.notifications import broadcast_appointment_change
from portal.throttling import FixedWindowRateThrottle, parse_window_rate

pytestmark = pytest.mark.django_db


def test_unknown_api_route_returns_json_404():
    r = APIClient().get('/api/does-not-exist')
    assert r.status_code == 404
    assert r.json() == {'success': False, 'message': 'Route not found', 'path': '/api/does-not-exist'}


def test_unhandled_error_is_opaque(monkeypatch):
    from portal.views import hospitals

    def explode(**kwargs):
        raise RuntimeError('secret internals')
    monkeypatch.setattr(hospitals, 'list_hospitals', explode)
    r = APIClient().get('/api/hospitals')
    assert r.status_code == 500
    assert r.json() == {'success': False, 'message': 'Server Error'}


def test_missing_token_is_401_envelope():
    r = APIClient().get('/api/appointments')
    assert r.status_code == 401
    assert r.json()['success'] is False
    assert r.json()['message']


@pytest.mark.parametrize('rate,expected', [
    ('100/15m', (100, 900)),
    ('5/s', (5, 1)),
    ('10/2hour', (10, 7200)),
    ('1/d', (1, 86400)),
])
def test_parse_window_rate(rate, expected):
    assert parse_window_rate(rate) == expected


def test_parse_window_rate_rejects_garbage():
    with pytest.raises(ValueError):
        parse_window_rate('lots')


def test_rate_limit_fixed_window(monkeypatch):
    monkeypatch.setattr(FixedWindowRateThrottle, 'THROTTLE_RATES', {'api': '3/15m'})
    client = APIClient()
    for _ in range(3):
        assert client.get('/api/hospitals').status_code == 200
    r = client.get('/api/hospitals')
    assert r.status_code == 429
    assert r.json() == {'success': False, 'message': 'Too many requests from this IP, please try again later.'}
    assert 'Retry-After' in r


def test_rate_limit_is_per_ip(monkeypatch):
    monkeypatch.setattr(FixedWindowRateThrottle, 'THROTTLE_RATES', {'api': '1/15m'})
    client = APIClient()
    assert client.get('/api/hospitals', REMOTE_ADDR='10.0.0.1').status_code == 200
    assert client.get('/api/hospitals', REMOTE_ADDR='10.0.0.1').status_code == 429
    assert client.get('/api/hospitals', REMOTE_ADDR='10.0.0.2').status_code == 200


# ---------------------------------------------------------------------
# WebSocket updates
# ---------------------------------------------------------------------
def _communicator(user):
    comm = WebsocketCommunicator(AppointmentUpdatesConsumer.as_asgi(), '/ws/appointments/')
    comm.scope['user'] = user
    return comm


def test_websocket_rejects_anonymous():
    from django.contrib.auth.models import AnonymousUser

    async def run():
        comm = _communicator(AnonymousUser())
        connected, code = await comm.connect()
        return connected, code

    connected, code = async_to_sync(run)()
    assert connected is False
    assert code == 4001


def test_admin_receives_hospital_appointment_events(hospital, hospital_admin, patient):
    appt = Appointment.objects.create(
        patient=patient, hospital=hospital, hospital_name=hospital.name,
        doctor='Dr. Sharma', specialty='Cardiology', date='2030-01-01', time='10:00 AM',
        type=Appointment.TYPE_IN_PERSON, reason='Checkup',
    )

    async def run():
        comm = _communicator(hospital_admin)
        connected, _ = await comm.connect()
        assert connected
        welcome = await comm.receive_json_from()
        await sync_to_async(broadcast_appointment_change)(appt, 'updated')
        event = await comm.receive_json_from()
        await comm.disconnect()
        return welcome, event

    welcome, event = async_to_sync(run)()
    assert welcome['type'] == 'welcome'
    assert event == {
        'type': 'appointment.changed',
        'event': 'updated',
        'appointmentId': appt.id,
        'status': 'pending',
        'hospitalId': hospital.id,
        'patientId': patient.id,
    }
