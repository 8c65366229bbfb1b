import pytest

from portal.models import Hospital
from portal.services.hospitals import haversine_m

pytestmark = pytest.mark.django_db


def test_haversine_known_distance():
    # Delhi -> Mumbai is roughly 1150 km
    d = haversine_m(28.6139, 77.2090, 19.0760, 72.8777)
    assert 1_140_000 < d < 1_160_000
    assert haversine_m(10, 10, 10, 10) == 0


def test_list_sorted_by_rating_then_name(client_for, hospital, other_hospital):
    Hospital.objects.create(name='Apollo Delhi', city='Delhi', type=Hospital.TYPE_PRIVATE,
                            address='Sarita Vihar', phone='1', rating=4.8)
    body = client_for().get('/api/hospitals').json()
    assert [h['name'] for h in body['data']] == ['AIIMS New Delhi', 'Apollo Delhi', 'Tata Memorial Hospital']
    assert body['total'] == 3 and body['page'] == 1 and body['pages'] == 1
    assert body['data'][0]['contact']['emergency'] == '108'


def test_list_filters_and_pagination(client_for, hospital, other_hospital):
    body = client_for().get('/api/hospitals', {'city': 'mum'}).json()
    assert [h['name'] for h in body['data']] == ['Tata Memorial Hospital']
    assert client_for().get('/api/hospitals', {'type': 'Private'}).json()['count'] == 0
    body = client_for().get('/api/hospitals', {'limit': 1, 'page': 2}).json()
    assert body['count'] == 1 and body['pages'] == 2
    assert body['data'][0]['name'] == 'Tata Memorial Hospital'
    # limit is capped at 100
    assert client_for().get('/api/hospitals', {'limit': 500}).status_code == 200
    assert client_for().get('/api/hospitals', {'limit': 0}).status_code == 400


def test_detail_and_missing(client_for, hospital):
    r = client_for().get(f'/api/hospitals/{hospital.id}')
    assert r.status_code == 200
    assert r.json()['data']['beds'] == {'total': 0, 'available': 0, 'icu': 0, 'icuAvailable': 0}
    r = client_for().get('/api/hospitals/424242')
    assert r.status_code == 404
    assert r.json() == {'success': False, 'message': 'Hospital not found'}


def test_nearby_sorted_and_bounded(client_for, hospital, other_hospital):
    Hospital.objects.create(name='Apollo Delhi', city='Delhi', type=Hospital.TYPE_PRIVATE,
                            address='Sarita Vihar', phone='1', latitude=28.5413, longitude=77.2843)
    Hospital.objects.create(name='No Coordinates', city='Delhi', type=Hospital.TYPE_PRIVATE,
                            address='Somewhere', phone='1')
    body = client_for().get('/api/hospitals/nearby/28.6139/77.2090').json()
    names = [h['name'] for h in body['data']]
    assert names == ['AIIMS New Delhi', 'Apollo Delhi']
    distances = [h['distance'] for h in body['data']]
    assert distances == sorted(distances)
    assert all(isinstance(d, int) for d in distances)

    body = client_for().get('/api/hospitals/nearby/28.6139/77.2090', {'maxDistance': 2000000}).json()
    assert 'Tata Memorial Hospital' in [h['name'] for h in body['data']]


def test_nearby_rejects_bad_coordinates(client_for):
    assert client_for().get('/api/hospitals/nearby/abc/77.2').status_code == 400
