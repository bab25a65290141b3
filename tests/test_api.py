import pytest
from datetime import date, timedelta
from unittest.mock import Mock
from fastapi.testclient import TestClient

from showfinder.api.deps import get_orchestrator, get_resolver
from showfinder.main import app
from showfinder.schemas.show import Coordinate, ResolvedLocation, ShowRecord
from showfinder.services.error_handling import ResolutionFailure, SearchUnavailable, StrategyTransportFailure
from showfinder.services.show_search import RadiusSearchOrchestrator

ORIGIN = Coordinate(latitude=39.7684, longitude=-86.1581)
START = date(2025, 8, 1)
END = START + timedelta(days=30)

SHOW_PAYLOAD = {
    'name': "Indy Card Show",
    'venue_name': "LaQuinta Inn",
    'address': "5120 Victory Drive",
    'city': "Indianapolis",
    'state': "IN",
    'start_date': "2025-08-02",
    'coordinates': {'latitude': 39.7025564, 'longitude': -86.0803286},
    'hours': "8am-2pm"
}

@pytest.fixture
def resolver():
    resolver = Mock()
    resolver.resolve.return_value = ResolvedLocation(
        query="46204", coordinate=ORIGIN, city="Indianapolis", state="IN", source="table"
    )
    return resolver

@pytest.fixture
def client(show_store, resolver):
    show_store.add_show(ShowRecord(
        name="Carmel Card Show",
        start_date=START + timedelta(days=3),
        coordinates=Coordinate(latitude=39.9784, longitude=-86.1180)
    ))
    show_store.add_show(ShowRecord(
        name="Chicago Card Show",
        start_date=START + timedelta(days=3),
        coordinates=Coordinate(latitude=41.8781, longitude=-87.6298)
    ))
    orchestrator = RadiusSearchOrchestrator.from_store(show_store, resolver=resolver)

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_resolver] = lambda: resolver
    yield TestClient(app)
    app.dependency_overrides.clear()

def _nearby_params(**extra):
    params = {'radius_miles': 25, 'start_date': START.isoformat(), 'end_date': END.isoformat()}
    params.update(extra)
    return params

def test_nearby_by_coordinates(client):
    response = client.get(
        "/api/v1/shows/nearby",
        params=_nearby_params(latitude=ORIGIN.latitude, longitude=ORIGIN.longitude)
    )

    assert response.status_code == 200
    body = response.json()
    assert [item['name'] for item in body['items']] == ["Carmel Card Show"]
    assert body['total_count'] == 1
    assert body['degraded'] is False
    assert body['strategy'] == "nearby"

def test_nearby_by_zip_code(client, resolver):
    response = client.get("/api/v1/shows/nearby", params=_nearby_params(zip_code="46204"))

    assert response.status_code == 200
    resolver.resolve.assert_called_once_with("46204")
    assert response.json()['total_count'] == 1

def test_nearby_requires_origin(client):
    response = client.get("/api/v1/shows/nearby", params=_nearby_params())

    assert response.status_code == 422

def test_nearby_rejects_reversed_window(client):
    response = client.get("/api/v1/shows/nearby", params={
        'latitude': ORIGIN.latitude,
        'longitude': ORIGIN.longitude,
        'start_date': END.isoformat(),
        'end_date': START.isoformat()
    })

    assert response.status_code == 422

def test_nearby_rejects_oversized_page(client):
    response = client.get(
        "/api/v1/shows/nearby",
        params=_nearby_params(latitude=ORIGIN.latitude, longitude=ORIGIN.longitude, page_size=1000)
    )

    assert response.status_code == 422

def test_nearby_unresolvable_zip(client, resolver):
    resolver.resolve.side_effect = ResolutionFailure("00000", "no geocoding results")

    response = client.get("/api/v1/shows/nearby", params=_nearby_params(zip_code="00000"))

    assert response.status_code == 422
    assert "00000" in response.json()['detail']

def test_nearby_search_unavailable():
    orchestrator = Mock()
    orchestrator.search.side_effect = SearchUnavailable([StrategyTransportFailure("nearby")])
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    try:
        response = TestClient(app).get(
            "/api/v1/shows/nearby",
            params={'latitude': ORIGIN.latitude, 'longitude': ORIGIN.longitude}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503

def test_parse_show(client):
    response = client.post(
        "/api/v1/shows/parse",
        json={'text': "Aug 2nd – Indianapolis, LaQuinta Inn – 5120 Victory Drive (8-2)"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body['parsed']['venue_name'] == "LaQuinta Inn"
    assert body['parsed']['partial_date'] == {'month': 8, 'day': 2}
    assert body['parsed']['missing_fields'] == ["state"]
    assert body['record']['hours'] == "8am-2pm"
    assert body['quality']['score'] == 70

def test_compare_series(client):
    second = dict(SHOW_PAYLOAD, start_date="2025-09-06")

    response = client.post("/api/v1/series/compare", json={'first': SHOW_PAYLOAD, 'second': second})

    assert response.status_code == 200
    body = response.json()
    assert body['confidence_score'] == 100
    assert body['is_same_series'] is True

def test_predict_series(client):
    second = dict(SHOW_PAYLOAD, start_date="2025-09-06")

    response = client.post("/api/v1/series/predict", json={'first': SHOW_PAYLOAD, 'second': second})

    assert response.status_code == 200
    assert response.json()['predicted_next_date'] == "2025-10-11"
    assert response.json()['interval_days'] == 35

def test_predict_rejects_unrelated_shows(client):
    other = {'name': "Elsewhere", 'start_date': "2025-08-05"}

    response = client.post("/api/v1/series/predict", json={'first': SHOW_PAYLOAD, 'second': other})

    assert response.status_code == 422

def test_predict_without_series_check(client):
    other = {'name': "Elsewhere", 'start_date': "2025-08-05"}

    response = client.post(
        "/api/v1/series/predict",
        json={'first': SHOW_PAYLOAD, 'second': other, 'require_same_series': False}
    )

    assert response.status_code == 200
    assert response.json()['predicted_next_date'] == "2025-08-08"

def test_find_duplicates(client):
    shows = [
        {'id': 1, 'name': "Indy Card Show", 'start_date': "2025-08-02"},
        {'id': 2, 'name': "indy card show", 'start_date': "2025-08-02"},
        {'id': 3, 'name': "Toy Swap", 'start_date': "2025-08-02"},
    ]

    response = client.post("/api/v1/series/duplicates", json={'shows': shows})

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 1
    assert body[0]['first_id'] == "1"
    assert body[0]['similarity'] == 1.0

def test_resolve_location(client):
    response = client.get("/api/v1/locations/46204")

    assert response.status_code == 200
    assert response.json()['coordinate'] == {'latitude': ORIGIN.latitude, 'longitude': ORIGIN.longitude}
    assert response.json()['source'] == "table"

def test_resolve_location_not_found(client, resolver):
    resolver.resolve.side_effect = ResolutionFailure("nowhere", "no geocoding results")

    response = client.get("/api/v1/locations/nowhere")

    assert response.status_code == 404
