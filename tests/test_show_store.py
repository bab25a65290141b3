import pytest
from datetime import date, timedelta
from unittest.mock import Mock
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from showfinder.database.models import ShowModel, ZipCodeModel
from showfinder.schemas.show import Coordinate, SearchQuery, ShowRecord, ZipCodeData
from showfinder.services.geocoding import CoordinateResolver
from showfinder.services.show_search import RadiusSearchOrchestrator
from showfinder.services.show_store import SQLAlchemyZipCodeTable, matches_categories, matches_features

ORIGIN = Coordinate(latitude=39.7684, longitude=-86.1581)
TODAY = date(2025, 8, 1)
WINDOW = (TODAY, TODAY + timedelta(days=30))

def _show(show_id, coordinate, days_ahead=3, **extra) -> ShowRecord:
    fields = {
        'name': f"Show {show_id}",
        'start_date': TODAY + timedelta(days=days_ahead),
        'coordinates': coordinate,
        'entry_fee': 5.0
    }
    fields.update(extra)
    return ShowRecord(**fields)

@pytest.fixture
def seeded_store(show_store):
    show_store.add_show(_show(1, Coordinate(latitude=39.9784, longitude=-86.1180),
                              categories=["sports", "pokemon"], features={"free_parking": True}))
    show_store.add_show(_show(2, Coordinate(latitude=39.6137, longitude=-86.1067), entry_fee=None))
    show_store.add_show(_show(3, Coordinate(latitude=41.8781, longitude=-87.6298)))
    show_store.add_show(_show(4, Coordinate(latitude=39.7700, longitude=-86.1600), days_ahead=45))
    show_store.add_show(_show(5, Coordinate(latitude=39.7700, longitude=-86.1600), status="CANCELLED"))
    return show_store

def _names(rows):
    return sorted(row['name'] for row in rows)

def test_add_show_stores_both_coordinate_shapes(show_store, db_session):
    show_store.add_show(_show(1, Coordinate(latitude=39.9784, longitude=-86.1180)))

    stored = db_session.query(ShowModel).one()
    assert stored.latitude == 39.9784
    assert stored.coordinates == {'type': 'Point', 'coordinates': [-86.1180, 39.9784]}
    assert stored.status == "ACTIVE"

def test_search_nearby(seeded_store):
    rows = seeded_store.search_nearby(ORIGIN, 25, WINDOW)

    assert _names(rows) == ["Show 1", "Show 2"]

def test_search_filtered_by_fee_and_facets(seeded_store):
    assert _names(seeded_store.search_filtered(ORIGIN, 25, WINDOW, max_entry_fee=10)) == ["Show 1"]
    assert _names(seeded_store.search_filtered(ORIGIN, 25, WINDOW, categories=["pokemon"])) == ["Show 1"]
    assert _names(seeded_store.search_filtered(ORIGIN, 25, WINDOW, features={"free_parking": True})) == ["Show 1"]
    assert _names(seeded_store.search_filtered(ORIGIN, 25, WINDOW)) == ["Show 1", "Show 2"]

def test_search_radius_only_ignores_date_and_status(seeded_store):
    rows = seeded_store.search_radius_only(ORIGIN, 25)

    assert _names(rows) == ["Show 1", "Show 2", "Show 4", "Show 5"]

def test_search_all_upcoming_has_no_location_constraint(seeded_store):
    rows = seeded_store.search_all_upcoming(TODAY, limit=50)

    assert _names(rows) == ["Show 1", "Show 2", "Show 3", "Show 4"]
    assert len(seeded_store.search_all_upcoming(TODAY, limit=2)) == 2

def test_nested_only_rows_reach_client_side_check(show_store, db_session):
    db_session.add(ShowModel(
        title="Legacy Show",
        start_date=TODAY + timedelta(days=2),
        coordinates={'type': 'Point', 'coordinates': [-86.1067, 39.6137]}
    ))
    db_session.add(ShowModel(
        title="Legacy Far Show",
        start_date=TODAY + timedelta(days=2),
        coordinates={'type': 'Point', 'coordinates': [-87.6298, 41.8781]}
    ))
    db_session.commit()

    page = RadiusSearchOrchestrator.from_store(show_store).search(
        SearchQuery(origin=ORIGIN, radius_miles=25, date_window=WINDOW)
    )

    assert [item.name for item in page.items] == ["Legacy Show"]

def test_orchestrator_over_sqlite(seeded_store):
    page = RadiusSearchOrchestrator.from_store(seeded_store).search(
        SearchQuery(origin=ORIGIN, radius_miles=25, date_window=WINDOW, page_size=1)
    )

    assert page.strategy == "nearby"
    assert page.total_count == 2
    assert page.has_more
    assert page.items[0].distance_miles is not None

@pytest.mark.parametrize("row,wanted,expected", [
    (["sports"], None, True),
    (["sports"], [], True),
    (["sports", "pokemon"], ["pokemon"], True),
    (["sports"], ["pokemon"], False),
    (None, ["pokemon"], False),
])
def test_matches_categories(row, wanted, expected):
    assert matches_categories(row, wanted) is expected

def test_matches_features():
    assert matches_features({"free_parking": True}, {"free_parking": True})
    assert not matches_features({"free_parking": False}, {"free_parking": True})
    assert not matches_features(None, {"free_parking": True})
    assert matches_features(None, None)

def test_failed_zip_write_back_does_not_break_search(seeded_store, db_session):
    db_session.execute(text(
        "CREATE TRIGGER reject_zip BEFORE INSERT ON zip_codes "
        "BEGIN SELECT RAISE(ABORT, 'zip table is read only'); END"
    ))
    db_session.commit()
    geolocator = Mock()
    geolocator.geocode.return_value = Mock(raw={
        'lat': "39.7391",
        'lon': "-86.0805",
        'address': {'city': "Indianapolis", 'state': "Indiana", 'postcode': "46203"}
    })
    resolver = CoordinateResolver(
        zip_table=SQLAlchemyZipCodeTable(db_session),
        geolocator=geolocator,
        debug_fallback=False
    )

    page = RadiusSearchOrchestrator.from_store(seeded_store, resolver=resolver).search_near(
        "46203", radius_miles=25, date_window=WINDOW
    )

    assert page.strategy == "nearby"
    assert sorted(item.name for item in page.items) == ["Show 1", "Show 2"]
    assert db_session.get(ZipCodeModel, "46203") is None

def test_zip_table_save_rolls_back_on_error(db_session):
    table = SQLAlchemyZipCodeTable(db_session)
    db_session.execute(text(
        "CREATE TRIGGER reject_zip BEFORE INSERT ON zip_codes "
        "BEGIN SELECT RAISE(ABORT, 'zip table is read only'); END"
    ))
    db_session.commit()

    with pytest.raises(SQLAlchemyError):
        table.save(ZipCodeData(
            zip_code="46203",
            coordinate=Coordinate(latitude=39.7391, longitude=-86.0805)
        ))

    # Session is usable again
    assert db_session.query(ShowModel).count() == 0

def test_search_nearby_across_antimeridian(show_store):
    # Western Aleutians, straddling 180 degrees
    origin = Coordinate(latitude=51.9, longitude=179.5)
    show_store.add_show(_show(1, Coordinate(latitude=51.9, longitude=-179.8)))
    show_store.add_show(_show(2, Coordinate(latitude=51.9, longitude=179.2)))
    show_store.add_show(_show(3, Coordinate(latitude=51.9, longitude=-175.0)))

    rows = show_store.search_nearby(origin, 50, WINDOW)

    assert _names(rows) == ["Show 1", "Show 2"]
