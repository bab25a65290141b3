"""Request-scoped dependencies for the API routers."""

from fastapi import Depends
from sqlalchemy.orm import Session

from showfinder.database import get_db
from showfinder.services.geocoding import CoordinateResolver
from showfinder.services.show_search import RadiusSearchOrchestrator
from showfinder.services.show_store import SQLAlchemyShowStore, SQLAlchemyZipCodeTable

def get_resolver(db: Session = Depends(get_db)) -> CoordinateResolver:
    """Resolver backed by the zip_codes table and Nominatim."""
    return CoordinateResolver(zip_table=SQLAlchemyZipCodeTable(db))

def get_orchestrator(
    db: Session = Depends(get_db),
    resolver: CoordinateResolver = Depends(get_resolver)
) -> RadiusSearchOrchestrator:
    return RadiusSearchOrchestrator.from_store(SQLAlchemyShowStore(db), resolver=resolver)
