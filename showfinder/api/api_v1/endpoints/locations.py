from fastapi import APIRouter, Depends, HTTPException
import logging

from showfinder.api.deps import get_resolver
from showfinder.schemas.show import ResolvedLocation
from showfinder.services.error_handling import ResolutionFailure
from showfinder.services.geocoding import CoordinateResolver

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/{zip_or_address}", response_model=ResolvedLocation)
def resolve_location(
    zip_or_address: str,
    resolver: CoordinateResolver = Depends(get_resolver)
) -> ResolvedLocation:
    """Resolve a ZIP code or address to coordinates."""
    try:
        return resolver.resolve(zip_or_address)
    except ResolutionFailure as e:
        raise HTTPException(status_code=404, detail=str(e))
