"""
Stay list endpoints for the signed-in user.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from staly.api.deps import CurrentUserDep, StaysServiceDep
from staly.core.exceptions import StayValidationError
from staly.models.schemas import Stay
from staly.services.stats import filter_stays, share_summary, summarize_stays
from staly.services.stays_service import build_stay

router = APIRouter()


# Request/Response Models
class StayRequest(BaseModel):
    """Editor input for a stay."""

    title: Optional[str] = None
    city: Optional[str] = None
    checkIn: date
    checkOut: Optional[date] = None
    note: Optional[str] = None


class StayStatsResponse(BaseModel):
    """Dashboard aggregates."""

    stayCount: int
    totalDays: int
    totalNights: int
    cityCount: int
    hotelCount: int
    yearFraction: float
    firstStay: Optional[Stay] = None
    summary: str = Field(..., description="Shareable plain-text summary")


def stay_from_request(request: StayRequest, stay_id: Optional[str] = None) -> Stay:
    try:
        return build_stay(
            title=request.title,
            check_in=request.checkIn,
            city=request.city,
            check_out=request.checkOut,
            note=request.note,
            stay_id=stay_id,
        )
    except StayValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.user_message,
        )


@router.get("", response_model=list[Stay], response_model_by_alias=True)
async def list_stays(
    current_user: CurrentUserDep,
    stays: StaysServiceDep,
    q: Optional[str] = Query(None, description="Search title / city / note"),
):
    """
    List the user's stays.

    Sorted by check-in ascending; with ``q``, only matches, newest first.
    """
    items = await stays.list_stays(current_user.id)
    if q is not None:
        return filter_stays(items, q)
    return items


@router.get("/stats", response_model=StayStatsResponse)
async def get_stats(current_user: CurrentUserDep, stays: StaysServiceDep):
    stats = summarize_stays(await stays.list_stays(current_user.id))
    return StayStatsResponse(
        stayCount=stats.stay_count,
        totalDays=stats.total_days,
        totalNights=stats.total_nights,
        cityCount=stats.city_count,
        hotelCount=stats.hotel_count,
        yearFraction=stats.year_fraction,
        firstStay=stats.first_stay,
        summary=share_summary(stats),
    )


@router.post(
    "",
    response_model=Stay,
    status_code=status.HTTP_201_CREATED,
)
async def create_stay(request: StayRequest, current_user: CurrentUserDep, stays: StaysServiceDep):
    stay = stay_from_request(request)
    await stays.add_stay(stay, current_user.id)
    return stay


@router.put("/{stay_id}", response_model=Stay)
async def save_stay(
    stay_id: str,
    request: StayRequest,
    current_user: CurrentUserDep,
    stays: StaysServiceDep,
):
    """Replace the stay with this id, or create it."""
    stay = stay_from_request(request, stay_id=stay_id)
    await stays.upsert_stay(stay, current_user.id)
    return stay


@router.delete("/{stay_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stay(stay_id: str, current_user: CurrentUserDep, stays: StaysServiceDep):
    """Delete a stay. Unknown ids are ignored."""
    await stays.delete_stay(stay_id, current_user.id)
