from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.query.get_event_availability_use_case import (
    GetEventAvailabilityUseCase,
)
from src.service.shopping_cart.driving_adapter.schema.cart_schema import (
    EventAvailabilityResponse,
)


router = APIRouter()


@router.get(
    '/{event_id}/availability',
    status_code=status.HTTP_200_OK,
    response_model=EventAvailabilityResponse,
)
@Logger.io
async def get_event_availability(
    event_id: str,
    use_case: GetEventAvailabilityUseCase = Depends(GetEventAvailabilityUseCase.depends),
) -> EventAvailabilityResponse:
    availability = await use_case.get_availability(event_id=event_id)
    return EventAvailabilityResponse.from_dto(availability)
