from pydantic import BaseModel, Field


class CancelSeatRequest(BaseModel):
    """Request body for cancelling one attendee's seat."""

    seat_reference_uid: str = Field(..., min_length=1, description="Seat reference UID")
