from pydantic import BaseModel


class CancelSeatResponse(BaseModel):
    """Response for POST /bookings/{uid}/seats/cancel"""

    success: bool
    message: str | None = None
