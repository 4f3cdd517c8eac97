"""Admin dashboard Pydantic schemas."""

from pydantic import BaseModel, Field


class PopularClassDto(BaseModel):
    """A class name with its number of bookings."""

    name: str = Field(..., description="Class name")
    booking_count: int = Field(..., ge=0, description="Number of bookings")


class AdminDashboardDto(BaseModel):
    """Aggregated key performance indicators for staff."""

    today_occupancy_rate: float = Field(..., ge=0, description="Bookings / capacity for today's classes")
    total_waiting_list_count: int = Field(..., ge=0, description="Waiting list entries for upcoming classes")
    most_popular_classes: list[PopularClassDto] = Field(default_factory=list, description="Top classes by bookings")
