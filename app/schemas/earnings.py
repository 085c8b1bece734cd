from typing import List
from pydantic import BaseModel, Field

class DailyEarnings(BaseModel):
    day: str = Field(..., description="Mon..Sun")
    earnings: int = Field(..., description="Fares of trips started that day, rounded")

class WeeklyEarnings(BaseModel):
    """Earnings summary for one Monday-start calendar week."""
    dateRangeStart: int = Field(..., description="Epoch milliseconds of Monday 00:00")
    earnings: float = Field(..., description="Sum of trip fares started this week")
    hoursOnline: int = Field(..., description="Finished work-session hours, rounded")
    averagePerHour: int = Field(..., description="earnings / hoursOnline, rounded; 0 when offline all week")
    reservations: int = Field(..., description="Trips that fulfilled a reservation")
    dailyData: List[DailyEarnings]
    todayEarnings: int = Field(..., description="Only set for the current week")

    model_config = {
        "json_schema_extra": {
            "example": {
                "dateRangeStart": 1717970400000,
                "earnings": 150,
                "hoursOnline": 48,
                "averagePerHour": 3,
                "reservations": 1,
                "dailyData": [
                    {"day": "Mon", "earnings": 100},
                    {"day": "Tue", "earnings": 50},
                    {"day": "Wed", "earnings": 0},
                    {"day": "Thu", "earnings": 0},
                    {"day": "Fri", "earnings": 0},
                    {"day": "Sat", "earnings": 0},
                    {"day": "Sun", "earnings": 0}
                ],
                "todayEarnings": 50
            }
        }
    }
