from typing import List

from fastapi import APIRouter, Depends, status

from app.api.deps import get_feedback
from app.schemas.feedback import AverageRating, FeedbackCreate, FeedbackResponse
from app.services.feedback_service import FeedbackService

router = APIRouter()


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(body: FeedbackCreate, service: FeedbackService = Depends(get_feedback)):
    """Rate a ride. One feedback per ride; a second submission answers 409."""
    return service.save_feedback(body)


@router.get("/passenger/{passenger_id}", response_model=List[FeedbackResponse])
def feedback_by_passenger(passenger_id: int, service: FeedbackService = Depends(get_feedback)):
    return service.list_for_passenger(passenger_id)


@router.get("/driver/{driver_id}", response_model=List[FeedbackResponse])
def feedback_for_driver(driver_id: int, service: FeedbackService = Depends(get_feedback)):
    return service.list_for_driver(driver_id)


@router.get("/driver/{driver_id}/average", response_model=AverageRating)
def average_rating(driver_id: int, service: FeedbackService = Depends(get_feedback)) -> AverageRating:
    return AverageRating(driverId=driver_id, averageRating=service.average_rating(driver_id))
