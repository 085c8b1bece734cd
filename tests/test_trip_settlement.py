import pytest

from app.core.exceptions import EstimatedFareMissingError, NoOngoingTripError, NotFoundError
from app.db.stores import RideStore, TripStore
from app.models import ONGOING


def test_end_trip_without_ongoing_trip(settlement, passenger):
    with pytest.raises(NoOngoingTripError) as excinfo:
        settlement.end_trip(passenger.id)
    assert isinstance(excinfo.value, NotFoundError)
    assert excinfo.value.message == "No ongoing trip found."


def test_start_trip_links_newest_ride_without_trip(ledger, settlement, passenger, driver, ride_request, clock, db):
    older = ledger.request_ride(ride_request(passenger.id, driver.id, fare=30.0)).rideId
    ledger.cancel_ride(older, passenger.id)
    clock.advance(60_000)
    newer = ledger.request_ride(ride_request(passenger.id, driver.id, fare=45.0)).rideId

    trip_id = settlement.start_trip(passenger.id, driver.id, reservation=True)

    rides = RideStore(db)
    assert rides.get_by_ride_id(newer).trip_id == trip_id
    assert rides.get_by_ride_id(older).trip_id is None
    trip = TripStore(db).get(trip_id)
    assert trip.end_time == ONGOING
    assert trip.reservation is True


def test_end_trip_settles_at_estimated_fare(ledger, settlement, passenger, driver, ride_request, clock, db):
    ledger.request_ride(ride_request(passenger.id, driver.id, fare=45.0))
    trip_id = settlement.start_trip(passenger.id, driver.id, reservation=False)
    clock.advance(15 * 60_000)

    result = settlement.end_trip(passenger.id)
    assert result.fare == 45.0
    assert result.endTime == clock.now_ms()
    assert settlement.get_fare_for_latest_trip(passenger.id) == 45.0
    assert settlement.get_fare_for_latest_trip(driver.id) == 45.0
    assert TripStore(db).get(trip_id).fare == 45.0

    # Closed exactly once
    with pytest.raises(NoOngoingTripError):
        settlement.end_trip(passenger.id)


def test_end_trip_needs_linked_fare(ledger, settlement, passenger, driver, ride_request):
    ledger.request_ride(ride_request(passenger.id, driver.id, fare=None))
    settlement.start_trip(passenger.id, driver.id, reservation=False)

    with pytest.raises(EstimatedFareMissingError, match="Estimated fare not found"):
        settlement.end_trip(passenger.id)


def test_trip_without_ride(settlement, passenger, driver):
    settlement.start_trip(passenger.id, driver.id, reservation=True)
    with pytest.raises(EstimatedFareMissingError):
        settlement.end_trip(passenger.id)


def test_latest_fare_without_trips(settlement, passenger):
    assert settlement.get_fare_for_latest_trip(passenger.id) is None


def test_pin_verification_reuses_reservation_trip(ledger, settlement, passenger, driver, ride_request, db):
    ride = ledger.accept_ride(ledger.request_ride(ride_request(passenger.id, driver.id)).rideId, driver.id)
    trip_id = settlement.start_trip(passenger.id, driver.id, reservation=True)

    outcome = ledger.verify_pin(ride.ride_id, driver.id, ride.ride_pin, "driver")
    assert outcome.tripId == trip_id
    assert len(TripStore(db).started_between(driver.id, 0, 2 ** 62)) == 1


def test_ride_keeps_first_trip(ledger, settlement, passenger, driver, ride_request, db):
    ride_id = ledger.request_ride(ride_request(passenger.id, driver.id)).rideId
    first = settlement.start_trip(passenger.id, driver.id, reservation=False)
    second = settlement.start_trip(passenger.id, driver.id, reservation=False)

    rides = RideStore(db)
    ride = rides.get_by_ride_id(ride_id)
    assert ride.trip_id == first
    assert rides.claim_trip(ride, second) is False
    assert rides.get_by_ride_id(ride_id).trip_id == first
