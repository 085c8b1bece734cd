from conftest import PASSWORD

from app.core.security import create_access_token

API = "/api/v1"

RIDE_BODY = {
    "startLocation": {"coordinates": {"latitude": -26.2041, "longitude": 28.0473}, "address": "Bree Street Taxi Rank"},
    "endLocation": {"coordinates": {"latitude": -26.1076, "longitude": 28.0567}, "address": "Sandton City"},
    "estimatedFare": 25.0,
    "estimatedDistance": 7.5,
}


def _sign_up(client, phone, account_type):
    response = client.post(f"{API}/auth/signup", json={
        "phoneNumber": phone,
        "name": f"{account_type.title()} {phone[-2:]}",
        "password": PASSWORD,
        "accountType": account_type,
    })
    assert response.status_code == 201, response.text
    return response.json()["userId"]


def _login(client, phone):
    response = client.post(f"{API}/auth/login", json={"phoneNumber": phone, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _bearer(user):
    token = create_access_token(user.id, user.current_active_role, user.account_type)
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    response = client.get(f"{API}/health/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "online"
    assert body["timezone"] == "UTC"


def test_ride_lifecycle_over_http(client, clock):
    passenger_id = _sign_up(client, "+27830000001", "passenger")
    driver_id = _sign_up(client, "+27830000002", "driver")
    as_passenger = _login(client, "+27830000001")
    as_driver = _login(client, "+27830000002")

    response = client.post(f"{API}/rides", json={"passengerId": passenger_id, "driverId": driver_id, **RIDE_BODY},
                           headers=as_passenger)
    assert response.status_code == 201
    ride_id = response.json()["rideId"]

    response = client.post(f"{API}/rides/{ride_id}/accept", json={"driverId": driver_id}, headers=as_driver)
    assert response.status_code == 200
    pin = response.json()["ride_pin"]
    assert len(pin) == 4 and pin.isdigit()

    response = client.post(f"{API}/rides/{ride_id}/verify-driver-pin",
                           json={"requesterId": passenger_id, "enteredPin": "0000", "driverId": driver_id},
                           headers=as_passenger)
    assert response.status_code == 200
    assert response.json()["success"] is False
    assert client.get(f"{API}/rides/{ride_id}").json()["status"] == "accepted"

    response = client.post(f"{API}/rides/{ride_id}/verify-pin", json={"requesterId": driver_id, "enteredPin": pin},
                           headers=as_driver)
    body = response.json()
    assert body["success"] is True
    assert body["ride"]["status"] == "in_progress"

    active = client.get(f"{API}/rides/driver/{driver_id}/active").json()
    assert active["ride_id"] == ride_id

    response = client.post(f"{API}/rides/{ride_id}/complete", json={"driverId": driver_id}, headers=as_driver)
    assert response.status_code == 200
    assert response.json() == {"_id": ride_id, "message": "Ride marked as completed."}

    response = client.post(f"{API}/rides/{ride_id}/payment", json={"passengerId": passenger_id, "paid": True},
                           headers=as_passenger)
    assert response.json()["success"] is True

    assert client.get(f"{API}/trips/fare/{passenger_id}").json() == {"fare": 25.0}

    weeks = client.get(f"{API}/earnings/{driver_id}").json()
    assert len(weeks) == 4
    assert weeks[0]["earnings"] == 25
    assert weeks[0]["todayEarnings"] == 25

    notifications = client.get(f"{API}/notifications/{driver_id}").json()
    assert [n["type"] for n in notifications] == ["payment_received", "ride_requested"]
    response = client.post(f"{API}/notifications/user/{driver_id}/read-all")
    assert response.json() == {"count": 2}
    assert client.get(f"{API}/notifications/{driver_id}", params={"unread_only": True}).json() == []


def test_service_errors_render_detail_and_type(client, passenger):
    response = client.get(f"{API}/rides/ride_does_not_exist")
    assert response.status_code == 404
    assert response.json() == {"detail": "Ride not found", "error": "NotFoundError"}

    response = client.post(f"{API}/trips/end", json={"passengerId": passenger.id})
    assert response.status_code == 404
    assert response.json() == {"detail": "No ongoing trip found.", "error": "NoOngoingTripError"}

    response = client.post(f"{API}/rides/ride_x/verify-pin", json={"requesterId": passenger.id, "enteredPin": "12"},
                           headers=_bearer(passenger))
    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


def test_driver_device_conflict_over_http(client, driver):
    session = {"userId": driver.id, "deviceId": "device-A", "platform": "android", "role": "driver"}
    assert client.post(f"{API}/sessions", json=session).status_code == 201

    response = client.post(f"{API}/sessions", json={**session, "deviceId": "device-B"})
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"

    assert client.post(f"{API}/sessions/device-A/deactivate").json() == {"count": 1}
    assert client.post(f"{API}/sessions", json={**session, "deviceId": "device-B"}).status_code == 201
    assert client.post(f"{API}/sessions/cleanup").json() == {"count": 0}


def test_login_and_me(client):
    user_id = _sign_up(client, "+27830000009", "both")

    response = client.post(f"{API}/auth/login", json={"phoneNumber": "+27830000009", "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me == {"user_id": user_id, "role": "passenger", "account_type": "both"}

    response = client.post(f"{API}/auth/login", json={"phoneNumber": "+27830000009", "password": "nope-nope"})
    assert response.status_code == 403


def test_role_switch_over_http(client, make_user):
    user = make_user("both")

    response = client.post(f"{API}/users/{user.id}/active-role", json={"newRole": "driver"})
    assert response.status_code == 200
    assert response.json()["newRole"] == "driver"

    response = client.post(f"{API}/users/{user.id}/profiles/location")
    assert response.json()["created"] is False

    response = client.post(f"{API}/users/{user.id}/account-type/both-to-passenger")
    assert response.json()["success"] is True

    response = client.post(f"{API}/users/{user.id}/account-type/sideways")
    assert response.status_code == 422


def test_work_sessions_over_http(client, driver, clock):
    assert client.post(f"{API}/work-sessions/end", json={"driverId": driver.id}).status_code == 404

    started = client.post(f"{API}/work-sessions/start", json={"driverId": driver.id})
    assert started.status_code == 201
    assert client.post(f"{API}/work-sessions/start", json={"driverId": driver.id}).status_code == 409

    clock.advance(2 * 60 * 60 * 1000)
    ended = client.post(f"{API}/work-sessions/end", json={"driverId": driver.id})
    assert ended.json()["sessionId"] == started.json()["sessionId"]
    assert client.get(f"{API}/earnings/{driver.id}").json()[0]["hoursOnline"] == 2


def test_feedback_over_http(client, ledger, passenger, driver, ride_request):
    ride = ledger.accept_ride(ledger.request_ride(ride_request(passenger.id, driver.id)).rideId, driver.id)
    ride_id = ride.ride_id

    body = {"rideId": ride_id, "passengerId": passenger.id, "driverId": driver.id, "rating": 4}
    assert client.post(f"{API}/feedback", json=body).status_code == 201
    assert client.post(f"{API}/feedback", json=body).status_code == 409
    assert client.post(f"{API}/feedback", json={**body, "rating": 6}).status_code == 422

    assert client.get(f"{API}/feedback/driver/{driver.id}/average").json() == {"driverId": driver.id, "averageRating": 4.0}
    assert client.get(f"{API}/feedback/passenger/{passenger.id}").json()[0]["driver_name"] == "Sipho"


def test_session_for_unknown_or_ineligible_user_is_refused(client, passenger):
    body = {"userId": 424242, "deviceId": "device-X", "platform": "android", "role": "driver"}
    response = client.post(f"{API}/sessions", json=body)
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"

    response = client.post(f"{API}/sessions", json={**body, "userId": passenger.id})
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidStateError"
    assert client.get(f"{API}/sessions/user/{passenger.id}").json() == []


def test_ride_actions_require_the_acting_users_token(client, passenger, driver, ledger, ride_request):
    ride_id = ledger.request_ride(ride_request(passenger.id, driver.id)).rideId

    response = client.post(f"{API}/rides/{ride_id}/accept", json={"driverId": driver.id})
    assert response.status_code in (401, 403)

    response = client.post(f"{API}/rides/{ride_id}/accept", json={"driverId": driver.id}, headers=_bearer(passenger))
    assert response.status_code == 403
    assert response.json() == {"detail": "Token does not belong to the acting user", "error": "UnauthorizedError"}

    response = client.post(f"{API}/rides/{ride_id}/pin", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert client.get(f"{API}/rides/{ride_id}").json()["status"] == "requested"

    response = client.post(f"{API}/rides/{ride_id}/accept", json={"driverId": driver.id}, headers=_bearer(driver))
    assert response.status_code == 200
