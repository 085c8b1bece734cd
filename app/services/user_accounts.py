"""
Phone-number sign up and login.

Login optionally registers a device session in the same transaction, so a
driver already active elsewhere gets the device conflict instead of a token.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.core.clock import Clock
from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError, UnauthorizedError
from app.core.security import create_access_token, hash_password, verify_password
from app.db.stores import UserStore
from app.models import AccountType, Driver, Passenger, Role, User
from app.schemas.user import LoginRequest, LoginResult, SignUpRequest, SignUpResult, UserSummary
from app.services.device_sessions import DeviceSessionRegistry

logger = logging.getLogger(__name__)


class UserAccounts:
    def __init__(self, users: UserStore, device_sessions: DeviceSessionRegistry, clock: Clock):
        self.users = users
        self.device_sessions = device_sessions
        self.clock = clock

    def sign_up(self, data: SignUpRequest) -> SignUpResult:
        if self.users.get_by_phone(data.phoneNumber):
            raise ConflictError("Phone number already exists")

        now = self.clock.now_ms()
        role = Role.PASSENGER if data.accountType == AccountType.BOTH else data.accountType
        try:
            user = self.users.add(User(
                phone_number=data.phoneNumber,
                name=data.name,
                password=hash_password(data.password),
                email=data.email or "",
                age=data.age if data.age is not None else 18,
                account_type=data.accountType,
                current_active_role=role,
                is_verified=False,
                is_active=True,
                updated_at_ms=now,
            ))
            if data.accountType in (AccountType.PASSENGER, AccountType.BOTH):
                self.users.add(Passenger(user_id=user.id, number_of_rides_taken=0, total_distance=0, total_fare=0))
            if data.accountType in (AccountType.DRIVER, AccountType.BOTH):
                self.users.add(Driver(user_id=user.id, number_of_rides_completed=0, total_distance=0, total_fare=0))
            self.users.commit()
        except IntegrityError:
            self.users.rollback()
            logger.warning(f"Sign up for {data.phoneNumber} lost a race on the phone number")
            raise ConflictError("Phone number already exists")

        logger.info(f"Signed up user {user.id} as {data.accountType}")
        return SignUpResult(success=True, userId=user.id)

    def login(self, data: LoginRequest) -> LoginResult:
        user = self.users.get_by_phone(data.phoneNumber)
        if not user:
            raise NotFoundError("User not found")
        if not verify_password(data.password, user.password):
            logger.warning(f"Invalid password for user {user.id}")
            raise UnauthorizedError("Invalid password")
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated. Please contact support.")

        role: Optional[str] = user.current_active_role
        if not role:
            raise InvalidStateError("No active role set. Please contact support.")
        if not user.can_act_as(role):
            raise InvalidStateError(
                f"Role mismatch: Current active role ({role}) doesn't match "
                f"your account permissions ({user.account_type})"
            )

        if data.deviceId:
            self.device_sessions.login(
                user.id,
                data.deviceId,
                data.platform or "unknown",
                role,
                device_name=data.deviceName,
                commit=False,
            )

        user.last_login_at = self.clock.now_ms()
        self.users.commit()

        token = create_access_token(user.id, role, user.account_type)
        logger.info(f"User {user.id} logged in as {role}")
        return LoginResult(user=UserSummary.model_validate(user), access_token=token)
