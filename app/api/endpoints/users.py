from typing import Literal

from fastapi import APIRouter, Depends

from app.api.deps import get_role_switch
from app.schemas.user import AccountSwitchResult, ProfileResult, RoleSwitchRequest, RoleSwitchResult
from app.services.role_switch import RoleSwitchGuard

router = APIRouter()

AccountTransition = Literal["both-to-driver", "both-to-passenger", "driver-to-both", "passenger-to-both"]
ProfileKind = Literal["passenger", "driver", "location"]


@router.post("/{user_id}/active-role", response_model=RoleSwitchResult)
def switch_active_role(
    user_id: int,
    body: RoleSwitchRequest,
    guard: RoleSwitchGuard = Depends(get_role_switch),
) -> RoleSwitchResult:
    """
    Toggle the active role of an account that is both passenger and driver.

    Refused while the user still has a requested, accepted or in-progress
    ride in the role they are leaving.
    """
    return guard.switch_active_role(user_id, body.newRole)


@router.post("/{user_id}/account-type/{transition}", response_model=AccountSwitchResult)
def switch_account_type(
    user_id: int,
    transition: AccountTransition,
    guard: RoleSwitchGuard = Depends(get_role_switch),
) -> AccountSwitchResult:
    handlers = {
        "both-to-driver": guard.switch_both_to_driver,
        "both-to-passenger": guard.switch_both_to_passenger,
        "driver-to-both": guard.switch_driver_to_both,
        "passenger-to-both": guard.switch_passenger_to_both,
    }
    return handlers[transition](user_id)


@router.post("/{user_id}/profiles/{kind}", response_model=ProfileResult)
def ensure_profile(
    user_id: int,
    kind: ProfileKind,
    guard: RoleSwitchGuard = Depends(get_role_switch),
) -> ProfileResult:
    """Create the profile if missing. Calling it again returns the same record."""
    if kind == "passenger":
        record, created = guard.ensure_passenger_profile(user_id)
    elif kind == "driver":
        record, created = guard.ensure_driver_profile(user_id)
    else:
        record, created = guard.ensure_location(user_id)
    return ProfileResult(profile=kind, id=record.id, created=created)
