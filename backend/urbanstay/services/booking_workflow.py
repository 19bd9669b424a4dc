"""
Booking lifecycle.

A booking is in exactly one of five workflow states::

    Pending
    Confirmed(buyer_acked=False)   seller said yes, buyer has not answered
    Confirmed(buyer_acked=True)    both parties confirmed
    Cancelled                      terminal
    Completed                      terminal

Only four of them have their own ``status`` value; the buyer acknowledgement
lives in ``buyer_confirmed_at``. ``state_of`` rebuilds the variant from the
stored row and ``transition`` is the single place that decides whether an
action is allowed, for which party and from which state.

Default rules::

    confirm-seller   seller           any              -> Confirmed(acked kept)
    confirm-buyer    buyer            Confirmed(*)     -> Confirmed(True)
    cancel           buyer | seller   not Completed    -> Cancelled
    complete         seller           any              -> Completed

With ``strict=True`` confirm-seller is accepted only from Pending and complete
only from Confirmed, so a pending booking can no longer be completed.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from urbanstay.db.enums import BookingStatus
from urbanstay.exceptions.custom import AuthorizationError, ValidationError


class Party(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    OUTSIDER = "outsider"


class Action(str, Enum):
    CONFIRM_SELLER = "confirm-seller"
    CONFIRM_BUYER = "confirm-buyer"
    CANCEL = "cancel"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Pending:
    status = BookingStatus.PENDING
    stage = "pending"


@dataclass(frozen=True)
class Confirmed:
    buyer_acked: bool = False
    status = BookingStatus.CONFIRMED

    @property
    def stage(self) -> str:
        return "buyer_confirmed" if self.buyer_acked else "awaiting_buyer"


@dataclass(frozen=True)
class Cancelled:
    status = BookingStatus.CANCELLED
    stage = "cancelled"


@dataclass(frozen=True)
class Completed:
    status = BookingStatus.COMPLETED
    stage = "completed"


BookingState = Union[Pending, Confirmed, Cancelled, Completed]

_ALLOWED_PARTIES = {
    Action.CONFIRM_SELLER: ({Party.SELLER}, "Only seller can confirm this booking"),
    Action.CONFIRM_BUYER: ({Party.BUYER}, "Only buyer can confirm this booking"),
    Action.CANCEL: ({Party.BUYER, Party.SELLER}, "Not authorized to cancel this booking"),
    Action.COMPLETE: ({Party.SELLER}, "Only seller can mark booking as completed"),
}


def state_of(status: str, buyer_confirmed_at: Optional[datetime]) -> BookingState:
    status = BookingStatus(status)
    if status is BookingStatus.PENDING:
        return Pending()
    if status is BookingStatus.CONFIRMED:
        return Confirmed(buyer_acked=buyer_confirmed_at is not None)
    if status is BookingStatus.CANCELLED:
        return Cancelled()
    return Completed()


def party_of(user_id: int, buyer_id: int, seller_id: int) -> Party:
    if user_id == buyer_id:
        return Party.BUYER
    if user_id == seller_id:
        return Party.SELLER
    return Party.OUTSIDER


def transition(
    state: BookingState,
    action: Action,
    party: Party,
    *,
    strict: bool = False,
) -> BookingState:
    """
    Return the state after ``action`` or raise.

    AuthorizationError when ``party`` may not perform ``action`` at all,
    ValidationError when the action is not allowed from ``state``. The party
    check always runs first.
    """
    parties, forbidden = _ALLOWED_PARTIES[action]
    if party not in parties:
        raise AuthorizationError(forbidden)

    if action is Action.CONFIRM_SELLER:
        if isinstance(state, Pending):
            return Confirmed(buyer_acked=False)
        if not strict:
            acked = isinstance(state, Confirmed) and state.buyer_acked
            return Confirmed(buyer_acked=acked)
        if isinstance(state, Confirmed):
            raise ValidationError("Booking is already confirmed")
        raise ValidationError(f"Cannot confirm a {state.status.value} booking")

    if action is Action.CONFIRM_BUYER:
        if isinstance(state, Confirmed):
            return Confirmed(buyer_acked=True)
        raise ValidationError("Seller must confirm first")

    if action is Action.CANCEL:
        if isinstance(state, Completed):
            raise ValidationError("Cannot cancel completed booking")
        return Cancelled()

    # Action.COMPLETE
    if isinstance(state, Confirmed) or not strict:
        return Completed()
    if isinstance(state, Completed):
        raise ValidationError("Booking is already completed")
    if isinstance(state, Cancelled):
        raise ValidationError("Cannot complete a cancelled booking")
    raise ValidationError("Booking must be confirmed before it can be completed")
