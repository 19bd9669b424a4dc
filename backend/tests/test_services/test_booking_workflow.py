from datetime import datetime

import pytest

from urbanstay.db.enums import BookingStatus
from urbanstay.exceptions.custom import AuthorizationError, ValidationError
from urbanstay.services.booking_workflow import (
    Action,
    Cancelled,
    Completed,
    Confirmed,
    Party,
    Pending,
    party_of,
    state_of,
    transition,
)

ALL_STATES = [Pending(), Confirmed(False), Confirmed(True), Cancelled(), Completed()]


def test_state_of_rebuilds_variant_from_row():
    assert state_of("pending", None) == Pending()
    assert state_of("confirmed", None) == Confirmed(buyer_acked=False)
    assert state_of("confirmed", datetime(2025, 6, 1, 10, 0)) == Confirmed(buyer_acked=True)
    assert state_of("cancelled", None) == Cancelled()
    assert state_of("completed", datetime(2025, 6, 1)) == Completed()


def test_state_of_rejects_unknown_status():
    with pytest.raises(ValueError):
        state_of("archived", None)


def test_stage_names():
    assert [s.stage for s in ALL_STATES] == [
        "pending",
        "awaiting_buyer",
        "buyer_confirmed",
        "cancelled",
        "completed",
    ]
    assert Confirmed(True).status is BookingStatus.CONFIRMED


def test_party_of():
    assert party_of(1, buyer_id=1, seller_id=2) is Party.BUYER
    assert party_of(2, buyer_id=1, seller_id=2) is Party.SELLER
    assert party_of(3, buyer_id=1, seller_id=2) is Party.OUTSIDER


def test_happy_path():
    state = transition(Pending(), Action.CONFIRM_SELLER, Party.SELLER)
    assert state == Confirmed(buyer_acked=False)

    state = transition(state, Action.CONFIRM_BUYER, Party.BUYER)
    assert state == Confirmed(buyer_acked=True)
    assert state.status is BookingStatus.CONFIRMED

    state = transition(state, Action.COMPLETE, Party.SELLER)
    assert state == Completed()


def test_complete_without_buyer_ack():
    assert transition(Confirmed(False), Action.COMPLETE, Party.SELLER) == Completed()


def test_confirm_buyer_is_idempotent():
    assert transition(Confirmed(True), Action.CONFIRM_BUYER, Party.BUYER) == Confirmed(True)


@pytest.mark.parametrize("state", [Pending(), Cancelled(), Completed()])
def test_confirm_buyer_requires_confirmed(state):
    with pytest.raises(ValidationError, match="Seller must confirm first"):
        transition(state, Action.CONFIRM_BUYER, Party.BUYER)


@pytest.mark.parametrize("state", [Pending(), Confirmed(False), Confirmed(True), Cancelled()])
def test_cancel_allowed_unless_completed(state):
    assert transition(state, Action.CANCEL, Party.BUYER) == Cancelled()
    assert transition(state, Action.CANCEL, Party.SELLER) == Cancelled()


def test_cancel_completed_rejected():
    with pytest.raises(ValidationError, match="Cannot cancel completed booking"):
        transition(Completed(), Action.CANCEL, Party.SELLER)


@pytest.mark.parametrize(
    "state, message",
    [
        (Confirmed(False), "Booking is already confirmed"),
        (Confirmed(True), "Booking is already confirmed"),
        (Cancelled(), "Cannot confirm a cancelled booking"),
        (Completed(), "Cannot confirm a completed booking"),
    ],
)
def test_strict_confirm_seller_only_from_pending(state, message):
    with pytest.raises(ValidationError, match=message):
        transition(state, Action.CONFIRM_SELLER, Party.SELLER, strict=True)


@pytest.mark.parametrize(
    "state, message",
    [
        (Pending(), "Booking must be confirmed before it can be completed"),
        (Cancelled(), "Cannot complete a cancelled booking"),
        (Completed(), "Booking is already completed"),
    ],
)
def test_strict_complete_only_from_confirmed(state, message):
    with pytest.raises(ValidationError, match=message):
        transition(state, Action.COMPLETE, Party.SELLER, strict=True)


def test_default_confirm_and_complete_accept_any_state():
    assert transition(Pending(), Action.COMPLETE, Party.SELLER) == Completed()
    assert transition(Cancelled(), Action.COMPLETE, Party.SELLER) == Completed()
    assert transition(Completed(), Action.COMPLETE, Party.SELLER) == Completed()
    assert transition(Cancelled(), Action.CONFIRM_SELLER, Party.SELLER) == Confirmed(False)
    assert transition(Completed(), Action.CONFIRM_SELLER, Party.SELLER) == Confirmed(False)
    # reconfirming keeps the buyer's acknowledgement
    assert transition(Confirmed(True), Action.CONFIRM_SELLER, Party.SELLER) == Confirmed(True)


@pytest.mark.parametrize("strict", [False, True])
def test_cancel_and_confirm_buyer_rules_do_not_depend_on_mode(strict):
    with pytest.raises(ValidationError):
        transition(Completed(), Action.CANCEL, Party.BUYER, strict=strict)
    with pytest.raises(ValidationError):
        transition(Pending(), Action.CONFIRM_BUYER, Party.BUYER, strict=strict)


@pytest.mark.parametrize(
    "action, party, message",
    [
        (Action.CONFIRM_SELLER, Party.BUYER, "Only seller can confirm this booking"),
        (Action.CONFIRM_BUYER, Party.SELLER, "Only buyer can confirm this booking"),
        (Action.CANCEL, Party.OUTSIDER, "Not authorized to cancel this booking"),
        (Action.COMPLETE, Party.BUYER, "Only seller can mark booking as completed"),
    ],
)
def test_wrong_party_is_forbidden(action, party, message):
    with pytest.raises(AuthorizationError, match=message):
        transition(Pending(), action, party)


def test_party_check_runs_before_state_check():
    # completed booking, wrong party: forbidden wins over invalid state
    with pytest.raises(AuthorizationError):
        transition(Completed(), Action.COMPLETE, Party.BUYER)
    with pytest.raises(AuthorizationError):
        transition(Completed(), Action.CANCEL, Party.OUTSIDER)


@pytest.mark.parametrize("state", ALL_STATES)
def test_strict_status_moves_only_along_allowed_edges(state):
    allowed = {
        BookingStatus.PENDING: {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
        BookingStatus.CONFIRMED: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.COMPLETED},
        BookingStatus.CANCELLED: {BookingStatus.CANCELLED},
        BookingStatus.COMPLETED: set(),
    }
    for action in Action:
        for party in (Party.BUYER, Party.SELLER):
            try:
                after = transition(state, action, party, strict=True)
            except (AuthorizationError, ValidationError):
                continue
            assert after.status in allowed[state.status]
