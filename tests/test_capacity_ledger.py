import math

import pytest

from binroute.errors import AdmissionRejected, RejectionReason
from binroute.models.domain import BinRecord, Coordinate
from binroute.services.bins.ledger import CapacityLedger


def _bin(amount: float) -> BinRecord:
    return BinRecord.create(location=None, amount=amount, coordinate=Coordinate(6.9, 79.86))


def test_accepts_amount_within_remaining_capacity():
    ledger = CapacityLedger(100)
    admission = ledger.try_admit(40)

    assert admission.accepted
    assert admission.amount == 40.0
    # a decision alone does not commit anything
    assert ledger.committed == 0


def test_rejects_amount_over_remaining_capacity():
    ledger = CapacityLedger(100)
    ledger.recompute([_bin(40), _bin(40), _bin(15)])

    admission = ledger.try_admit(10)

    assert not admission.accepted
    assert admission.reason is RejectionReason.CAPACITY_EXCEEDED
    assert admission.message == "Amount exceeds remaining truck capacity of 5.00 kg."
    assert ledger.committed == 95


def test_exact_fit_is_accepted():
    ledger = CapacityLedger(100)
    ledger.recompute([_bin(60)])

    assert ledger.try_admit(40).accepted


def test_fractional_exact_fit_is_accepted():
    ledger = CapacityLedger(1.0)
    ledger.recompute([_bin(0.1), _bin(0.2)])

    assert ledger.try_admit(0.7).accepted

    ledger.recompute([_bin(0.1), _bin(0.2), _bin(0.7)])
    assert ledger.committed == pytest.approx(1.0)
    assert ledger.remaining == pytest.approx(0.0)
    assert not ledger.try_admit(0.01).accepted


@pytest.mark.parametrize("amount", [0, -3, "abc", "", None, math.nan, math.inf, True])
def test_rejects_non_positive_or_non_numeric(amount):
    admission = CapacityLedger(100).try_admit(amount)

    assert not admission.accepted
    assert admission.reason is RejectionReason.NOT_POSITIVE


def test_numeric_strings_are_parsed():
    admission = CapacityLedger(100).try_admit(" 12.5 ")

    assert admission.accepted
    assert admission.amount == 12.5


def test_raise_if_rejected_carries_reason():
    ledger = CapacityLedger(10)
    with pytest.raises(AdmissionRejected) as excinfo:
        ledger.try_admit(11).raise_if_rejected()

    assert excinfo.value.reason is RejectionReason.CAPACITY_EXCEEDED


def test_snapshot_caps_utilization_and_remaining():
    ledger = CapacityLedger(100)
    # a concurrent writer can leave more than capacity in the store
    ledger.recompute([_bin(80), _bin(40)])

    snapshot = ledger.snapshot()
    assert snapshot["committed_kg"] == 120
    assert snapshot["remaining_kg"] == 0
    assert snapshot["utilization_percent"] == 100


def test_capacity_limit_must_be_positive():
    with pytest.raises(ValueError):
        CapacityLedger(0)
