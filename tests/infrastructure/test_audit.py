"""Audit recorder — one structured record per event, sink failures contained."""

import logging
from decimal import Decimal
from uuid import uuid4

from funds_transfer.core.domain_types import AuditEvent, AuditEventType, TransferStatus
from funds_transfer.infrastructure.audit import LoggingAuditRecorder


def _event(**overrides):
    fields = dict(
        event=AuditEventType.WITHDRAW,
        transfer_id=uuid4(),
        account_id=uuid4(),
        amount=Decimal("200.00"),
        status=TransferStatus.APPROVED,
        currency="USD",
        previous_balance=Decimal("1000.00"),
        new_balance=Decimal("800.00"),
    )
    fields.update(overrides)
    return AuditEvent(**fields)


class BrokenSink:
    def info(self, *args, **kwargs):
        raise OSError("disk full")


def test_record_emits_structured_extras(caplog):
    event = _event()
    with caplog.at_level(logging.INFO, logger="funds_transfer.audit"):
        LoggingAuditRecorder().record(event)

    [rec] = [r for r in caplog.records if r.name == "funds_transfer.audit"]
    assert rec.event == "withdraw"
    assert rec.transfer_id == str(event.transfer_id)
    assert rec.previous_balance == "1000.00"
    assert rec.new_balance == "800.00"
    assert rec.status == "APPROVED"


def test_record_without_balances(caplog):
    with caplog.at_level(logging.INFO, logger="funds_transfer.audit"):
        LoggingAuditRecorder().record(_event(
            event=AuditEventType.REJECT, status=TransferStatus.REJECTED,
            previous_balance=None, new_balance=None,
        ))

    [rec] = [r for r in caplog.records if r.name == "funds_transfer.audit"]
    assert rec.previous_balance is None
    assert rec.event == "reject"


def test_broken_sink_never_raises(caplog):
    with caplog.at_level(logging.WARNING):
        LoggingAuditRecorder(sink=BrokenSink()).record(_event())

    assert any("Audit sink failed" in r.getMessage() for r in caplog.records)
