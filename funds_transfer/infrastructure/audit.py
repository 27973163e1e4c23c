"""Audit Trail — structured audit records for transfer and balance events.

Invariants:
    - One log record per AuditEvent on the dedicated "funds_transfer.audit" logger
    - record() never raises: a broken sink must not fail a committed transfer
    - Balances and amounts are emitted as strings (exact decimal text)

Design Decisions:
    - Logger-backed sink over a DB table: the audit store is an external
      collaborator; shipping handlers decide where the records land
"""

import logging

from funds_transfer.core.domain_types import AuditEvent

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("funds_transfer.audit")


class LoggingAuditRecorder:
    """Writes audit events as structured log records."""

    def __init__(self, sink: logging.Logger = audit_logger) -> None:
        self._sink = sink

    def record(self, event: AuditEvent) -> None:
        try:
            self._sink.info(
                f"Transfer {event.event.value}: {event.transfer_id}",
                extra={
                    "event": event.event.value,
                    "transfer_id": str(event.transfer_id),
                    "account_id": str(event.account_id),
                    "amount": str(event.amount),
                    "currency": event.currency,
                    "status": event.status.value,
                    "previous_balance": _text(event.previous_balance),
                    "new_balance": _text(event.new_balance),
                },
            )
        except Exception as e:
            logger.warning(
                f"Audit sink failed for transfer {event.transfer_id}: {e}",
            )


def _text(value) -> str | None:
    return None if value is None else str(value)
