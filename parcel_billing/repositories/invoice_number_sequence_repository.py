"""Repository handing out invoice sequence numbers."""

from sqlalchemy.orm import Session

from parcel_billing.core.database import insert_if_absent
from parcel_billing.models.invoice_number_sequence import InvoiceNumberSequence


class InvoiceNumberSequenceRepository:
    def __init__(self, db: Session):
        self.db = db

    def next_number(self, day: str) -> int:
        """Reserve the next number for the day.

        The sequence row stays locked until the caller's transaction ends, so
        concurrent generators in any process get distinct numbers. A rolled
        back transaction gives its number back.
        """
        insert_if_absent(self.db, InvoiceNumberSequence, {"day": day, "last_number": 0}, ["day"])
        sequence = (
            self.db.query(InvoiceNumberSequence)
            .filter(InvoiceNumberSequence.day == day)
            .with_for_update()
            .populate_existing()
            .one()
        )
        sequence.last_number = int(sequence.last_number) + 1  # type: ignore[assignment]
        self.db.flush()
        return int(sequence.last_number)
