import enum
from decimal import Decimal
from garageguru import db
from garageguru.buisness.core.money import line_total, to_money
from garageguru.data.tenant_base import GarageScopedBase


class JobStatus(str, enum.Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'


class JobCard(GarageScopedBase):
    """
    Open repair ticket.

    spare_parts holds point-in-time line snapshots:
    [{"part_id": str, "name": str, "quantity": int, "unit_price": "12.50"}, ...]
    Prices are stored as decimal strings and never refreshed from the live part.
    """
    __tablename__ = 'job_cards'

    customer_id = db.Column(db.String(36), db.ForeignKey('customers.id'), nullable=False, index=True)
    customer_name = db.Column(db.Text, nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    bike_number = db.Column(db.String(32), nullable=False)
    complaint = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(JobStatus, name='job_status', values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=JobStatus.PENDING,
    )
    spare_parts = db.Column(db.JSON, nullable=False, default=list)
    service_charge = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0'))
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0'))
    completed_at = db.Column(db.DateTime, nullable=True)

    customer = db.relationship('Customer', lazy='select')

    @property
    def is_completed(self):
        return self.status is JobStatus.COMPLETED

    @property
    def parts_total(self):
        return to_money(sum((line_total(line) for line in self.spare_parts or []), Decimal('0')))

    def to_dict(self, exclude=()):
        data = super().to_dict(exclude)
        data['spare_parts'] = [
            {**line, 'unit_price': float(Decimal(line['unit_price']))}
            for line in self.spare_parts or []
        ]
        return data

    def __repr__(self):
        return f'<JobCard {self.id} {self.bike_number} - {self.status.value}>'
