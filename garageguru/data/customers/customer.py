from decimal import Decimal
from garageguru import db
from garageguru.data.tenant_base import GarageScopedBase


class Customer(GarageScopedBase):
    """
    A garage's customer, identified within the garage by phone and bike number.

    total_jobs, total_spent and last_visit are aggregates owned by invoice issuance.
    """
    __tablename__ = 'customers'

    name = db.Column(db.Text, nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    bike_number = db.Column(db.String(32), nullable=False)
    total_jobs = db.Column(db.Integer, nullable=False, default=0)
    total_spent = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0'))
    last_visit = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('garage_id', 'phone', 'bike_number', name='uix_customer_identity'),
    )

    def __repr__(self):
        return f'<Customer {self.name} {self.bike_number}>'
