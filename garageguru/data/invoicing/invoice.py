from garageguru import db
from garageguru.data.tenant_base import GarageScopedBase


class Invoice(GarageScopedBase):
    """Billing record that finalises exactly one job card"""
    __tablename__ = 'invoices'

    job_card_id = db.Column(db.String(36), db.ForeignKey('job_cards.id'), nullable=False, unique=True)
    customer_id = db.Column(db.String(36), db.ForeignKey('customers.id'), nullable=False, index=True)
    invoice_number = db.Column(db.String(64), nullable=False)
    pdf_url = db.Column(db.Text, nullable=True)
    whatsapp_sent = db.Column(db.Boolean, nullable=False, default=False)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    parts_total = db.Column(db.Numeric(10, 2), nullable=False)
    service_charge = db.Column(db.Numeric(10, 2), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('garage_id', 'invoice_number', name='uix_invoice_number'),
    )

    # Everything else is frozen once issued
    DELIVERY_FIELDS = ('pdf_url', 'whatsapp_sent')

    job_card = db.relationship('JobCard', lazy='select')

    def __repr__(self):
        return f'<Invoice {self.invoice_number}>'
