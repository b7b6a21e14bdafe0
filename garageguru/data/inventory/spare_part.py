from garageguru import db
from garageguru.data.tenant_base import GarageScopedBase

DEFAULT_LOW_STOCK_THRESHOLD = 2


class SparePart(GarageScopedBase):
    """Stock record for one part in one garage"""
    __tablename__ = 'spare_parts'

    name = db.Column(db.Text, nullable=False)
    part_number = db.Column(db.String(100), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=DEFAULT_LOW_STOCK_THRESHOLD)
    barcode = db.Column(db.String(128), nullable=True)

    __table_args__ = (
        db.UniqueConstraint('garage_id', 'barcode', name='uix_part_barcode'),
    )

    EDITABLE_FIELDS = ('name', 'part_number', 'price', 'quantity', 'low_stock_threshold', 'barcode')

    @property
    def is_low_stock(self):
        return self.quantity <= self.low_stock_threshold

    def to_dict(self, exclude=()):
        data = super().to_dict(exclude)
        data['is_low_stock'] = self.is_low_stock
        return data

    def __repr__(self):
        return f'<SparePart {self.part_number}: {self.name} Qty:{self.quantity}>'
