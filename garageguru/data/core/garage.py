from garageguru import db
from garageguru.data.tenant_base import BaseRecord


class Garage(BaseRecord):
    """A tenant: one independent repair shop and the root of data isolation"""
    __tablename__ = 'garages'

    name = db.Column(db.Text, nullable=False)
    owner_name = db.Column(db.Text, nullable=False)
    phone = db.Column(db.Text, nullable=False)
    email = db.Column(db.Text, nullable=False)
    logo = db.Column(db.Text, nullable=True)  # URL from the upload collaborator

    PROFILE_FIELDS = ('name', 'owner_name', 'phone', 'email', 'logo')

    def __repr__(self):
        return f'<Garage {self.name}>'
