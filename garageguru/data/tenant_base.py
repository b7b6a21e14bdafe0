from garageguru import db
from datetime import datetime, timezone
import uuid
from sqlalchemy.orm import declared_attr
from garageguru.buisness.core.data_insertion_mixin import DataInsertionMixin


def new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseRecord(db.Model, DataInsertionMixin):
    """Abstract base for every persisted record: random string id and creation time"""

    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)


class GarageScopedBase(BaseRecord):
    """Abstract base for all tenant-partitioned entities"""

    __abstract__ = True

    @declared_attr
    def garage_id(cls):
        return db.Column(db.String(36), db.ForeignKey('garages.id'), nullable=False, index=True)

    @classmethod
    def scoped(cls, garage_id):
        """Query restricted to one garage's rows"""
        return cls.query.filter(cls.garage_id == garage_id)

    @classmethod
    def find_in_garage(cls, entity_id, garage_id):
        """Row by id within the garage, or None when absent or owned by another garage"""
        if not entity_id:
            return None
        return cls.scoped(garage_id).filter(cls.id == entity_id).first()
