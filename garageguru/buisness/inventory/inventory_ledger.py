"""
InventoryLedger - Business logic for spare-part stock levels

Responsibilities:
- Spare part CRUD for garage admins
- Low stock detection (quantity <= low_stock_threshold)
- Barcode lookup for scanners
- Atomic stock adjustments for job cards

adjust_quantity is the only code path that changes stock outside an admin edit.
It issues a single UPDATE with column arithmetic, so concurrent job cards
debiting the same part serialise in the database without lost updates.
Stock is not floor-clamped: a negative quantity is a backorder.
"""

from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from garageguru import db
from garageguru.data.inventory.spare_part import DEFAULT_LOW_STOCK_THRESHOLD, SparePart
from garageguru.data.transaction import unit_of_work
from garageguru.exceptions import ConflictError, SparePartNotFound
from garageguru.logger import get_logger

logger = get_logger("garageguru.buisness.inventory.inventory_ledger")


class InventoryLedger:
    """Manages spare-part records and stock levels for one garage at a time"""

    @staticmethod
    def list_parts(garage_id) -> List[SparePart]:
        return SparePart.scoped(garage_id).order_by(SparePart.created_at.desc()).all()

    @staticmethod
    def list_low_stock(garage_id) -> List[SparePart]:
        return SparePart.scoped(garage_id).filter(
            SparePart.quantity <= SparePart.low_stock_threshold
        ).order_by(SparePart.quantity.asc(), SparePart.name.asc()).all()

    @staticmethod
    def find_by_id(part_id, garage_id) -> Optional[SparePart]:
        return SparePart.find_in_garage(part_id, garage_id)

    @staticmethod
    def find_by_barcode(garage_id, barcode) -> Optional[SparePart]:
        if not barcode:
            return None
        return SparePart.scoped(garage_id).filter(SparePart.barcode == barcode).first()

    @staticmethod
    def get_part(part_id, garage_id) -> SparePart:
        part = InventoryLedger.find_by_id(part_id, garage_id)
        if part is None:
            raise SparePartNotFound(part_id)
        return part

    @staticmethod
    def get_by_barcode(garage_id, barcode) -> SparePart:
        part = InventoryLedger.find_by_barcode(garage_id, barcode)
        if part is None:
            raise SparePartNotFound(barcode)
        return part

    @staticmethod
    def create_part(garage_id, fields) -> SparePart:
        """
        Add a part to the garage's inventory.

        Args:
            garage_id: Owning garage
            fields: name, part_number, price and optionally quantity (default 0),
                low_stock_threshold (default 2) and barcode

        Returns:
            The new SparePart
        """
        data = dict(fields)
        if data.get('quantity') is None:
            data['quantity'] = 0
        if data.get('low_stock_threshold') is None:
            data['low_stock_threshold'] = DEFAULT_LOW_STOCK_THRESHOLD

        part = SparePart.from_dict(data, skip_fields=['id', 'garage_id', 'created_at'])
        part.garage_id = garage_id

        with unit_of_work("create_part"):
            db.session.add(part)
            _flush_or_conflict()

        logger.info(f"Created spare part {part.id} ({part.part_number}) in garage {garage_id}")
        return part

    @staticmethod
    def update_part(part_id, garage_id, patch) -> SparePart:
        part = InventoryLedger.get_part(part_id, garage_id)
        with unit_of_work("update_part"):
            changed = part.apply_patch(patch, SparePart.EDITABLE_FIELDS)
            _flush_or_conflict()
        logger.info(f"Updated spare part {part_id} fields: {changed}")
        return part

    @staticmethod
    def adjust_quantity(part_id, garage_id, delta) -> Optional[SparePart]:
        """
        Apply ``quantity += delta`` at the store.

        Runs inside the caller's transaction and does not commit.

        Returns:
            The refreshed SparePart, or None when the id does not resolve in the garage
        """
        result = db.session.execute(
            update(SparePart)
            .where(SparePart.id == part_id, SparePart.garage_id == garage_id)
            .values(quantity=SparePart.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None

        part = db.session.execute(
            select(SparePart)
            .where(SparePart.id == part_id)
            .execution_options(populate_existing=True)
        ).scalar_one()

        if part.quantity < 0:
            logger.warning(f"Spare part {part_id} backordered: quantity now {part.quantity}")
        else:
            logger.debug(f"Adjusted spare part {part_id} by {delta}: quantity now {part.quantity}")
        return part

    @staticmethod
    def delete_part(part_id, garage_id) -> None:
        """Delete a part; deleting one that does not exist in the garage is a no-op"""
        with unit_of_work("delete_part"):
            deleted = SparePart.scoped(garage_id).filter(SparePart.id == part_id).delete(
                synchronize_session=False
            )
        if deleted:
            logger.info(f"Deleted spare part {part_id} from garage {garage_id}")


def _flush_or_conflict():
    try:
        db.session.flush()
    except IntegrityError:
        raise ConflictError("Barcode already assigned to another part in this garage")
