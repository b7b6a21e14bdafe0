"""
JobLifecycleManager - Business logic for job cards

Responsibilities:
- Create job cards (customer resolution, part snapshots, totals, stock debits)
- Partial updates of open job cards
- Listing with status filter
- The pending -> completed flip, reachable only from invoice issuance

State machine:
    pending --(invoice issued)--> completed
No other transition exists; completed job cards are frozen.

Unknown spare parts on creation are skipped (logged) by default. With
JOB_CARD_STRICT_PARTS enabled the whole creation fails instead and nothing
is written.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from flask import current_app
from garageguru import db
from garageguru.buisness.core.money import line_total, to_money
from garageguru.buisness.customers.customer_registry import CustomerRegistry
from garageguru.buisness.inventory.inventory_ledger import InventoryLedger
from garageguru.data.jobs.job_card import JobCard, JobStatus
from garageguru.data.transaction import unit_of_work
from garageguru.exceptions import (
    JobCardCompleted,
    JobCardNotFound,
    PayloadValidationError,
    SparePartNotFound,
)
from garageguru.logger import get_logger

logger = get_logger("garageguru.buisness.jobs.job_lifecycle_manager")


class JobLifecycleManager:
    """Owns job cards and their single state transition"""

    UPDATABLE_FIELDS = ('complaint', 'customer_name', 'spare_parts', 'service_charge')

    @staticmethod
    def strict_parts() -> bool:
        return bool(current_app.config.get('JOB_CARD_STRICT_PARTS', False))

    @staticmethod
    def snapshot_lines(garage_id, requested_lines, strict):
        """
        Build point-in-time line snapshots.

        Name and unit price come from the live part when it resolves in the
        garage. An unresolved line keeps the name/unit_price supplied with it;
        without both it is dropped.

        Returns:
            list of (snapshot dict, resolved SparePart or None)
        """
        lines = []
        for requested in requested_lines or []:
            part_id = requested['part_id']
            quantity = int(requested['quantity'])
            part = InventoryLedger.find_by_id(part_id, garage_id)

            if part is not None:
                snapshot = {
                    'part_id': part.id,
                    'name': part.name,
                    'quantity': quantity,
                    'unit_price': str(to_money(part.price)),
                }
            elif strict:
                raise SparePartNotFound(part_id)
            elif requested.get('name') is not None and requested.get('unit_price') is not None:
                logger.warning(f"Spare part {part_id} not in garage {garage_id}; keeping supplied line without stock debit")
                snapshot = {
                    'part_id': part_id,
                    'name': requested['name'],
                    'quantity': quantity,
                    'unit_price': str(to_money(requested['unit_price'])),
                }
            else:
                logger.warning(f"Spare part {part_id} not in garage {garage_id}; line skipped")
                continue

            lines.append((snapshot, part))
        return lines

    @staticmethod
    def compute_total(service_charge, lines) -> Decimal:
        return to_money(service_charge) + sum((line_total(line) for line in lines), Decimal('0'))

    @staticmethod
    def create(garage_id, customer_fields, complaint, spare_parts, service_charge) -> JobCard:
        """
        Open a job card.

        Args:
            garage_id: Owning garage
            customer_fields: dict with name, phone, bike_number
            complaint: Free-text problem description
            spare_parts: list of {part_id, quantity[, name, unit_price]}
            service_charge: Labour charge

        Returns:
            The pending JobCard
        """
        strict = JobLifecycleManager.strict_parts()

        with unit_of_work("create_job_card"):
            customer = CustomerRegistry.find_or_create(
                garage_id,
                customer_fields['name'],
                customer_fields['phone'],
                customer_fields['bike_number'],
            )

            resolved = JobLifecycleManager.snapshot_lines(garage_id, spare_parts, strict)
            lines = [snapshot for snapshot, _ in resolved]

            job_card = JobCard(
                garage_id=garage_id,
                customer_id=customer.id,
                customer_name=customer_fields['name'],
                phone=customer_fields['phone'],
                bike_number=customer_fields['bike_number'],
                complaint=complaint,
                status=JobStatus.PENDING,
                spare_parts=lines,
                service_charge=to_money(service_charge),
                total_amount=JobLifecycleManager.compute_total(service_charge, lines),
            )
            db.session.add(job_card)
            db.session.flush()

            for snapshot, part in resolved:
                if part is None:
                    continue
                adjusted = InventoryLedger.adjust_quantity(part.id, garage_id, -snapshot['quantity'])
                if adjusted is None:
                    # Part deleted between lookup and debit
                    if strict:
                        raise SparePartNotFound(part.id)
                    logger.warning(f"Spare part {part.id} vanished before debit on job card {job_card.id}")

        logger.info(f"Created job card {job_card.id} for customer {customer.id} in garage {garage_id}")
        return job_card

    @staticmethod
    def get(job_card_id, garage_id) -> JobCard:
        job_card = JobCard.find_in_garage(job_card_id, garage_id)
        if job_card is None:
            raise JobCardNotFound(job_card_id)
        return job_card

    @staticmethod
    def update(job_card_id, garage_id, patch) -> JobCard:
        """
        Partial update of an open job card. Stock is never adjusted here.
        """
        job_card = JobLifecycleManager.get(job_card_id, garage_id)
        if job_card.is_completed:
            raise JobCardCompleted()

        with unit_of_work("update_job_card"):
            changes = {k: v for k, v in patch.items() if k in JobLifecycleManager.UPDATABLE_FIELDS}
            if 'spare_parts' in changes:
                resolved = JobLifecycleManager.snapshot_lines(
                    garage_id, changes['spare_parts'], JobLifecycleManager.strict_parts()
                )
                changes['spare_parts'] = [snapshot for snapshot, _ in resolved]
            if 'service_charge' in changes:
                changes['service_charge'] = to_money(changes['service_charge'])

            job_card.apply_patch(changes, JobLifecycleManager.UPDATABLE_FIELDS)
            job_card.total_amount = JobLifecycleManager.compute_total(
                job_card.service_charge, job_card.spare_parts
            )

        logger.info(f"Updated job card {job_card_id} fields: {sorted(changes)}")
        return job_card

    @staticmethod
    def list(garage_id, status: Optional[str] = None) -> List[JobCard]:
        query = JobCard.scoped(garage_id)
        if status:
            try:
                query = query.filter(JobCard.status == JobStatus(status))
            except ValueError:
                raise PayloadValidationError(f"Unknown job card status: {status}")
        return query.order_by(JobCard.created_at.desc()).all()

    @staticmethod
    def mark_completed(job_card, completed_at: datetime, service_charge) -> JobCard:
        """
        Flip a pending job card to completed and align its charges with the bill.

        Only the invoice issuer calls this, inside its transaction.
        """
        if job_card.is_completed:
            raise JobCardCompleted()
        job_card.status = JobStatus.COMPLETED
        job_card.completed_at = completed_at
        job_card.service_charge = to_money(service_charge)
        job_card.total_amount = JobLifecycleManager.compute_total(service_charge, job_card.spare_parts)
        return job_card
