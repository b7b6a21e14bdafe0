"""
Customer Registry
Per-garage customer records keyed by (phone, bike_number).

find_or_create is race-safe: the insert runs in a SAVEPOINT and the
(garage_id, phone, bike_number) unique constraint decides the winner. The
loser rolls back only its savepoint and reads the winner's row, so two
simultaneous job cards for a new customer share one Customer.

Visit/spend aggregates are written only by record_completed_job, which the
invoice issuer calls once per invoice inside its own transaction.
"""

from datetime import datetime
from decimal import Decimal
from typing import List
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from garageguru import db
from garageguru.data.customers.customer import Customer
from garageguru.data.invoicing.invoice import Invoice
from garageguru.data.transaction import unit_of_work
from garageguru.exceptions import CustomerNotFound
from garageguru.logger import get_logger

logger = get_logger("garageguru.buisness.customers.customer_registry")


class CustomerRegistry:

    @staticmethod
    def _lookup(garage_id, phone, bike_number, refresh=False):
        stmt = select(Customer).where(
            Customer.garage_id == garage_id,
            Customer.phone == phone,
            Customer.bike_number == bike_number,
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def find_or_create(garage_id, name, phone, bike_number) -> Customer:
        """
        Resolve the garage's customer for (phone, bike_number), creating it if absent.

        Runs inside the caller's transaction and does not commit.

        Args:
            garage_id: Owning garage
            name: Used only when a new customer is created
            phone: Identity key part
            bike_number: Identity key part

        Returns:
            Existing or newly created Customer
        """
        existing = CustomerRegistry._lookup(garage_id, phone, bike_number)
        if existing is not None:
            return existing

        savepoint = db.session.begin_nested()
        try:
            customer = Customer(
                garage_id=garage_id,
                name=name,
                phone=phone,
                bike_number=bike_number,
                total_jobs=0,
                total_spent=Decimal('0'),
            )
            db.session.add(customer)
            db.session.flush()
            savepoint.commit()
            logger.info(f"Created customer {customer.id} in garage {garage_id}")
            return customer
        except IntegrityError:
            # Another request inserted the same customer first
            savepoint.rollback()
            logger.debug(f"Customer insert lost race in garage {garage_id}; re-reading")
            return CustomerRegistry._lookup(garage_id, phone, bike_number, refresh=True)

    @staticmethod
    def create_customer(garage_id, name, phone, bike_number) -> Customer:
        """Standalone entry point for find_or_create in its own transaction"""
        with unit_of_work("create_customer"):
            customer = CustomerRegistry.find_or_create(garage_id, name, phone, bike_number)
        return customer

    @staticmethod
    def record_completed_job(customer_id, garage_id, amount, visit_time: datetime) -> Customer:
        """
        Count one completed job: total_jobs + 1, total_spent + amount, last_visit = visit_time.

        Single UPDATE with column arithmetic; runs inside the caller's transaction.
        """
        result = db.session.execute(
            update(Customer)
            .where(Customer.id == customer_id, Customer.garage_id == garage_id)
            .values(
                total_jobs=Customer.total_jobs + 1,
                total_spent=Customer.total_spent + amount,
                last_visit=visit_time,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise CustomerNotFound(customer_id)

        return db.session.execute(
            select(Customer)
            .where(Customer.id == customer_id)
            .execution_options(populate_existing=True)
        ).scalar_one()

    @staticmethod
    def list_customers(garage_id) -> List[Customer]:
        return Customer.scoped(garage_id).order_by(Customer.created_at.desc()).all()

    @staticmethod
    def get_customer(customer_id, garage_id) -> Customer:
        customer = Customer.find_in_garage(customer_id, garage_id)
        if customer is None:
            raise CustomerNotFound(customer_id)
        return customer

    @staticmethod
    def list_invoices(customer_id, garage_id) -> List[Invoice]:
        """Invoice history for one customer, newest first"""
        CustomerRegistry.get_customer(customer_id, garage_id)
        return Invoice.scoped(garage_id).filter(
            Invoice.customer_id == customer_id
        ).order_by(Invoice.created_at.desc()).all()
