"""
InvoiceIssuer - Completes a job by billing it

issue() is the only cross-entity write in the system. Its write set is:

    Invoice   insert (one per job card, unique job_card_id)
    JobCard   pending -> completed, completed_at, billed charges
    Customer  total_jobs + 1, total_spent + total_amount, last_visit

All three happen in one unit_of_work; if any step fails none of them is
visible and the invoice counts as not issued.
"""

import secrets
import time
from typing import List
from sqlalchemy.exc import IntegrityError
from garageguru import db
from garageguru.buisness.core.money import to_money
from garageguru.buisness.customers.customer_registry import CustomerRegistry
from garageguru.buisness.jobs.job_lifecycle_manager import JobLifecycleManager
from garageguru.data.invoicing.invoice import Invoice
from garageguru.data.tenant_base import utcnow
from garageguru.data.transaction import unit_of_work
from garageguru.exceptions import DuplicateInvoice, DuplicateInvoiceNumber, InvoiceNotFound
from garageguru.logger import get_logger

logger = get_logger("garageguru.buisness.invoicing.invoice_issuer")


def generate_invoice_number():
    return f"INV-{int(time.time() * 1000)}-{secrets.token_hex(2).upper()}"


class InvoiceIssuer:

    @staticmethod
    def issue(garage_id, job_card_id, service_charge=None, pdf_url=None,
              invoice_number=None, whatsapp_sent=False) -> Invoice:
        """
        Bill a pending job card.

        Args:
            garage_id: Owning garage
            job_card_id: Job card to complete
            service_charge: Billed labour; defaults to the job card's
            pdf_url: Pre-rendered PDF location, if already uploaded
            invoice_number: Unique per garage; generated when omitted
            whatsapp_sent: Whether the messaging collaborator already sent it

        Returns:
            The new Invoice

        Raises:
            JobCardNotFound: job card absent or in another garage
            DuplicateInvoice: job card already billed
            DuplicateInvoiceNumber: number already used in the garage
        """
        job_card = JobLifecycleManager.get(job_card_id, garage_id)
        if job_card.is_completed or Invoice.query.filter_by(job_card_id=job_card.id).first() is not None:
            raise DuplicateInvoice(job_card.id)

        number = invoice_number or generate_invoice_number()
        if Invoice.scoped(garage_id).filter(Invoice.invoice_number == number).first() is not None:
            raise DuplicateInvoiceNumber(number)

        charge = to_money(job_card.service_charge if service_charge is None else service_charge)
        parts_total = job_card.parts_total
        total_amount = parts_total + charge
        issued_at = utcnow()

        with unit_of_work("issue_invoice"):
            invoice = Invoice(
                garage_id=garage_id,
                job_card_id=job_card.id,
                customer_id=job_card.customer_id,
                invoice_number=number,
                pdf_url=pdf_url,
                whatsapp_sent=bool(whatsapp_sent),
                total_amount=total_amount,
                parts_total=parts_total,
                service_charge=charge,
                created_at=issued_at,
            )
            try:
                with db.session.begin_nested():
                    db.session.add(invoice)
                    db.session.flush()
            except IntegrityError:
                # A concurrent request billed the same job card or took the number
                if Invoice.query.filter_by(job_card_id=job_card.id).first() is not None:
                    raise DuplicateInvoice(job_card.id)
                raise DuplicateInvoiceNumber(number)

            JobLifecycleManager.mark_completed(job_card, issued_at, charge)
            CustomerRegistry.record_completed_job(job_card.customer_id, garage_id, total_amount, issued_at)

        logger.info(f"Issued invoice {number} for job card {job_card_id} in garage {garage_id}")
        return invoice

    @staticmethod
    def list(garage_id) -> List[Invoice]:
        return Invoice.scoped(garage_id).order_by(Invoice.created_at.desc()).all()

    @staticmethod
    def list_for_customer(customer_id, garage_id) -> List[Invoice]:
        return CustomerRegistry.list_invoices(customer_id, garage_id)

    @staticmethod
    def get(invoice_id, garage_id) -> Invoice:
        invoice = Invoice.find_in_garage(invoice_id, garage_id)
        if invoice is None:
            raise InvoiceNotFound(invoice_id)
        return invoice

    @staticmethod
    def record_delivery(invoice_id, garage_id, patch) -> Invoice:
        """Update pdf_url / whatsapp_sent after the collaborators ran; nothing else is writable"""
        invoice = InvoiceIssuer.get(invoice_id, garage_id)
        with unit_of_work("record_invoice_delivery"):
            changed = invoice.apply_patch(patch, Invoice.DELIVERY_FIELDS)
        logger.info(f"Invoice {invoice.invoice_number} delivery updated: {changed}")
        return invoice
