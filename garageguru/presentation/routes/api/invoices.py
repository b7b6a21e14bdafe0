from flask import jsonify
from garageguru.buisness.invoicing.invoice_issuer import InvoiceIssuer
from garageguru.presentation.routes.api import api_bp
from garageguru.presentation.routes.api.security import garage_access_required
from garageguru.presentation.schemas import InvoiceCreate, InvoiceDeliveryUpdate, parse_payload, patch_from


@api_bp.get('/garages/<garage_id>/invoices')
@garage_access_required
def list_invoices(garage_id):
    return jsonify([i.to_dict() for i in InvoiceIssuer.list(garage_id)])


@api_bp.post('/garages/<garage_id>/invoices')
@garage_access_required
def issue_invoice(garage_id):
    payload = parse_payload(InvoiceCreate)
    invoice = InvoiceIssuer.issue(
        garage_id,
        payload.job_card_id,
        service_charge=payload.service_charge,
        pdf_url=payload.pdf_url,
        invoice_number=payload.invoice_number,
        whatsapp_sent=payload.whatsapp_sent,
    )
    return jsonify(invoice.to_dict()), 201


@api_bp.get('/garages/<garage_id>/invoices/<invoice_id>')
@garage_access_required
def get_invoice(garage_id, invoice_id):
    return jsonify(InvoiceIssuer.get(invoice_id, garage_id).to_dict())


@api_bp.patch('/garages/<garage_id>/invoices/<invoice_id>')
@garage_access_required
def record_invoice_delivery(garage_id, invoice_id):
    patch = patch_from(parse_payload(InvoiceDeliveryUpdate), nullable=('pdf_url',))
    invoice = InvoiceIssuer.record_delivery(invoice_id, garage_id, patch)
    return jsonify(invoice.to_dict())
