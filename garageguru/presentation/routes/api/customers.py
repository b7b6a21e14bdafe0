from flask import jsonify
from garageguru.buisness.customers.customer_registry import CustomerRegistry
from garageguru.presentation.routes.api import api_bp
from garageguru.presentation.routes.api.security import garage_access_required
from garageguru.presentation.schemas import CustomerCreate, parse_payload


@api_bp.get('/garages/<garage_id>/customers')
@garage_access_required
def list_customers(garage_id):
    return jsonify([c.to_dict() for c in CustomerRegistry.list_customers(garage_id)])


@api_bp.post('/garages/<garage_id>/customers')
@garage_access_required
def create_customer(garage_id):
    payload = parse_payload(CustomerCreate)
    # Same dedup path as job cards: an existing (phone, bike_number) is returned as-is
    customer = CustomerRegistry.create_customer(garage_id, payload.name, payload.phone, payload.bike_number)
    return jsonify(customer.to_dict())


@api_bp.get('/garages/<garage_id>/customers/<customer_id>')
@garage_access_required
def get_customer(garage_id, customer_id):
    return jsonify(CustomerRegistry.get_customer(customer_id, garage_id).to_dict())


@api_bp.get('/garages/<garage_id>/customers/<customer_id>/invoices')
@garage_access_required
def customer_invoices(garage_id, customer_id):
    invoices = CustomerRegistry.list_invoices(customer_id, garage_id)
    return jsonify([i.to_dict() for i in invoices])
