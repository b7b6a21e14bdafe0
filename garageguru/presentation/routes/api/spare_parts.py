from flask import jsonify
from garageguru.buisness.inventory.inventory_ledger import InventoryLedger
from garageguru.data.core.user import ADMIN_ROLES
from garageguru.presentation.routes.api import api_bp
from garageguru.presentation.routes.api.security import garage_access_required, roles_required
from garageguru.presentation.schemas import SparePartCreate, SparePartUpdate, parse_payload, patch_from


@api_bp.get('/garages/<garage_id>/spare-parts')
@garage_access_required
def list_spare_parts(garage_id):
    return jsonify([p.to_dict() for p in InventoryLedger.list_parts(garage_id)])


@api_bp.get('/garages/<garage_id>/spare-parts/low-stock')
@garage_access_required
def low_stock_spare_parts(garage_id):
    return jsonify([p.to_dict() for p in InventoryLedger.list_low_stock(garage_id)])


@api_bp.get('/garages/<garage_id>/spare-parts/barcode/<barcode>')
@garage_access_required
def spare_part_by_barcode(garage_id, barcode):
    return jsonify(InventoryLedger.get_by_barcode(garage_id, barcode).to_dict())


@api_bp.get('/garages/<garage_id>/spare-parts/<part_id>')
@garage_access_required
def get_spare_part(garage_id, part_id):
    return jsonify(InventoryLedger.get_part(part_id, garage_id).to_dict())


@api_bp.post('/garages/<garage_id>/spare-parts')
@roles_required(*ADMIN_ROLES)
@garage_access_required
def create_spare_part(garage_id):
    payload = parse_payload(SparePartCreate)
    part = InventoryLedger.create_part(garage_id, payload.model_dump())
    return jsonify(part.to_dict()), 201


@api_bp.put('/garages/<garage_id>/spare-parts/<part_id>')
@roles_required(*ADMIN_ROLES)
@garage_access_required
def update_spare_part(garage_id, part_id):
    patch = patch_from(parse_payload(SparePartUpdate), nullable=('barcode',))
    part = InventoryLedger.update_part(part_id, garage_id, patch)
    return jsonify(part.to_dict())


@api_bp.delete('/garages/<garage_id>/spare-parts/<part_id>')
@roles_required(*ADMIN_ROLES)
@garage_access_required
def delete_spare_part(garage_id, part_id):
    InventoryLedger.delete_part(part_id, garage_id)
    return jsonify({'success': True})
