from flask import jsonify
from garageguru.buisness.core.tenant_directory import TenantDirectory
from garageguru.data.core.user import ADMIN_ROLES
from garageguru.presentation.routes.api import api_bp
from garageguru.presentation.routes.api.security import garage_access_required, roles_required
from garageguru.presentation.schemas import GarageUpdate, parse_payload, patch_from


@api_bp.get('/garages/<garage_id>')
@garage_access_required
def get_garage(garage_id):
    return jsonify(TenantDirectory.get_garage(garage_id).to_dict())


@api_bp.put('/garages/<garage_id>')
@roles_required(*ADMIN_ROLES)
@garage_access_required
def update_garage(garage_id):
    patch = patch_from(parse_payload(GarageUpdate), nullable=('logo',))
    garage = TenantDirectory.update_garage_profile(garage_id, patch)
    return jsonify(garage.to_dict())
