from flask import jsonify
from garageguru.data.core.user import ADMIN_ROLES
from garageguru.presentation.routes.api import api_bp
from garageguru.presentation.routes.api.security import garage_access_required, roles_required
from garageguru.services.sales.sales_aggregator import SalesAggregator


@api_bp.get('/garages/<garage_id>/sales/stats')
@roles_required(*ADMIN_ROLES)
@garage_access_required
def sales_stats(garage_id):
    stats = SalesAggregator.stats(garage_id)
    return jsonify({
        'total_invoices': stats['total_invoices'],
        'total_parts_total': float(stats['total_parts_total']),
        'total_service_charges': float(stats['total_service_charges']),
        'total_profit': float(stats['total_profit']),
    })
