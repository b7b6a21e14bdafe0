"""
Sales Aggregator
Read-only analytics over a garage's issued invoices.

Totals are summed in SQL at query time; nothing is cached, so the figures
always include the latest invoice.
"""

from typing import Any, Dict
from sqlalchemy import func, select
from garageguru import db
from garageguru.buisness.core.money import to_money
from garageguru.data.invoicing.invoice import Invoice


class SalesAggregator:
    """
    Service for sales statistics.

    Profit follows the shop's accounting convention:
    total_profit = total_service_charges - total_parts_total
    """

    @staticmethod
    def stats(garage_id) -> Dict[str, Any]:
        """
        Get sales totals for a garage.

        Args:
            garage_id: Garage ID

        Returns:
            Dictionary with total_invoices, total_parts_total,
            total_service_charges and total_profit (Decimals)
        """
        row = db.session.execute(
            select(
                func.count(Invoice.id),
                func.sum(Invoice.parts_total),
                func.sum(Invoice.service_charge),
            ).where(Invoice.garage_id == garage_id)
        ).one()

        total_invoices, parts_total, service_charges = row
        parts_total = to_money(parts_total)
        service_charges = to_money(service_charges)

        return {
            'total_invoices': int(total_invoices or 0),
            'total_parts_total': parts_total,
            'total_service_charges': service_charges,
            'total_profit': service_charges - parts_total,
        }
