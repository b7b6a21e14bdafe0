"""
Tests for the sales statistics endpoint
"""

from decimal import Decimal
from garageguru.services.sales.sales_aggregator import SalesAggregator
from garageguru.test.conftest import add_part, open_job


def test_empty_garage_stats(client, admin):
    headers, garage_id = admin
    response = client.get(f'/api/garages/{garage_id}/sales/stats', headers=headers)
    assert response.status_code == 200
    assert response.get_json() == {
        'total_invoices': 0,
        'total_parts_total': 0.0,
        'total_service_charges': 0.0,
        'total_profit': 0.0,
    }


def test_stats_sum_issued_invoices(client, admin, other_admin):
    headers, garage_id = admin
    other_headers, other_garage_id = other_admin
    pad = add_part(client, headers, garage_id, price='250.00', quantity=10)

    first = open_job(client, headers, garage_id, spare_parts=[{'part_id': pad['id'], 'quantity': 2}],
                     service_charge='300.00').get_json()
    second = open_job(client, headers, garage_id, bike_number='KA05XY0001', service_charge='150.00').get_json()
    open_job(client, headers, garage_id, bike_number='KA09ZZ9999', service_charge='999.00')  # never billed
    foreign = open_job(client, other_headers, other_garage_id, service_charge='5000').get_json()

    for job in (first, second):
        assert client.post(f'/api/garages/{garage_id}/invoices', json={'job_card_id': job['id']},
                           headers=headers).status_code == 201
    client.post(f'/api/garages/{other_garage_id}/invoices', json={'job_card_id': foreign['id']},
                headers=other_headers)

    stats = client.get(f'/api/garages/{garage_id}/sales/stats', headers=headers).get_json()
    assert stats == {
        'total_invoices': 2,
        'total_parts_total': 500.0,
        'total_service_charges': 450.0,
        'total_profit': -50.0,
    }


def test_stats_are_decimals(app, client, admin):
    headers, garage_id = admin
    job = open_job(client, headers, garage_id, service_charge='120.10').get_json()
    client.post(f'/api/garages/{garage_id}/invoices', json={'job_card_id': job['id']}, headers=headers)

    stats = SalesAggregator.stats(garage_id)
    assert stats['total_invoices'] == 1
    assert stats['total_service_charges'] == Decimal('120.10')
    assert stats['total_parts_total'] == Decimal('0.00')
    assert stats['total_profit'] == Decimal('120.10')


def test_stats_require_admin(client, admin, staff):
    _, garage_id = admin
    response = client.get(f'/api/garages/{garage_id}/sales/stats', headers=staff)
    assert response.status_code == 403
    assert response.get_json()['error']['code'] == 'INSUFFICIENT_PERMISSIONS'


def test_profit_is_service_minus_parts(client, admin):
    headers, garage_id = admin
    hundred = add_part(client, headers, garage_id, name='Shock', part_number='SH-1', price='100.00', quantity=5)
    thirty = add_part(client, headers, garage_id, name='Filter', part_number='FL-1', price='30.00', quantity=5)

    a = open_job(client, headers, garage_id, spare_parts=[{'part_id': hundred['id'], 'quantity': 1}],
                 service_charge='50.00').get_json()
    b = open_job(client, headers, garage_id, bike_number='KA05XY0001',
                 spare_parts=[{'part_id': thirty['id'], 'quantity': 1}], service_charge='70.00').get_json()
    for job in (a, b):
        client.post(f'/api/garages/{garage_id}/invoices', json={'job_card_id': job['id']}, headers=headers)

    stats = client.get(f'/api/garages/{garage_id}/sales/stats', headers=headers).get_json()
    assert stats == {
        'total_invoices': 2,
        'total_parts_total': 130.0,
        'total_service_charges': 120.0,
        'total_profit': -10.0,
    }
