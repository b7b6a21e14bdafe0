"""
Tests for spare-part inventory: CRUD, low stock, barcodes and stock adjustments
"""

from garageguru import db
from garageguru.buisness.inventory.inventory_ledger import InventoryLedger
from garageguru.data.inventory.spare_part import SparePart
from garageguru.test.conftest import add_part


def test_create_part_defaults(client, admin):
    headers, garage_id = admin
    response = client.post(
        f'/api/garages/{garage_id}/spare-parts',
        json={'name': 'Spark Plug', 'part_number': 'SP-7', 'price': '120.50'},
        headers=headers,
    )
    assert response.status_code == 201
    part = response.get_json()
    assert part['garage_id'] == garage_id
    assert part['quantity'] == 0
    assert part['low_stock_threshold'] == 2
    assert part['price'] == 120.5
    assert part['is_low_stock'] is True


def test_create_part_validation(client, admin):
    headers, garage_id = admin
    response = client.post(
        f'/api/garages/{garage_id}/spare-parts',
        json={'name': 'Spark Plug', 'price': '-1'},
        headers=headers,
    )
    assert response.status_code == 400
    fields = {d['field'] for d in response.get_json()['error']['details']}
    assert {'part_number', 'price'} <= fields


def test_list_and_low_stock(client, admin):
    headers, garage_id = admin
    add_part(client, headers, garage_id, name='Chain', part_number='CH-1', quantity=20)
    add_part(client, headers, garage_id, name='Clutch Cable', part_number='CC-1', quantity=2)
    add_part(client, headers, garage_id, name='Bulb', part_number='BL-1', quantity=8, low_stock_threshold=10)

    parts = client.get(f'/api/garages/{garage_id}/spare-parts', headers=headers).get_json()
    assert len(parts) == 3

    low = client.get(f'/api/garages/{garage_id}/spare-parts/low-stock', headers=headers).get_json()
    assert {p['part_number'] for p in low} == {'CC-1', 'BL-1'}
    assert all(p['is_low_stock'] for p in low)


def test_barcode_lookup(client, admin, other_admin):
    headers, garage_id = admin
    other_headers, other_garage_id = other_admin
    add_part(client, headers, garage_id, barcode='8901234567890')

    response = client.get(f'/api/garages/{garage_id}/spare-parts/barcode/8901234567890', headers=headers)
    assert response.status_code == 200
    assert response.get_json()['barcode'] == '8901234567890'

    response = client.get(
        f'/api/garages/{other_garage_id}/spare-parts/barcode/8901234567890', headers=other_headers
    )
    assert response.status_code == 404
    assert response.get_json()['error']['code'] == 'SPARE_PART_NOT_FOUND'


def test_barcode_unique_per_garage(client, admin, other_admin):
    headers, garage_id = admin
    other_headers, other_garage_id = other_admin
    add_part(client, headers, garage_id, barcode='111')

    response = client.post(
        f'/api/garages/{garage_id}/spare-parts',
        json={'name': 'Other', 'part_number': 'OT-1', 'price': '10', 'barcode': '111'},
        headers=headers,
    )
    assert response.status_code == 409
    assert response.get_json()['error']['code'] == 'CONFLICT'

    # Same barcode in another garage is fine
    add_part(client, other_headers, other_garage_id, barcode='111')


def test_update_part_is_partial(client, admin):
    headers, garage_id = admin
    part = add_part(client, headers, garage_id, barcode='222')

    response = client.put(
        f'/api/garages/{garage_id}/spare-parts/{part["id"]}',
        json={'quantity': 1, 'price': '275.00'},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body['quantity'] == 1
    assert body['price'] == 275.0
    assert body['name'] == part['name']
    assert body['barcode'] == '222'
    assert body['is_low_stock'] is True


def test_update_part_rejects_unknown_fields(client, admin):
    headers, garage_id = admin
    part = add_part(client, headers, garage_id)
    response = client.put(
        f'/api/garages/{garage_id}/spare-parts/{part["id"]}',
        json={'garage_id': 'elsewhere'},
        headers=headers,
    )
    assert response.status_code == 400


def test_delete_part_is_idempotent(client, admin):
    headers, garage_id = admin
    part = add_part(client, headers, garage_id)
    url = f'/api/garages/{garage_id}/spare-parts/{part["id"]}'

    assert client.delete(url, headers=headers).get_json() == {'success': True}
    assert client.get(url, headers=headers).status_code == 404
    assert client.delete(url, headers=headers).status_code == 200


def test_adjust_quantity_allows_backorder(app, client, admin):
    headers, garage_id = admin
    part = add_part(client, headers, garage_id, quantity=1)

    adjusted = InventoryLedger.adjust_quantity(part['id'], garage_id, -3)
    assert adjusted.quantity == -2
    assert adjusted.is_low_stock

    adjusted = InventoryLedger.adjust_quantity(part['id'], garage_id, 5)
    assert adjusted.quantity == 3


def test_adjust_quantity_scoped_to_garage(app, client, admin, other_admin):
    headers, garage_id = admin
    _, other_garage_id = other_admin
    part = add_part(client, headers, garage_id, quantity=4)

    assert InventoryLedger.adjust_quantity(part['id'], other_garage_id, -1) is None
    assert InventoryLedger.adjust_quantity('missing', garage_id, -1) is None
    assert db.session.get(SparePart, part['id']).quantity == 4


def test_job_card_debit_crosses_low_stock_threshold(client, admin):
    headers, garage_id = admin
    part = add_part(client, headers, garage_id, quantity=5, low_stock_threshold=2)
    low = client.get(f'/api/garages/{garage_id}/spare-parts/low-stock', headers=headers).get_json()
    assert low == []

    response = client.post(f'/api/garages/{garage_id}/job-cards', json={
        'customer_name': 'Suresh',
        'phone': '9876543210',
        'bike_number': 'KA01AB1234',
        'complaint': 'Brakes',
        'spare_parts': [{'part_id': part['id'], 'quantity': 3}],
    }, headers=headers)
    assert response.status_code == 201

    low = client.get(f'/api/garages/{garage_id}/spare-parts/low-stock', headers=headers).get_json()
    assert [(p['id'], p['quantity']) for p in low] == [(part['id'], 2)]
