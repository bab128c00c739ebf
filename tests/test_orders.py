from datetime import datetime, timedelta

from bson import ObjectId
from pymongo.errors import PyMongoError


def place_order(client, items, user_id=None):
    return client.post('/orders', json={
        'orderItems': items,
        'user': user_id or str(ObjectId()),
    })


def test_create_order_computes_total(client, make_product, storage):
    product_id = make_product(price=100)

    response = place_order(client, [{'quantity': 2, 'product': product_id}])

    assert response.status_code == 200
    body = response.get_json()
    assert body['totalPrice'] == 200
    assert len(body['orderItems']) == 1
    assert storage.order_items.count_documents({}) == 1


def test_create_order_sums_every_item(client, make_product, storage):
    shirt = make_product('Shirt', price=250000)
    pants = make_product('Pants', price=120000)
    hat = make_product('Hat', price=5)

    response = place_order(client, [
        {'quantity': 2, 'product': shirt},
        {'quantity': 1, 'product': pants},
        {'quantity': 3, 'product': hat},
    ])

    assert response.status_code == 200
    assert response.get_json()['totalPrice'] == 2 * 250000 + 120000 + 3 * 5
    assert storage.order_items.count_documents({}) == 3


def test_create_order_references_user_and_items(client, make_product, make_user, storage):
    user = make_user()
    product_id = make_product()

    body = place_order(client, [{'quantity': 1, 'product': product_id}], user['id']).get_json()

    stored = storage.orders.find_one({'_id': ObjectId(body['id'])})
    assert stored['user'] == ObjectId(user['id'])
    assert [str(i) for i in stored['orderItems']] == body['orderItems']
    assert isinstance(stored['dateOrdered'], datetime)


def test_total_price_is_not_recomputed(client, make_product, storage):
    product_id = make_product(price=100)
    order = place_order(client, [{'quantity': 1, 'product': product_id}]).get_json()

    storage.products.update_one({'_id': ObjectId(product_id)}, {'$set': {'price': 999}})

    assert client.get(f"/orders/{order['id']}").get_json()['totalPrice'] == 100


def test_create_order_unknown_product_leaves_orphans(client, make_product, storage):
    known = make_product(price=10)

    response = place_order(client, [
        {'quantity': 1, 'product': known},
        {'quantity': 1, 'product': str(ObjectId())},
    ])

    assert response.status_code == 500
    assert response.get_json()['message'] == 'Internal Server Error!'
    assert storage.orders.count_documents({}) == 0
    assert storage.order_items.count_documents({}) == 2


def test_create_order_validation(client, storage):
    response = client.post('/orders', json={
        'orderItems': [{'quantity': 0, 'product': 'nope'}],
        'user': 'nobody',
    })

    assert response.status_code == 400
    errors = response.get_json()['errors']
    assert any(e.startswith('orderItems.0.quantity') for e in errors)
    assert any(e.startswith('orderItems.0.product') for e in errors)
    assert any(e.startswith('user') for e in errors)
    assert storage.order_items.count_documents({}) == 0


def test_create_order_requires_items(client):
    response = client.post('/orders', json={'orderItems': [], 'user': str(ObjectId())})

    assert response.status_code == 400


def test_list_orders_newest_first_with_user_name(client, storage, make_user):
    user = make_user(name='Buyer')
    now = datetime.utcnow()
    for days_ago in (3, 1, 2):
        storage.save(storage.orders, {
            'orderItems': [],
            'totalPrice': days_ago,
            'user': ObjectId(user['id']),
            'dateOrdered': now - timedelta(days=days_ago),
        })

    response = client.get('/orders')

    assert response.status_code == 200
    orders = response.get_json()
    assert [o['totalPrice'] for o in orders] == [1, 2, 3]
    assert orders[0]['user']['name'] == 'Buyer'
    assert orders[0]['user']['id'] == user['id']
    assert 'email' not in orders[0]['user']


def test_list_orders_storage_failure(client, storage, monkeypatch):
    def fail(*args, **kwargs):
        raise PyMongoError('down')
    monkeypatch.setattr(storage, 'find', fail)

    response = client.get('/orders')

    assert response.status_code == 500
    assert response.get_json()['message'] == 'Internal server error!'


def test_get_order_resolves_user_and_products(client, make_product, make_user):
    user = make_user(name='Buyer')
    product_id = make_product('Shirt', price=100)
    order = place_order(client, [{'quantity': 2, 'product': product_id}], user['id']).get_json()

    response = client.get(f"/orders/{order['id']}")

    assert response.status_code == 200
    body = response.get_json()
    assert body['user'] == {'_id': user['id'], 'id': user['id'], 'name': 'Buyer'}
    item = body['orderItems'][0]
    assert item['quantity'] == 2
    assert item['product'] == {'_id': product_id, 'id': product_id, 'name': 'Shirt', 'price': 100}


def test_get_order_not_found(client):
    response = client.get(f'/orders/{ObjectId()}')

    assert response.status_code == 404
    assert response.get_json() == {'success': False, 'message': 'Order not found!'}


def test_get_order_malformed_id(client):
    assert client.get('/orders/bad').status_code == 500


def test_delete_order_removes_its_items(client, make_product, storage):
    product_id = make_product(price=10)
    order = place_order(client, [
        {'quantity': 1, 'product': product_id},
        {'quantity': 4, 'product': product_id},
    ]).get_json()

    response = client.delete(f"/orders/{order['id']}")

    assert response.status_code == 200
    assert response.get_json() == {
        'success': True,
        'message': 'Order successfully deleted!',
        'removedOrderItems': 2,
    }
    for item_id in order['orderItems']:
        assert storage.find_by_id(storage.order_items, item_id) is None
    assert client.get(f"/orders/{order['id']}").status_code == 404


def test_delete_order_leaves_other_orders_items(client, make_product, storage):
    product_id = make_product()
    first = place_order(client, [{'quantity': 1, 'product': product_id}]).get_json()
    second = place_order(client, [{'quantity': 1, 'product': product_id}]).get_json()

    client.delete(f"/orders/{first['id']}")

    assert storage.find_by_id(storage.order_items, second['orderItems'][0]) is not None


def test_delete_order_not_found(client):
    response = client.delete(f'/orders/{ObjectId()}')

    assert response.status_code == 404


def test_delete_order_reports_item_removal_failure(client, make_product, storage, monkeypatch):
    product_id = make_product()
    order = place_order(client, [{'quantity': 1, 'product': product_id}]).get_json()

    def fail(*args, **kwargs):
        raise PyMongoError('bulk delete failed')
    monkeypatch.setattr(storage, 'remove_by_ids', fail)

    response = client.delete(f"/orders/{order['id']}")

    assert response.status_code == 500
    assert response.get_json()['success'] is False
    assert storage.orders.count_documents({}) == 0
