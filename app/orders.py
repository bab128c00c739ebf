# app/orders.py
from flask import Blueprint, request, jsonify, current_app
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from .models import (OrderIn, order_document, order_item_document,
                     serialize_doc, validation_messages)


def compute_total_price(storage, order_item_ids):
    """
    Sums price * quantity over the given order items, reading each item back
    joined with its product's current price. Raises if a product is missing.
    """
    total_price = 0
    for order_item_id in order_item_ids:
        order_item = storage.find_by_id(storage.order_items, order_item_id)
        storage.populate(order_item, 'product', storage.products, ['price'])
        total_price += order_item['product']['price'] * order_item['quantity']
    return total_price


def create_orders_blueprint(storage):
    """Order routes bound to the given Storage."""
    orders_bp = Blueprint('orders', __name__)

    @orders_bp.route('', methods=['GET'])
    def list_orders():
        """Returns the list of all order, newest first
        ---
        tags:
          - Orders
        responses:
          200:
            description: The list of all order
            content:
              application/json:
                schema:
                  type: array
                  items:
                    $ref: '#/components/schemas/Order'
          500:
            description: Internal server error
        """
        try:
            order_list = storage.find(storage.orders, sort=[('dateOrdered', DESCENDING)])
            storage.populate(order_list, 'user', storage.users, ['name'])
        except PyMongoError as e:
            current_app.logger.error(f"Error fetching orders: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal server error!'}), 500
        return jsonify(serialize_doc(order_list)), 200

    @orders_bp.route('/<string:order_id>', methods=['GET'])
    def get_order(order_id):
        """Get the order by id
        ---
        tags:
          - Orders
        parameters:
          - in: path
            name: order_id
            schema:
              type: string
            required: true
            description: The order id
        responses:
          200:
            description: Order Data, with user name and product name/price resolved
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/Order'
          404:
            description: Order not found
          500:
            description: Internal server error
        """
        try:
            order = storage.find_by_id(storage.orders, order_id)
            if order:
                storage.populate(order, 'user', storage.users, ['name'])
                storage.populate(order, 'orderItems', storage.order_items)
                storage.populate(
                    [item for item in order['orderItems'] if item],
                    'product', storage.products, ['name', 'price']
                )
        except (InvalidId, PyMongoError) as e:
            current_app.logger.error(f"Error fetching order {order_id}: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal server error!'}), 500

        if not order:
            return jsonify({'success': False, 'message': 'Order not found!'}), 404
        return jsonify(serialize_doc(order)), 200

    @orders_bp.route('', methods=['POST'])
    def create_order():
        """Create a new order
        ---
        tags:
          - Orders
        requestBody:
          required: true
          content:
            application/json:
              schema:
                $ref: '#/components/schemas/OrderInput'
              example:
                orderItems:
                  - quantity: 2
                    product: 6090df863dbf1045fc651cdb
                  - quantity: 1
                    product: 6090dfc53dbf1045fc651cdc
                user: 60896dfd4425c657ccfea7a6
        responses:
          200:
            description: Order successfully created
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/Order'
          400:
            description: Failed To Create Order
          500:
            description: Internal Server Error
        """
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'success': False, 'message': 'No input data provided'}), 400
        try:
            order_in = OrderIn.model_validate(data)
        except ValidationError as e:
            return jsonify({
                'success': False,
                'message': 'Validation failed',
                'errors': validation_messages(e)
            }), 400

        # Not atomic: items saved before a failure stay in the collection
        try:
            order_item_ids = []
            for item in order_in.orderItems:
                order_item = storage.save(storage.order_items, order_item_document(item))
                order_item_ids.append(order_item['_id'])

            total_price = compute_total_price(storage, order_item_ids)

            order = storage.save(
                storage.orders,
                order_document(order_item_ids, total_price, order_in.user)
            )
        except Exception as e:
            current_app.logger.error(f"Failed to create order: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error!'}), 500

        if not order:
            return jsonify({'success': False, 'message': 'Failed to create order!'}), 400

        current_app.logger.info(
            f"Order {order['_id']} created with {len(order_item_ids)} items, total {total_price}."
        )
        return jsonify(serialize_doc(order)), 200

    @orders_bp.route('/<string:order_id>', methods=['DELETE'])
    def delete_order(order_id):
        """Remove the order by id, together with its order items
        ---
        tags:
          - Orders
        parameters:
          - in: path
            name: order_id
            schema:
              type: string
            required: true
            description: Order id
        responses:
          200:
            description: Order successfully deleted!
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/Envelope'
          404:
            description: Order not found!
          500:
            description: Internal Server Error!
        """
        try:
            deleted_order = storage.find_by_id_and_remove(storage.orders, order_id)
        except (InvalidId, PyMongoError) as e:
            current_app.logger.error(f"Error deleting order {order_id}: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error!'}), 500

        if not deleted_order:
            return jsonify({'success': False, 'message': 'Order not found!'}), 404

        order_item_ids = deleted_order.get('orderItems', [])
        try:
            removed = storage.remove_by_ids(storage.order_items, order_item_ids)
        except (InvalidId, PyMongoError) as e:
            current_app.logger.error(
                f"Order {order_id} deleted but removing its items {order_item_ids} failed: {str(e)}"
            )
            return jsonify({
                'success': False,
                'message': 'Order deleted but its order items could not be removed'
            }), 500

        if removed != len(order_item_ids):
            current_app.logger.warning(
                f"Order {order_id}: removed {removed} of {len(order_item_ids)} order items."
            )
        return jsonify({
            'success': True,
            'message': 'Order successfully deleted!',
            'removedOrderItems': removed
        }), 200

    return orders_bp
