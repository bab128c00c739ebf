# app/products.py
from flask import Blueprint, request, jsonify, current_app, g
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from .decorators import upload_single, upload_array, upload_url
from .models import ProductIn, product_document, serialize_doc, validation_messages


def create_products_blueprint(storage, gallery_max_images=10):
    """Product routes bound to the given Storage."""
    products_bp = Blueprint('products', __name__)

    @products_bp.route('', methods=['GET'])
    def list_products():
        """Returns the list of all product
        ---
        tags:
          - Products
        responses:
          200:
            description: The list of all product
            content:
              application/json:
                schema:
                  type: array
                  items:
                    $ref: '#/components/schemas/Product'
          400:
            description: Internal server error
        """
        try:
            product_list = storage.find(storage.products)
        except PyMongoError as e:
            current_app.logger.error(f"Error fetching products: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error'}), 400
        return jsonify(serialize_doc(product_list)), 200

    @products_bp.route('/<string:product_id>', methods=['GET'])
    def get_product(product_id):
        """Get the product by id
        ---
        tags:
          - Products
        parameters:
          - in: path
            name: product_id
            schema:
              type: string
            required: true
            description: The product id
        responses:
          200:
            description: Product Data
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/Product'
          400:
            description: Internal server error
          404:
            description: Product not found
        """
        try:
            product = storage.find_by_id(storage.products, product_id)
        except (InvalidId, PyMongoError) as e:
            current_app.logger.error(f"Error fetching product {product_id}: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error'}), 400

        if not product:
            return jsonify({'success': False, 'message': 'Product with given ID is not found'}), 404
        return jsonify(serialize_doc(product)), 200

    @products_bp.route('', methods=['POST'])
    @upload_single('image')
    def create_product():
        """Create a new product
        ---
        tags:
          - Products
        requestBody:
          required: true
          content:
            multipart/form-data:
              schema:
                type: object
                required:
                  - name
                  - description
                  - image
                properties:
                  name:
                    type: string
                    example: Kemeja Lengan Panjang
                  description:
                    type: string
                    example: Kemeja lengan panjang dengan bahan premium.
                  detailDescription:
                    type: string
                    example: Kemeja lengan panjang tersedia dalam ukuran M, L, XL.
                  image:
                    type: string
                    format: binary
                    description: Image of the product (png, jpeg, jpg)
                  price:
                    type: number
                    example: 250000
                  stock:
                    type: integer
                    example: 20
        responses:
          200:
            description: Product successfully created
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/Product'
          400:
            description: Image file is not presented or invalid product data
          500:
            description: Internal Server Error
        """
        try:
            product_in = ProductIn.model_validate(request.form.to_dict())
        except ValidationError as e:
            return jsonify({
                'success': False,
                'message': 'Validation failed',
                'errors': validation_messages(e)
            }), 400

        product = product_document(product_in, upload_url(g.uploaded_file))
        try:
            product = storage.save(storage.products, product)
        except PyMongoError as e:
            current_app.logger.error(f"Failed to save product: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error'}), 500

        current_app.logger.info(f"Product {product['_id']} created with image {g.uploaded_file}.")
        return jsonify(serialize_doc(product)), 200

    @products_bp.route('/gallery-images/<string:product_id>', methods=['PUT'])
    @upload_array('images', gallery_max_images)
    def update_gallery_images(product_id):
        """Replace the image gallery of a product
        ---
        tags:
          - Products
        parameters:
          - in: path
            name: product_id
            schema:
              type: string
            required: true
            description: Product id
        requestBody:
          required: true
          content:
            multipart/form-data:
              schema:
                type: object
                properties:
                  images:
                    type: array
                    maxItems: 10
                    items:
                      type: string
                      format: binary
        responses:
          200:
            description: Product successfully updated
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/Product'
          400:
            description: Image file is not presented
          404:
            description: Product with given ID is not found!
          500:
            description: Internal Server Error
        """
        images_paths = [upload_url(filename) for filename in g.uploaded_files]
        try:
            product = storage.find_by_id_and_update(
                storage.products, product_id, {'images': images_paths}
            )
        except (InvalidId, PyMongoError) as e:
            current_app.logger.error(f"Error updating gallery of product {product_id}: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error'}), 400

        if not product:
            return jsonify({'success': False, 'message': 'Product with given ID is not found!'}), 404
        return jsonify(serialize_doc(product)), 200

    return products_bp
