# app/docs.py
from flasgger import Swagger

SWAGGER_CONFIG = {
    'headers': [],
    'title': 'El-Galeri API',
    'openapi': '3.0.2',
    'specs': [
        {
            'endpoint': 'apispec',
            'route': '/api-docs/apispec.json',
            'rule_filter': lambda rule: True,
            'model_filter': lambda tag: True,
        }
    ],
    'static_url_path': '/flasgger_static',
    'swagger_ui': True,
    'specs_route': '/api-docs/',
}

COMPONENTS = {
    'schemas': {
        'User': {
            'type': 'object',
            'required': ['name', 'email', 'password'],
            'properties': {
                'id': {'type': 'string', 'description': 'Auto generated id of the user'},
                'name': {'type': 'string', 'description': 'The name of the user'},
                'email': {'type': 'string', 'description': 'The email of the user'},
                'isAdmin': {'type': 'boolean', 'description': 'true if user is admin'},
            },
            'example': {
                'id': '60896dfd4425c657ccfea7a6',
                'name': 'Muhammad Ragil',
                'email': 'mragil@gil.com',
                'isAdmin': True,
            },
        },
        'UserInput': {
            'type': 'object',
            'required': ['name', 'email', 'password'],
            'properties': {
                'name': {'type': 'string', 'example': 'Muhammad Ragil'},
                'email': {'type': 'string', 'example': 'mragil@gil.com'},
                'password': {'type': 'string', 'example': 'thisispassword'},
                'isAdmin': {'type': 'boolean', 'example': False},
            },
        },
        'Product': {
            'type': 'object',
            'required': ['name', 'description'],
            'properties': {
                'id': {'type': 'string', 'description': 'Auto generated id of the product'},
                'name': {'type': 'string'},
                'description': {'type': 'string'},
                'detailDescription': {'type': 'string'},
                'image': {'type': 'string', 'description': 'Url of the product image'},
                'images': {'type': 'array', 'items': {'type': 'string'}, 'description': 'Gallery image urls'},
                'price': {'type': 'number'},
                'stock': {'type': 'integer'},
                'dateCreated': {'type': 'string', 'format': 'date-time'},
            },
            'example': {
                'id': '608a50efb895e53188a40bf5',
                'name': 'Kemeja Lengan Panjang',
                'description': 'Kemeja lengan panjang dengan bahan premium.',
                'detailDescription': 'Kemeja lengan panjang tersedia dalam ukuran M, L, XL.',
                'image': 'http://localhost:4001/public/uploads/kemeja.jpeg-1619677423907.jpeg',
                'images': [],
                'price': 250000,
                'stock': 20,
                'dateCreated': '2021-04-29T06:23:43.921000',
            },
        },
        'OrderItem': {
            'type': 'object',
            'required': ['quantity', 'product'],
            'properties': {
                'quantity': {'type': 'integer', 'example': 2},
                'product': {'type': 'string', 'example': '6075ab19b1e46236c89bf80d'},
            },
        },
        'Order': {
            'type': 'object',
            'required': ['orderItems', 'totalPrice', 'user'],
            'properties': {
                'id': {'type': 'string', 'description': 'Auto generated id of the order'},
                'orderItems': {
                    'type': 'array',
                    'items': {'$ref': '#/components/schemas/OrderItem'},
                },
                'totalPrice': {'type': 'number', 'description': 'Computed when the order is created'},
                'user': {'type': 'string', 'description': 'Id of the ordering user'},
                'dateOrdered': {'type': 'string', 'format': 'date-time'},
            },
        },
        'OrderInput': {
            'type': 'object',
            'required': ['orderItems', 'user'],
            'properties': {
                'orderItems': {
                    'type': 'array',
                    'items': {'$ref': '#/components/schemas/OrderItem'},
                },
                'user': {'type': 'string', 'example': '60896dfd4425c657ccfea7a6'},
            },
        },
        'Envelope': {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean'},
                'message': {'type': 'string'},
            },
        },
    }
}


def build_template(api_url):
    return {
        'info': {
            'title': 'El-Galeri API',
            'version': '1.0.0',
            'description': 'El-Galeri catalog API built with Flask',
        },
        'servers': [{'url': api_url}],
        'tags': [
            {'name': 'Users', 'description': 'All routes of users'},
            {'name': 'Products', 'description': 'All routes of product'},
            {'name': 'Orders', 'description': 'All routes of orders'},
        ],
        'components': COMPONENTS,
    }


def init_docs(app):
    """Serves the generated OpenAPI document under /api-docs/."""
    config = dict(Swagger.DEFAULT_CONFIG)
    config.update(SWAGGER_CONFIG)
    return Swagger(app, config=config, template=build_template(app.config["API_URL"]))
