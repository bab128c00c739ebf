import io

import mongomock
import pytest

from app import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app(
        'testing',
        mongo_client=mongomock.MongoClient(),
        overrides={'UPLOAD_FOLDER': str(tmp_path / 'uploads')}
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions['storage']


def image_file(name='shirt photo.png', mimetype='image/png', content=b'\x89PNG\r\n\x1a\n'):
    """A (stream, filename, content_type) tuple the test client sends as a file part."""
    return (io.BytesIO(content), name, mimetype)


@pytest.fixture
def make_product(storage):
    """Inserts a product straight into storage and returns its id as a string."""
    def _make(name='Shirt', price=100, stock=5):
        doc = storage.save(storage.products, {
            'name': name,
            'description': 'd',
            'detailDescription': '',
            'image': 'http://localhost/public/uploads/x.png',
            'images': [],
            'price': price,
            'stock': stock,
        })
        return str(doc['_id'])
    return _make


@pytest.fixture
def make_user(client):
    """Creates a user through the API and returns the response body."""
    def _make(name='Muhammad Ragil', email='mragil@gil.com', password='thisispassword', is_admin=False):
        response = client.post('/users', json={
            'name': name,
            'email': email,
            'password': password,
            'isAdmin': is_admin,
        })
        assert response.status_code == 200
        return response.get_json()
    return _make
