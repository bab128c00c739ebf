# app/storage.py
from bson import ObjectId
from pymongo import MongoClient, ReturnDocument


def to_object_id(value):
    """Returns value as an ObjectId. Raises bson.errors.InvalidId if malformed."""
    if isinstance(value, ObjectId):
        return value
    return ObjectId(value)


class Storage:
    """
    Thin document-store layer over a single pymongo Database.

    Built once by the application factory and handed to every blueprint
    factory, so views never reach for a global connection.
    """

    def __init__(self, db):
        self.db = db
        self.users = db.users
        self.products = db.products
        self.order_items = db.orderitems
        self.orders = db.orders

    @classmethod
    def from_config(cls, config, client=None):
        """Creates the storage handle from app config, reusing `client` if given."""
        if client is None:
            mongo_uri = config.get('MONGO_URI')
            if not mongo_uri:
                raise ValueError("MONGO_URI not set in the configuration")
            client = MongoClient(mongo_uri)
        db_name = config.get('MONGO_DB_NAME')
        if not db_name:
            raise ValueError("MONGO_DB_NAME not set in the configuration")
        return cls(client[db_name])

    @property
    def client(self):
        return self.db.client

    def ping(self):
        return self.client.admin.command('ping')

    def close(self):
        self.client.close()

    # --- Basic operations ---

    def find(self, collection, sort=None, projection=None):
        cursor = collection.find({}, projection)
        if sort:
            cursor = cursor.sort(sort)
        return list(cursor)

    def find_by_id(self, collection, doc_id, projection=None):
        return collection.find_one({'_id': to_object_id(doc_id)}, projection)

    def save(self, collection, document):
        """Inserts document and returns it with its assigned _id."""
        result = collection.insert_one(document)
        document['_id'] = result.inserted_id
        return document

    def find_by_id_and_update(self, collection, doc_id, fields):
        """Sets fields on the document and returns the updated version, or None."""
        return collection.find_one_and_update(
            {'_id': to_object_id(doc_id)},
            {'$set': fields},
            return_document=ReturnDocument.AFTER
        )

    def find_by_id_and_remove(self, collection, doc_id):
        """Deletes the document and returns it as it was, or None."""
        return collection.find_one_and_delete({'_id': to_object_id(doc_id)})

    def remove_by_ids(self, collection, ids):
        """Bulk delete. Returns the number of removed documents."""
        ids = [to_object_id(i) for i in ids]
        if not ids:
            return 0
        result = collection.delete_many({'_id': {'$in': ids}})
        return result.deleted_count

    # --- References ---

    def populate(self, documents, path, collection, fields=None):
        """
        Resolves the reference stored at `path` into the referenced document.

        `documents` may be a single document or a list. The reference may be a
        single id or a list of ids. `fields` limits the resolved document to
        those keys (plus _id). References to missing documents become None.
        Documents are modified in place and returned.
        """
        many = isinstance(documents, list)
        docs = [d for d in (documents if many else [documents]) if d is not None]

        ref_ids = set()
        for doc in docs:
            ref = doc.get(path)
            if isinstance(ref, list):
                ref_ids.update(ref)
            elif ref is not None:
                ref_ids.add(ref)

        projection = {field: 1 for field in fields} if fields else None
        found = {}
        if ref_ids:
            for ref_doc in collection.find({'_id': {'$in': list(ref_ids)}}, projection):
                found[ref_doc['_id']] = ref_doc

        for doc in docs:
            ref = doc.get(path)
            if isinstance(ref, list):
                doc[path] = [found.get(r) for r in ref]
            elif ref is not None:
                doc[path] = found.get(ref)
        return documents
