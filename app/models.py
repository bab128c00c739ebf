# app/models.py
"""
Request schemas and document helpers.

Each pydantic model describes the body a route accepts. Views validate the
request with these before any document is built, then turn the model into the
stored document with the matching `*_document` helper.
"""
from datetime import datetime
from typing import Annotated, List

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, Field, ValidationError


def _check_object_id(value):
    if not ObjectId.is_valid(value):
        raise ValueError("must be a valid ObjectId")
    return value


ObjectIdStr = Annotated[str, AfterValidator(_check_object_id)]


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, description="Name of the product")
    description: str = Field(..., description="Description of the product")
    detailDescription: str = Field("", description="Detail description of the product")
    price: float = Field(0, ge=0)
    stock: int = Field(0, ge=0)


class UserIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, description="Plain text, hashed before storage")
    isAdmin: bool = False


class OrderItemIn(BaseModel):
    quantity: int = Field(..., ge=1)
    product: ObjectIdStr


class OrderIn(BaseModel):
    orderItems: List[OrderItemIn] = Field(..., min_length=1)
    user: ObjectIdStr


def validation_messages(error: ValidationError):
    """Flattens a pydantic ValidationError into 'field: message' strings."""
    messages = []
    for err in error.errors():
        location = '.'.join(str(part) for part in err.get('loc', ()))
        messages.append(f"{location}: {err.get('msg')}" if location else err.get('msg'))
    return messages


# --- Document builders ---

def product_document(product: ProductIn, image_url: str):
    return {
        'name': product.name,
        'description': product.description,
        'detailDescription': product.detailDescription,
        'image': image_url,
        'images': [],
        'price': product.price,
        'stock': product.stock,
        'dateCreated': datetime.utcnow(),
    }


def user_document(user: UserIn, password_hash):
    return {
        'name': user.name,
        'email': user.email,
        'password': password_hash,
        'isAdmin': user.isAdmin,
    }


def order_item_document(item: OrderItemIn):
    return {
        'quantity': item.quantity,
        'product': ObjectId(item.product),
    }


def order_document(order_item_ids, total_price, user_id: str):
    return {
        'orderItems': list(order_item_ids),
        'totalPrice': total_price,
        'user': ObjectId(user_id),
        'dateOrdered': datetime.utcnow(),
    }


# --- Serialization ---

def serialize_doc(doc):
    """Makes a stored document JSON-ready: ObjectIds to str, datetimes to ISO, `id` alias."""
    if doc is None:
        return None
    if isinstance(doc, list):
        return [serialize_doc(d) for d in doc]
    if isinstance(doc, dict):
        d = {k: serialize_doc(v) for k, v in doc.items()}
        if '_id' in d:
            d['id'] = d['_id']
        return d
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    return doc


def serialize_user(doc):
    """Same as serialize_doc, excluding the password hash."""
    if doc is None:
        return None
    d = serialize_doc(doc)
    d.pop('password', None)
    return d


def serialize_users(docs):
    return [serialize_user(d) for d in docs]
