from bson import ObjectId

from app.core.errors import NotFoundError
from app.models.base import object_id_or_none


def require_object_id(value, kind: str) -> ObjectId:
    """Parse a caller-supplied id; a malformed id cannot exist, so it is NotFound."""
    oid = object_id_or_none(value)
    if oid is None:
        raise NotFoundError(f"{kind} {value} not found")
    return oid
