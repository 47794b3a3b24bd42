"""
ObjectId parsing for ids arriving in paths and request bodies.
"""

from typing import Union

from bson import ObjectId

from common.utils.exceptions import BadRequestException


def to_object_id(value: Union[str, ObjectId], label: str = "id") -> ObjectId:
    """
    Convert a client-supplied id to an ObjectId.

    Raises:
        BadRequestException: The value isn't a valid ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        raise BadRequestException(
            message=f"Invalid {label}",
            code="INVALID_ID",
        )
    return ObjectId(value)
