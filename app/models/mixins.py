import uuid

from sqlalchemy import Column, Integer, String


def new_public_id() -> str:
    return str(uuid.uuid4())


class PublicIdMixin:
    """
    Two identifiers per row: ``ref_id`` is the integer primary key every
    foreign key points at, ``id`` is the opaque UUID exposed over the API.
    Response schemas only ever read ``id``.
    """
    ref_id = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, index=True, nullable=False, default=new_public_id)
