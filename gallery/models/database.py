import uuid
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def new_record_id():
    # 24 hex chars, the same shape as a document-store object id
    return uuid.uuid4().hex[:24]
