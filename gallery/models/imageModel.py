import posixpath
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from .database import Base, new_record_id

class Image(Base):
    __tablename__ = "images"

    id = Column(String(24), primary_key=True, default=new_record_id)
    name = Column(String, nullable=False)
    # size and path are only null on records created by an update upsert
    size = Column(Integer, nullable=True)
    path = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def filename(self):
        """Name of the stored file inside the content directory."""
        return posixpath.basename(self.path) if self.path else None
