import math
from contextlib import contextmanager
from sqlalchemy import create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from ..errors import GalleryError, ErrorKind
from ..models.database import Base
from ..models.imageModel import Image
from ..utils.logging import logger


def engine_options(url, timeout):
    """create_engine keyword arguments bounding connect and query time for a backend."""
    backend = url.get_backend_name()
    seconds = max(1, math.ceil(timeout))
    if backend == "sqlite":
        # busy timeout on locked writes, connections shared with worker threads
        return {"connect_args": {"check_same_thread": False, "timeout": timeout}}

    options = {"pool_timeout": timeout, "pool_pre_ping": True}
    if backend == "postgresql":
        options["connect_args"] = {
            "connect_timeout": seconds,
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    elif backend in ("mysql", "mariadb"):
        options["connect_args"] = {
            "connect_timeout": seconds,
            "read_timeout": seconds,
            "write_timeout": seconds,
        }
    else:
        logger.warning(f"No query timeout known for {backend}, only pool checkout is bounded")
    return options


class ImageStore:
    """Metadata store client for Image records.

    Owns the engine and session factory; one instance is created per app
    and closed when the process shuts down.
    """

    def __init__(self, database_url, timeout=10.0):
        url = make_url(database_url)
        self.engine = create_engine(database_url, **engine_options(url, timeout))
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info(f"Store configured for backend {url.get_backend_name()}")

    def create_tables(self):
        Base.metadata.create_all(bind=self.engine)

    def close(self):
        self.engine.dispose()
        logger.info("Store connections closed")

    @contextmanager
    def _session(self, action):
        db = self.SessionLocal()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Store error while trying to {action}")
            raise GalleryError(ErrorKind.STORE_FAILURE, f"Could not {action}: {e.__class__.__name__}") from e
        finally:
            db.close()

    def create(self, name, size, path):
        with self._session("create image") as db:
            img = Image(name=name, size=size, path=path)
            db.add(img)
            db.commit()
            db.refresh(img)
            return img

    def list_all(self):
        with self._session("list images") as db:
            return list(db.scalars(select(Image)))

    def get(self, image_id):
        with self._session("load image") as db:
            img = db.get(Image, image_id)
            if img is None:
                raise GalleryError(ErrorKind.NOT_FOUND, "Image not found")
            return img

    def update_name(self, image_id, name):
        """Rename an image; an unknown id creates a record holding just the name."""
        with self._session("update image") as db:
            img = db.get(Image, image_id)
            if img is None:
                logger.info(f"No image {image_id}, creating it on update")
                img = Image(id=image_id, name=name)
                db.add(img)
            else:
                img.name = name
            db.commit()
            db.refresh(img)
            return img

    def delete(self, image_id):
        """Remove a record and return it, or None when the id was unknown."""
        with self._session("delete image") as db:
            img = db.get(Image, image_id)
            if img is None:
                return None
            db.delete(img)
            db.commit()
            return img
