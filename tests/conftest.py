import io
import pytest
from werkzeug.datastructures import FileStorage, MultiDict
from gallery import create_app
from gallery.services.imageStore import ImageStore


@pytest.fixture
def content_dir(tmp_path):
    path = tmp_path / "images"
    path.mkdir()
    return path


@pytest.fixture
def app(tmp_path, content_dir):
    app = create_app({
        "TESTING": True,
        "DATABASE_URL": f"sqlite:///{tmp_path / 'gallery.db'}",
        "CONTENT_DIR": str(content_dir),
        "UPLOAD_MAX_BYTES": 1024,
    })
    yield app
    app.extensions["gallery"]["store"].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_store(app):
    return app.extensions["gallery"]["store"]


@pytest.fixture
def store(tmp_path):
    store = ImageStore(f"sqlite:///{tmp_path / 'store.db'}")
    store.create_tables()
    yield store
    store.close()


def _make_files(data, filename, content_type="image/png"):
    upload = FileStorage(io.BytesIO(data), filename=filename, content_type=content_type)
    return MultiDict({"image": upload})


@pytest.fixture
def make_files():
    """Build the request.files mapping for a single `image` upload."""
    return _make_files
