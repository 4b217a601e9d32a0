import os
from concurrent.futures import ThreadPoolExecutor
from werkzeug.datastructures import MultiDict
from gallery.errors import ErrorKind, GalleryError
from gallery.services.fileReceiver import FileReceiver
from gallery.services.uploadPipeline import UploadPipeline, SUCCESS_MSG, RECORD_FAILED_MSG


class BrokenStore:
    def __init__(self):
        self.calls = 0

    def create(self, name, size, path):
        self.calls += 1
        raise GalleryError(ErrorKind.STORE_FAILURE, "Could not create image: OperationalError")


def make_pipeline(content_dir, store):
    return UploadPipeline(FileReceiver(str(content_dir), max_bytes=1024), store)


def test_upload_creates_record_matching_file(content_dir, store, make_files):
    outcome = make_pipeline(content_dir, store).run(make_files(b"0123456789", "a.png"))

    assert outcome.ok
    assert outcome.message == SUCCESS_MSG
    img = store.get(outcome.image.id)
    assert img.size == 10
    assert img.path == f"images/{img.name}"
    assert os.path.getsize(content_dir / img.name) == img.size


def test_no_file_creates_no_record(content_dir, store):
    outcome = make_pipeline(content_dir, store).run(MultiDict())

    assert not outcome.ok
    assert outcome.message == "Error: No file selected!"
    assert outcome.error.kind == ErrorKind.NO_FILE_PROVIDED
    assert store.list_all() == []


def test_rejected_file_never_reaches_store(content_dir, make_files):
    broken = BrokenStore()
    outcome = make_pipeline(content_dir, broken).run(make_files(b"x", "a.txt", "text/plain"))

    assert outcome.message == "Error: Images Only!"
    assert broken.calls == 0


def test_store_failure_keeps_written_file(content_dir, make_files):
    broken = BrokenStore()
    outcome = make_pipeline(content_dir, broken).run(make_files(b"abc", "a.png"))

    assert not outcome.ok
    assert outcome.message == RECORD_FAILED_MSG
    assert outcome.error.kind == ErrorKind.STORE_FAILURE
    assert broken.calls == 1
    # no rollback of the file write
    assert len(os.listdir(content_dir)) == 1


def test_concurrent_uploads_with_same_name(content_dir, store, make_files):
    pipeline = make_pipeline(content_dir, store)
    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(pipeline.run, [make_files(b"one", "a.png"), make_files(b"two", "a.png")]))

    assert all(o.ok for o in outcomes)
    records = store.list_all()
    assert len(records) == 2
    assert len({r.id for r in records}) == 2
    assert len({r.path for r in records}) == 2
    assert len(os.listdir(content_dir)) == 2
