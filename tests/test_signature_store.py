import json

import fitz  # PyMuPDF
import pytest

from pdflyer.core.errors import ElementEmbedError, NoContentError
from pdflyer.core.imaging import StrokeCanvas, decode_data_uri
from pdflyer.core.signatures import JsonFileStorage, MemoryStorage, SignatureStore
from pdflyer.core.signatures.store import DEFAULT_STORAGE_KEY
from tests.conftest import ReadOnlyStorage, make_image, make_transparent_image


def signed_canvas():
    canvas = StrokeCanvas(600, 240, stroke_width=2)
    canvas.begin_stroke(20, 200)
    canvas.add_point(200, 40)
    canvas.add_point(400, 180)
    canvas.end_stroke()
    return canvas


class TestSignatureStore:
    def test_save_drawing_persists(self):
        storage = MemoryStorage()
        store = SignatureStore(storage)

        store.save_drawing(signed_canvas())

        uris = json.loads(storage.get(DEFAULT_STORAGE_KEY))
        assert len(uris) == 1
        assert uris[0].startswith("data:image/png;base64,")

    def test_empty_drawing_is_rejected(self):
        store = SignatureStore(MemoryStorage())

        with pytest.raises(NoContentError):
            store.save_drawing(StrokeCanvas(600, 240))
        assert len(store) == 0

    def test_loads_existing_signatures(self):
        storage = MemoryStorage({DEFAULT_STORAGE_KEY: json.dumps(["data:image/png;base64,AAAA"])})

        store = SignatureStore(storage)

        assert len(store) == 1
        assert store.get(0).raster_data_uri == "data:image/png;base64,AAAA"

    def test_corrupt_slot_starts_empty(self):
        store = SignatureStore(MemoryStorage({DEFAULT_STORAGE_KEY: "{not json"}))

        assert len(store) == 0

    def test_delete_by_index(self):
        storage = MemoryStorage()
        store = SignatureStore(storage)
        store.add("data:image/png;base64,AAAA")
        store.add("data:image/png;base64,BBBB")

        store.delete(0)

        assert [r.raster_data_uri for r in store.signatures] == ["data:image/png;base64,BBBB"]
        assert json.loads(storage.get(DEFAULT_STORAGE_KEY)) == ["data:image/png;base64,BBBB"]

    def test_delete_out_of_range(self):
        store = SignatureStore(MemoryStorage())

        with pytest.raises(IndexError):
            store.delete(3)

    def test_import_image_removes_background(self):
        store = SignatureStore(MemoryStorage())

        record = store.import_image(make_image(60, 30), "image/png")

        media_type, data = decode_data_uri(record.raster_data_uri)
        assert media_type == "image/png"
        pix = fitz.Pixmap(data)
        assert pix.alpha
        assert pix.pixel(0, 0)[3] == 0

    def test_import_unreadable_image(self):
        store = SignatureStore(MemoryStorage())

        with pytest.raises(ElementEmbedError):
            store.import_image(b"not an image", "image/png")
        assert len(store) == 0

    def test_import_keeps_transparent_background(self):
        store = SignatureStore(MemoryStorage())

        record = store.import_image(make_transparent_image(60, 30), "image/png")

        _, data = decode_data_uri(record.raster_data_uri)
        pix = fitz.Pixmap(data)
        assert pix.pixel(0, 0)[3] == 0
        assert pix.pixel(30, 15)[3] == 255

    def test_failed_write_adds_nothing(self):
        store = SignatureStore(ReadOnlyStorage())

        with pytest.raises(OSError):
            store.add("data:image/png;base64,AAAA")
        assert len(store) == 0

    def test_failed_write_keeps_deleted_record(self):
        storage = ReadOnlyStorage({DEFAULT_STORAGE_KEY: json.dumps(["data:image/png;base64,AAAA"])})
        store = SignatureStore(storage)

        with pytest.raises(OSError):
            store.delete(0)
        assert store.get(0).raster_data_uri == "data:image/png;base64,AAAA"

    def test_custom_key(self):
        storage = MemoryStorage()
        store = SignatureStore(storage, key="other")

        store.add("data:image/png;base64,AAAA")

        assert storage.get("other") is not None
        assert storage.get(DEFAULT_STORAGE_KEY) is None


class TestJsonFileStorage:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "store" / "storage.json"
        storage = JsonFileStorage(path)

        storage.set("a", "1")
        storage.set("b", "2")
        storage.remove("a")

        assert JsonFileStorage(path).get("b") == "2"
        assert JsonFileStorage(path).get("a") is None

    def test_defaults_to_app_data_dir(self, tmp_path):
        storage = JsonFileStorage()

        assert storage.file_path == tmp_path / "data" / "storage.json"

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]")

        assert JsonFileStorage(path).get("a") is None

    def test_store_survives_restart(self, tmp_path):
        path = tmp_path / "storage.json"
        SignatureStore(JsonFileStorage(path)).save_drawing(signed_canvas())

        assert len(SignatureStore(JsonFileStorage(path))) == 1
