"""
Reusable signature images, kept independently of any document.
"""
import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from pdflyer.core.errors import ElementEmbedError
from pdflyer.core.imaging.background import remove_background
from pdflyer.core.imaging.raster import encode_data_uri
from pdflyer.core.imaging.strokes import StrokeCanvas
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "pdfSignatures"


@dataclass(frozen=True)
class SignatureRecord:
    raster_data_uri: str


class SignatureStore:
    """
    Ordered collection of saved signatures backed by a durable slot.

    The slot holds a JSON list of data URIs. It is read once when the
    store is created and rewritten on every add or delete.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._records: List[SignatureRecord] = self._load()

    def _load(self) -> List[SignatureRecord]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            uris = json.loads(raw)
        except ValueError as e:
            logger.error("Error loading signatures: %s", e)
            return []
        if not isinstance(uris, list):
            logger.error("Error loading signatures: expected a list")
            return []
        return [SignatureRecord(uri) for uri in uris if isinstance(uri, str)]

    def _persist(self) -> None:
        self.storage.set(self.key, json.dumps([r.raster_data_uri for r in self._records]))

    @property
    def signatures(self) -> List[SignatureRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, index: int) -> SignatureRecord:
        """
        Get a saved signature.

        Raises:
            IndexError: if no signature exists at the index
        """
        if not 0 <= index < len(self._records):
            raise IndexError(f"No signature at index {index}")
        return self._records[index]

    def add(self, raster_data_uri: str) -> SignatureRecord:
        """
        Append a signature and persist the collection.

        Raises:
            OSError: if the collection cannot be written; nothing is added
        """
        record = SignatureRecord(raster_data_uri)
        self._records.append(record)
        try:
            self._persist()
        except OSError:
            self._records.pop()
            raise
        logger.info("Saved signature (%d stored)", len(self._records))
        return record

    def delete(self, index: int) -> None:
        """
        Remove a signature by index. There is no undo.

        Raises:
            IndexError: if no signature exists at the index
        """
        record = self.get(index)
        del self._records[index]
        try:
            self._persist()
        except OSError:
            self._records.insert(index, record)
            raise
        logger.info("Deleted signature %d (%d stored)", index, len(self._records))

    def save_drawing(self, canvas: StrokeCanvas) -> SignatureRecord:
        """
        Save a hand-drawn signature.

        Raises:
            NoContentError: if nothing has been drawn on the canvas
        """
        return self.add(canvas.to_data_uri())

    def import_image(self, data: bytes, media_type: Optional[str] = None) -> SignatureRecord:
        """
        Save an uploaded signature image with its light background removed.

        Raises:
            ElementEmbedError: if the image cannot be decoded
        """
        try:
            pix = remove_background(data, media_type)
        except ValueError as e:
            logger.error("Signature upload could not be decoded: %s", e)
            raise ElementEmbedError("The signature image could not be read.") from e
        return self.add(encode_data_uri(pix.tobytes("png")))
