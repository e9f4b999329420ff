"""Whole-document JSON persistence shared by the cache and the favorites list.

A :class:`JsonDocumentStore` owns one JSON file whose top level is a fixed
container type (``dict`` for the cache, ``list`` for favorites).  The whole
document is read and written as one unit:

* :meth:`~JsonDocumentStore.ensure_initialized` creates the directory and
  seeds an empty container.  Failure here raises
  :class:`~recipecli.exceptions.StorageUnavailable`.
* :meth:`~JsonDocumentStore.read` is strict and raises
  :class:`~recipecli.exceptions.CorruptState` on unparseable content.
* :meth:`~JsonDocumentStore.load` is tolerant: missing, unreadable or corrupt
  content reads as the empty container.
* :meth:`~JsonDocumentStore.save` replaces the file via :func:`atomic_write`
  so an interrupted write never leaves a truncated document behind.

No locking happens here; callers serialise access themselves.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from recipecli.exceptions import CorruptState, StorageUnavailable

logger = logging.getLogger(__name__)

Document = Union[dict[str, Any], list[Any]]


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file and rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX.  On any failure the temp
    file is removed and the original exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


class JsonDocumentStore:
    """A single JSON file holding one container document.

    Args:
        path: Location of the JSON file.
        container: The required top-level type, ``dict`` or ``list``.

    Example::

        store = JsonDocumentStore(Path("~/.cache/recipecli/cache.json").expanduser())
        store.ensure_initialized()
        doc = store.load()
        doc["search_pasta"] = {"timestamp": 0, "data": []}
        store.save(doc)
    """

    def __init__(self, path: str | Path, container: type = dict) -> None:
        if container not in (dict, list):
            raise ValueError(f"container must be dict or list, not {container!r}")
        self._path = Path(path)
        self._container = container

    @property
    def path(self) -> Path:
        """The filesystem path of the backing document."""
        return self._path

    def empty(self) -> Document:
        """Return a fresh empty container of the configured type."""
        return self._container()

    def ensure_initialized(self) -> None:
        """Create the containing directory and seed an empty document if absent.

        Safe to call before every operation.

        Raises:
            StorageUnavailable: If the directory or file cannot be created,
                or the path exists but is not a regular file.
        """
        try:
            if self._path.is_file():
                return
            if self._path.exists():
                raise StorageUnavailable(f"{self._path} exists but is not a regular file")
            atomic_write(self._path, self._dump(self.empty()))
        except OSError as exc:
            raise StorageUnavailable(f"Cannot create {self._path}: {exc}") from exc
        logger.debug("Initialised %s", self._path)

    def read(self) -> Document:
        """Read and parse the document strictly.

        Returns:
            The parsed container; the empty container if the file is absent.

        Raises:
            CorruptState: If the content is not JSON or the top level has
                the wrong type.
            OSError: If the file exists but cannot be read.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self.empty()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptState(f"{self._path} is not valid JSON: {exc}") from exc
        if not isinstance(data, self._container):
            raise CorruptState(
                f"{self._path} holds a {type(data).__name__}, "
                f"expected a {self._container.__name__}"
            )
        return data

    def load(self) -> Document:
        """Read the document, treating any unreadable state as a cold start."""
        try:
            return self.read()
        except CorruptState as exc:
            logger.warning("Ignoring corrupt content: %s", exc)
        except OSError as exc:
            logger.warning("Cannot read %s, treating as empty: %s", self._path, exc)
        return self.empty()

    def save(self, document: Document) -> None:
        """Replace the whole document on disk.

        Raises:
            StorageUnavailable: If the temp file cannot be written or renamed.
        """
        try:
            atomic_write(self._path, self._dump(document))
        except OSError as exc:
            raise StorageUnavailable(f"Cannot write {self._path}: {exc}") from exc

    @staticmethod
    def _dump(document: Document) -> str:
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
