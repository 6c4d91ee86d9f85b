"""On-disk storage layer: one file per cache entry.

Maps a ``(namespace, key)`` pair to a file on disk and performs the raw
filesystem operations behind :class:`~tinycache.cache.TinyCache`:

* **Key hashing** -- the file name is the lowercase hex SHA-1 digest of the
  UTF-8 encoded key (:func:`hash_key`), so arbitrary keys never produce
  illegal or overlong file names.
* **Layout** -- entries live directly inside the namespace directory
  (:func:`resolve_path`). There is no sharding, index or manifest.
* **Encoding** -- values are pickled at a fixed protocol. The payload carries
  no type tag; :func:`read` can check the decoded value against a requested
  type with a strict pydantic :class:`~pydantic.TypeAdapter`.
* **Age** -- the file's modification time is the entry's only metadata
  (:func:`item_age`).

Every function raises a :class:`~tinycache.exceptions.StoreError` subclass on
failure. Nothing here swallows errors; that policy belongs to the facade.

Writes go through a temp file in the namespace directory followed by
``os.replace``. Concurrent writers of the same key are not coordinated.
"""

from __future__ import annotations

import hashlib
import logging
import os
import pickle
import tempfile
import time
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from tinycache.exceptions import IOError_, SerializationError, TimeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

PICKLE_PROTOCOL = 4
"""Pickle protocol used for every entry."""

Namespace = Union[str, os.PathLike]


# --- Keys and paths ---


def hash_key(key: str) -> str:
    """Return the hex SHA-1 digest used as the on-disk name for *key*.

    Args:
        key: The logical cache key.

    Returns:
        A 40 character lowercase hexadecimal string.
    """
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


def resolve_path(namespace: Namespace, key: str) -> Path:
    """Return the file path of *key* inside *namespace*. Creates nothing."""
    return Path(namespace) / hash_key(key)


def ensure_namespace(namespace: Namespace) -> None:
    """Create the namespace directory if it does not exist yet.

    An already existing directory is the common case and is not an error.

    Raises:
        OSError: For any other failure (permissions, a regular file in the
            way). :func:`write` converts this into
            :class:`~tinycache.exceptions.IOError_`.
    """
    Path(namespace).mkdir(parents=True, exist_ok=True)


# --- Encoding ---


@lru_cache(maxsize=128)
def _adapter(value_type: Any) -> Optional[TypeAdapter]:
    """Strict-mode adapter for *value_type*, or ``None`` when pydantic has no schema for it."""
    try:
        return TypeAdapter(value_type)
    except PydanticSchemaGenerationError:
        return None


def _conform(value: Any, value_type: Any) -> Any:
    """Check *value* against *value_type*, raising :class:`SerializationError` on a mismatch."""
    try:
        adapter = _adapter(value_type)
    except TypeError:
        # Unhashable type expressions cannot be cache keys.
        adapter = _adapter.__wrapped__(value_type)

    if adapter is not None:
        return adapter.validate_python(value, strict=True)
    # Plain classes without a pydantic schema fall back to isinstance.
    if isinstance(value_type, type) and isinstance(value, value_type):
        return value
    raise SerializationError(
        f"Stored {type(value).__name__} does not match requested type {value_type!r}"
    )


def serialize(value: Any) -> bytes:
    """Encode *value* into the binary entry format.

    Raises:
        SerializationError: If the value cannot be pickled (lambdas, open
            files, locks, values nested too deeply, objects whose
            ``__reduce__`` fails, ...).
    """
    try:
        return pickle.dumps(value, protocol=PICKLE_PROTOCOL)
    except Exception as exc:
        # Custom __reduce__/__getstate__ hooks can raise anything.
        raise SerializationError(f"Cannot serialize {type(value).__name__}: {exc!r}") from exc


def deserialize(data: bytes, value_type: Optional[type[T]] = None) -> T:
    """Decode *data* and optionally check it against *value_type*.

    Args:
        data: Raw entry bytes as produced by :func:`serialize`.
        value_type: When given, the decoded object is validated with a strict
            pydantic ``TypeAdapter`` (no coercion, so ``"1"`` is not an
            ``int``). Any type pydantic understands is accepted, including
            generics such as ``dict[str, list[int]]`` and ``BaseModel``
            subclasses. Other classes are checked with ``isinstance``.

    Raises:
        SerializationError: If the bytes are not a valid payload or the
            decoded value does not match *value_type*.
    """
    try:
        value = pickle.loads(data)
    except Exception as exc:
        # Truncated or foreign bytes surface as almost any exception type.
        raise SerializationError(f"Cannot decode entry: {exc!r}") from exc

    if value_type is None:
        return value
    try:
        return _conform(value, value_type)
    except SerializationError:
        raise
    except ValidationError as exc:
        raise SerializationError(
            f"Stored {type(value).__name__} does not match requested type {value_type!r}"
        ) from exc
    except Exception as exc:
        raise SerializationError(f"Cannot check entry against {value_type!r}: {exc!r}") from exc


# --- Entry operations ---


def write(namespace: Namespace, key: str, value: Any) -> None:
    """Store *value* under *key*, replacing any previous content.

    The namespace directory is created on demand. Content is written to a
    temporary file next to the target and renamed over it.

    Raises:
        SerializationError: If *value* cannot be encoded.
        IOError_: If the directory or file cannot be written.
    """
    data = serialize(value)
    path = resolve_path(namespace, key)

    try:
        ensure_namespace(namespace)
    except OSError as exc:
        raise IOError_(f"Cannot create cache directory {namespace}: {exc}") from exc

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except OSError as exc:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise IOError_(f"Cannot write {path}: {exc}") from exc

    logger.debug("Wrote %d bytes to %s", len(data), path)


def read(namespace: Namespace, key: str, value_type: Optional[type[T]] = None) -> T:
    """Load and decode the value stored under *key*.

    Args:
        namespace: Cache directory.
        key: Logical key.
        value_type: Optional expected type, see :func:`deserialize`.

    Raises:
        IOError_: If the entry file is missing or unreadable.
        SerializationError: If the content cannot be decoded as *value_type*.
    """
    path = resolve_path(namespace, key)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise IOError_(f"Cannot read {path}: {exc}") from exc
    return deserialize(data, value_type)


def remove(namespace: Namespace, key: str) -> None:
    """Delete the entry file for *key*.

    Raises:
        IOError_: If the file does not exist or cannot be deleted.
    """
    path = resolve_path(namespace, key)
    try:
        path.unlink()
    except OSError as exc:
        raise IOError_(f"Cannot remove {path}: {exc}") from exc


def item_age(namespace: Namespace, key: str) -> timedelta:
    """Return the time elapsed since the entry for *key* was last written.

    Raises:
        IOError_: If the file's metadata cannot be read (usually: no entry).
        TimeError: If the modification time is ahead of the current clock.
    """
    path = resolve_path(namespace, key)
    try:
        mtime = path.stat().st_mtime
    except OSError as exc:
        raise IOError_(f"Cannot stat {path}: {exc}") from exc

    elapsed = time.time() - mtime
    if elapsed < 0:
        raise TimeError(f"Modification time of {path} is {-elapsed:.3f}s in the future")
    return timedelta(seconds=elapsed)


def namespace_stats(namespace: Namespace) -> dict[str, Any]:
    """Summarise a namespace directory.

    Only regular files whose name looks like a key digest are counted, so
    leftover temp files and unrelated files are ignored.

    Returns:
        A ``dict`` with ``directory`` (str), ``exists`` (bool), ``entries``
        (int) and ``total_bytes`` (int).
    """
    root = Path(namespace)
    if not root.is_dir():
        return {"directory": str(root), "exists": False, "entries": 0, "total_bytes": 0}

    entries = 0
    total = 0
    try:
        for child in root.iterdir():
            if _is_digest(child.name) and child.is_file():
                entries += 1
                total += child.stat().st_size
    except OSError as exc:
        raise IOError_(f"Cannot list {root}: {exc}") from exc
    return {"directory": str(root), "exists": True, "entries": entries, "total_bytes": total}


def _is_digest(name: str) -> bool:
    return len(name) == 40 and all(c in "0123456789abcdef" for c in name)
