"""Load CAD JSON documents, gzip-compressed or not."""

from __future__ import annotations

import gzip
import json
import logging
import os
import zlib
from pathlib import Path
from typing import Any, Union

from dxfmesh.document import CadDocument, parse_document
from dxfmesh.errors import DocumentError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b'\x1f\x8b'

Source = Union[str, os.PathLike, bytes, bytearray]


def is_gzip(data: bytes) -> bool:
    return len(data) >= 2 and data[:2] == GZIP_MAGIC


def decode_json_bytes(data: bytes) -> Any:
    """Decode raw bytes into JSON, decompressing first when gzip magic is present.

    Servers may advertise gzip and have the client decompress already, so
    plain JSON bytes are accepted as well.
    """

    if is_gzip(data):
        logger.debug('gzip payload detected (%d bytes)', len(data))
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise DocumentError(f'corrupt gzip payload: {exc}') from exc
    try:
        return json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DocumentError(f'invalid CAD JSON: {exc}') from exc


def read_bytes(source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    path = Path(source)
    with path.open('rb') as fh:
        return fh.read()


def load_document(source: Source, *, strict: bool = False) -> CadDocument:
    """Read ``source`` (a path or raw bytes) into a :class:`CadDocument`.

    ``.dxf`` paths are handed to :func:`dxfmesh.io.dxf.read_dxf`; anything
    else is treated as (optionally gzip-compressed) JSON.
    """

    if not isinstance(source, (bytes, bytearray)) and Path(source).suffix.lower() == '.dxf':
        from dxfmesh.io.dxf import read_dxf  # local import, ezdxf is heavy
        return read_dxf(source, strict=strict)

    data = decode_json_bytes(read_bytes(source))
    return parse_document(data, strict=strict)


__all__ = ['GZIP_MAGIC', 'is_gzip', 'decode_json_bytes', 'read_bytes', 'load_document']
