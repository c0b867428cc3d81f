"""Text form of a document payload: base64, optionally as a data URL."""

from __future__ import annotations

import base64
import binascii
from typing import Union

from inkpdf.errors import DecodeError

PDF_DATA_URL_PREFIX = "data:application/pdf;base64,"


def decode_payload(payload: Union[str, bytes]) -> bytes:
    """Return the PDF bytes carried by a base64 string or data URL."""
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("ascii")
        except UnicodeDecodeError as exc:
            raise DecodeError("Document payload is not ASCII text") from exc
    text = payload.strip()
    if text.startswith("data:"):
        _, _, text = text.partition(",")
    if not text:
        raise DecodeError("Empty document payload")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Document payload is not valid base64: {exc}") from exc


def encode_payload(data: bytes, data_url: bool = False) -> str:
    text = base64.b64encode(data).decode("ascii")
    return PDF_DATA_URL_PREFIX + text if data_url else text
