"""
Multipart body for the kintone file endpoint.
"""
import logging
from dataclasses import dataclass
from typing import Union

from urllib3 import encode_multipart_formdata

from .constants import FILE_FIELD_NAME

logger = logging.getLogger("kintone_transport.multipart")


@dataclass(frozen=True)
class MultipartBody:
    """Encoded multipart payload and the Content-Type carrying its boundary."""

    content: bytes
    content_type: str


def encode_file_body(
    file_name: str,
    file_content: Union[bytes, str],
    field_name: str = FILE_FIELD_NAME,
) -> MultipartBody:
    """Encode a single file part under ``field_name`` with ``file_name`` as filename."""
    if isinstance(file_content, str):
        file_content = file_content.encode("utf-8")

    content, content_type = encode_multipart_formdata(
        {field_name: (file_name, file_content)}
    )
    logger.debug(
        f"encode_file_body: file_name={file_name!r}, size={len(file_content)}, "
        f"content_type={content_type!r}"
    )
    return MultipartBody(content=content, content_type=content_type)
