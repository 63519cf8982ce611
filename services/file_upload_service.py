import os
import time
from typing import BinaryIO, Dict, List, Optional, Tuple

from starlette.datastructures import FormData, UploadFile

from logger import get_logger
from models.common_models import UploadedFile, UploadResult

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


class FileTooLargeError(Exception):
    def __init__(self, field_name: str, limit: int):
        super().__init__("File too large")
        self.field_name = field_name
        self.limit = limit


class UnexpectedFieldError(Exception):
    def __init__(self, field_name: str):
        super().__init__("Unexpected field")
        self.field_name = field_name


def now_ms() -> int:
    return int(time.time() * 1000)


def build_stored_name(original_name: str, timestamp_ms: Optional[int] = None) -> str:
    """
    <original basename><ingestion timestamp in ms><original extension>,
    e.g. "cat.png" ingested at 1700000000123 -> "cat1700000000123.png".
    """
    if timestamp_ms is None:
        timestamp_ms = now_ms()
    # Clients may send a full path as the file name
    base_name = os.path.basename(original_name.replace("\\", "/"))
    stem, ext = os.path.splitext(base_name)
    return f"{stem}{timestamp_ms}{ext}"


def _create_unique(upload_dir: str, original_name: str) -> Tuple[BinaryIO, str, str]:
    """
    Exclusively create the stored file. A name already taken in the same
    millisecond moves on to the next millisecond, so nothing is overwritten.
    """
    timestamp_ms = now_ms()
    while True:
        stored_name = build_stored_name(original_name, timestamp_ms)
        file_path = os.path.join(upload_dir, stored_name)
        try:
            return open(file_path, "xb"), stored_name, file_path
        except FileExistsError:
            timestamp_ms += 1


def save_uploaded_file(file: UploadFile, field_name: str, upload_dir: str, max_bytes: int) -> UploadedFile:
    """
    Copy an uploaded file into upload_dir under a generated name.
    Files larger than max_bytes are rejected and the partial copy removed.
    """
    os.makedirs(upload_dir, exist_ok=True)
    original_name = file.filename or ""
    f, stored_name, file_path = _create_unique(upload_dir, original_name)

    size = 0
    file.file.seek(0)
    try:
        with f:
            while True:
                chunk = file.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise FileTooLargeError(field_name, max_bytes)
                f.write(chunk)
    except Exception:
        if os.path.exists(file_path):
            os.remove(file_path)
        raise

    logger.info("file_stored", field_name=field_name, original_name=original_name, stored_name=stored_name, size=size)
    return UploadedFile(
        field_name=field_name,
        original_name=original_name,
        stored_name=stored_name,
        destination=upload_dir,
        path=file_path,
        content_type=file.content_type,
        size=size,
    )


def store_multipart(
    form: FormData,
    accept: Dict[str, Optional[int]],
    upload_dir: str,
    max_bytes: int,
) -> UploadResult:
    """
    Store the files of a decoded multipart form and collect its text fields.

    accept maps each field allowed to carry files to its maximum file count
    (None = unlimited). A file under any other field, or one too many, fails
    the whole upload with "Unexpected field"; files already written for the
    request are removed on any failure.
    """
    fields: Dict[str, object] = {}
    pending: List[tuple] = []
    counts: Dict[str, int] = {}

    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key not in accept:
                raise UnexpectedFieldError(key)
            counts[key] = counts.get(key, 0) + 1
            max_count = accept[key]
            if max_count is not None and counts[key] > max_count:
                raise UnexpectedFieldError(key)
            pending.append((key, value))
        elif key in fields:
            existing = fields[key]
            fields[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            fields[key] = value

    stored: List[UploadedFile] = []
    try:
        for key, upload in pending:
            stored.append(save_uploaded_file(upload, key, upload_dir, max_bytes))
    except Exception:
        for item in stored:
            if os.path.exists(item.path):
                os.remove(item.path)
        raise

    return UploadResult(files=stored, fields=fields)
