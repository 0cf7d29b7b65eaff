"""Local filesystem storage implementation."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import IO, Iterable

from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest
from werkzeug.utils import secure_filename

from config import Config

from .abstract_storage import AbstractStorage

ALLOWED_EXTENSIONS_DEFAULT = {"jpg", "jpeg", "png", "gif", "webp"}
MAX_UPLOAD_SIZE_DEFAULT = 5 * 1024 * 1024  # 5 MB


def allowed_extensions(configured: str | Iterable[str] | None) -> set[str]:
    """Normalize a configured list of extensions or MIME types."""

    if not configured:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if isinstance(configured, str):
        values: Iterable[str] = configured.split(",")
    else:
        values = configured

    normalized: set[str] = set()
    for raw in values:
        if not isinstance(raw, str):
            continue
        item = raw.strip().lower()
        if "/" in item and not item.startswith("."):
            item = item.rsplit("/", 1)[-1]
        item = item.lstrip(".")
        if item:
            normalized.add(item)

    if not normalized:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if "jpeg" in normalized:
        normalized.add("jpg")
    if "jpg" in normalized:
        normalized.add("jpeg")
    return normalized


class LocalStorage(AbstractStorage):
    """Persist files to the local filesystem under the configured upload directory."""

    def __init__(
        self,
        upload_dir: str | None = None,
        *,
        base_url: str = "",
        allowed_types: str | Iterable[str] | None = None,
        max_size: int = MAX_UPLOAD_SIZE_DEFAULT,
    ):
        self.base_directory = Path(upload_dir or Config.UPLOAD_DIR)
        self.base_url = (base_url or "").rstrip("/")
        self.allowed = allowed_extensions(allowed_types)
        self.max_size = max_size
        os.makedirs(self.base_directory, exist_ok=True)

    def validate_image(self, file: FileStorage) -> None:
        """Reject missing files, unknown extensions and oversized uploads."""

        if file.filename is None or file.filename.strip() == "":
            raise BadRequest("An image file is required.")

        extension = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
        if extension not in self.allowed:
            allowed = ", ".join(sorted(self.allowed))
            raise BadRequest(f"File type not allowed. Allowed types: {allowed}.")

        file.stream.seek(0, os.SEEK_END)
        size = file.stream.tell()
        file.stream.seek(0)
        if size > self.max_size:
            raise BadRequest("File too large")

    def save_image(self, file: FileStorage) -> str:
        """Validate and store an uploaded image, returning its public URL."""

        self.validate_image(file)
        suffix = Path(file.filename).suffix.lower()
        stored_path = self.save(file, f"{uuid.uuid4().hex}{suffix}")
        return self.url(stored_path)

    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Save a file and return the relative path within the upload directory."""

        safe_name = secure_filename(filename)
        if not safe_name:
            raise ValueError("Filename must contain at least one valid character.")

        destination = self.base_directory / safe_name
        if hasattr(file_obj, "save"):
            file_obj.save(destination)  # type: ignore[arg-type]
        else:
            with open(destination, "wb") as output:
                output.write(file_obj.read())

        return str(destination.relative_to(self.base_directory))

    def exists(self, path: str) -> bool:
        """Return True if the given relative path exists within the upload directory."""

        return (self.base_directory / path).exists()

    def url(self, path: str) -> str:
        return f"{self.base_url}/uploads/{path}"
