"""Tests for the local filesystem upload storage."""

from __future__ import annotations

from io import BytesIO

import pytest
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from storage import LocalStorage
from storage.local_storage import allowed_extensions


def _upload(data: bytes, filename: str) -> FileStorage:
    return FileStorage(stream=BytesIO(data), filename=filename)


def test_allowed_extensions_normalizes_types():
    assert allowed_extensions("image/PNG, .gif") == {"png", "gif"}
    assert allowed_extensions(["jpeg"]) == {"jpeg", "jpg"}
    assert allowed_extensions("") == {"jpg", "jpeg", "png", "gif", "webp"}


def test_save_image_round_trip(tmp_path):
    storage = LocalStorage(str(tmp_path), base_url="https://cdn.example/")

    url = storage.save_image(_upload(b"png-bytes", "cover.PNG"))

    assert url.startswith("https://cdn.example/uploads/")
    stored = url.rsplit("/", 1)[-1]
    assert stored.endswith(".png")
    assert storage.exists(stored)
    assert (tmp_path / stored).read_bytes() == b"png-bytes"


@pytest.mark.parametrize(
    "filename, data, detail",
    [
        ("", b"x", "An image file is required."),
        ("notes.txt", b"x", "File type not allowed"),
        ("big.png", b"x" * 11, "File too large"),
    ],
)
def test_validate_image_rejections(tmp_path, filename, data, detail):
    storage = LocalStorage(str(tmp_path), max_size=10)

    with pytest.raises(BadRequest) as excinfo:
        storage.validate_image(_upload(data, filename))

    assert detail in excinfo.value.description
    assert list(tmp_path.iterdir()) == []
