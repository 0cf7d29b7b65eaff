"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable, Tuple

from flask import Request
from werkzeug.exceptions import BadRequest

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_PAGE = 100_000


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Invalid JSON in request body.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if data.get(key) in (None, "")]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

    return data


def parse_form_or_json(req: Request) -> dict:
    """Return fields from a JSON body or from a (multipart) form."""

    if req.is_json:
        return parse_json_request(req, allow_empty=True)
    return req.form.to_dict()


def _positive_int(raw: str | None, default: int, maximum: int | None = None) -> int:
    try:
        value = int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    if value <= 0 or (maximum is not None and value > maximum):
        return default
    return value


def parse_pagination(req: Request) -> Tuple[int, int]:
    """Return ``(page, limit)`` from the query string with safe defaults."""

    page = _positive_int(req.args.get("page"), 1, MAX_PAGE)
    limit = _positive_int(req.args.get("limit"), DEFAULT_PAGE_SIZE)
    return page, min(limit, MAX_PAGE_SIZE)
