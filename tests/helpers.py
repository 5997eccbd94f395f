"""Small builders shared by the test modules."""

from __future__ import annotations

import requests


def html(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">link</a>' for h in hrefs)
    return f"<!DOCTYPE html><html><head><title>t</title></head><body>{anchors}</body></html>"


def make_response(url: str, status: int = 200, body: bytes = b"") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.headers["Content-Type"] = "text/html; charset=utf-8"
    resp._content = body
    resp._content_consumed = True
    return resp
