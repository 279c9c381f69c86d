#!/usr/bin/env python3
"""
HTTP Request/Response Unit Tests

Tests the request and response wrappers without a running server.

Tests cover:
- Request creation and property access
- Header handling (case-insensitive)
- Request-target splitting (path vs. query)
- Multipart detection
- Response builder pattern (method chaining)
- JSON, text and binary bodies
"""

import json
import random
import string

import pytest

from docslot.http.request import Request, Method
from docslot.http.response import Response, Status


# =============================================================================
# Test Helpers
# =============================================================================

def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choices(string.ascii_letters + string.digits, k=length))


# =============================================================================
# Request Tests
# =============================================================================

class TestRequestCreation:
    """Tests for Request creation."""

    def test_default_request(self):
        """Test default request values."""
        req = Request()
        assert req.method == Method.GET
        assert req.path == "/"
        assert req.query == ""
        assert req.headers == {}
        assert req.body_bytes == b""

    def test_request_with_lowercase_method(self):
        """Test method is case-insensitive."""
        assert Request(method='post').method == Method.POST

    def test_unknown_method_rejected(self):
        """Test an unsupported method raises ValueError."""
        with pytest.raises(ValueError):
            Request(method='BREW')

    def test_from_target_splits_query(self):
        """Test the query string is split off the path."""
        req = Request.from_target("GET", "/style.css?v=2")
        assert req.path == "/style.css"
        assert req.query == "v=2"

    def test_from_target_without_query(self):
        """Test a plain path has an empty query."""
        req = Request.from_target("GET", "/")
        assert req.path == "/"
        assert req.query == ""


class TestRequestHeaders:
    """Tests for header access."""

    def test_header_lookup_is_case_insensitive(self):
        """Test header names are matched regardless of case."""
        value = random_string()
        req = Request(headers={'X-Custom-Header': value})
        assert req.get_header('x-custom-header') == value
        assert req.get_header('X-CUSTOM-HEADER') == value

    def test_missing_header_is_empty(self):
        """Test a missing header returns an empty string."""
        assert Request().get_header('x-missing') == ''

    def test_content_length(self):
        """Test content length parsing, including bad values."""
        assert Request(headers={'Content-Length': '12'}).get_content_length() == 12
        assert Request(headers={'Content-Length': 'abc'}).get_content_length() == 0
        assert Request().get_content_length() == 0

    def test_is_multipart(self):
        """Test multipart detection requires the prefix."""
        req = Request(headers={'Content-Type': 'multipart/form-data; boundary=XYZ'})
        assert req.is_multipart()
        assert not Request(headers={'Content-Type': 'text/plain'}).is_multipart()
        assert not Request().is_multipart()

    def test_get_headers_returns_copy(self):
        """Test mutating the returned headers leaves the request intact."""
        req = Request(headers={'A': '1'})
        headers = req.get_headers()
        headers['b'] = '2'
        assert 'b' not in req.headers


# =============================================================================
# Response Tests
# =============================================================================

class TestResponse:
    """Tests for the Response builder."""

    def test_default_response(self):
        """Test default response values."""
        res = Response()
        assert res.status_code == Status.OK
        assert res.headers == {}
        assert res.body == b""

    def test_status_from_int(self):
        """Test status accepts integers."""
        assert Response().status(404).status_code == Status.NOT_FOUND

    def test_status_from_enum(self):
        """Test status accepts enum members."""
        res = Response().status(Status.METHOD_NOT_ALLOWED)
        assert res.status_code.value == 405

    def test_method_chaining(self):
        """Test builder methods return the same response."""
        res = Response()
        assert res.status(200).header('X-A', '1').text('ok') is res

    def test_json_body(self):
        """Test JSON body and content type."""
        res = Response().json({"success": True, "message": "done"})
        assert json.loads(res.body) == {"success": True, "message": "done"}
        assert res.headers['content-type'] == 'application/json; charset=UTF-8'

    def test_json_keeps_non_ascii(self):
        """Test non-ASCII text is encoded as UTF-8, not escaped."""
        res = Response().json({"message": "文件"})
        assert "文件".encode('utf-8') in res.body

    def test_text_body(self):
        """Test text body."""
        res = Response().text("404 - File not found")
        assert res.body == b"404 - File not found"
        assert res.headers['content-type'].startswith('text/plain')

    def test_binary_body_is_unchanged(self):
        """Test binary bodies are stored byte for byte."""
        data = bytes(range(256))
        res = Response().binary(data, 'image/png')
        assert res.body == data
        assert res.get_size() == 256
        assert res.headers['content-type'] == 'image/png'

    def test_header_names_lowercased(self):
        """Test header names are normalized."""
        res = Response().header('Access-Control-Allow-Origin', '*')
        assert res.headers == {'access-control-allow-origin': '*'}
