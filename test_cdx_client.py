#!/usr/bin/env python3
"""
CDX client tests.

The HTTP session is replaced with a mock returning canned responses, so
these run without network access.
"""

import os
import sys
import tempfile
from pathlib import Path
from unittest import mock

import requests

# Make the package importable when run as a script
sys.path.insert(0, str(Path(__file__).parent))

from waybackurls.core.cdx_client import CDXClient
from waybackurls.core.errors import FatalNetworkError
from waybackurls.core.models import FallbackResponse, ResponseFormat, StructuredResponse
from waybackurls.core.response_parser import parse_response


def make_response(body: str, status: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body.encode("utf-8")
    response._content_consumed = True
    response.encoding = "utf-8"
    response.url = CDXClient.CDX_BASE_URL
    return response


def make_client(*responses) -> CDXClient:
    session = mock.Mock()
    session.headers = {}
    session.get.side_effect = list(responses)
    return CDXClient(session=session)


def test_query_params():
    client = CDXClient(session=mock.Mock(headers={}))
    params = client.build_params("example.com", "json")
    assert params == {
        "url": "example.com",
        "output": "json",
        "fl": "original,timestamp",
        "collapse": "urlkey",
        "matchType": "prefix",
    }
    assert client.session.headers["User-Agent"] == CDXClient.USER_AGENT


def test_structured_response_drops_header():
    body = '[["original","timestamp"],["https://example.com/b","20230115120000"]]'
    client = make_client(make_response(body))

    response = client.query_domain("example.com")

    assert isinstance(response, StructuredResponse)
    assert response.format is ResponseFormat.STRUCTURED
    assert response.rows == [["https://example.com/b", "20230115120000"]]
    assert client.session.get.call_count == 1
    _, kwargs = client.session.get.call_args
    assert kwargs["params"]["output"] == "json"
    assert kwargs["timeout"] is None


def test_header_only_response_is_empty():
    client = make_client(make_response('[["original","timestamp"]]'))
    response = client.query_domain("example.com")
    assert isinstance(response, StructuredResponse)
    assert response.rows == []


def test_invalid_json_falls_back_to_spooled_csv():
    csv_body = "original,timestamp\nhttps://example.com/a,20231201150000\nhttps://example.com/b,20230115000000"
    client = make_client(make_response("<html>busy</html>"), make_response(csv_body))

    with tempfile.TemporaryDirectory() as tmp:
        spool = os.path.join(tmp, "example.com_raw_urls.txt")
        response = client.query_domain("example.com", spool_path=spool)

        assert isinstance(response, FallbackResponse)
        assert response.format is ResponseFormat.FALLBACK
        assert response.path == spool
        assert Path(spool).read_text(encoding="utf-8") == (
            "https://example.com/a,20231201150000\n"
            "https://example.com/b,20230115000000\n"
        )
        _, kwargs = client.session.get.call_args
        assert kwargs["params"]["output"] == "csv"
        assert kwargs["stream"] is True

        records = list(parse_response(response))
        assert [r.url for r in records] == ["https://example.com/a", "https://example.com/b"]
        assert not os.path.exists(spool)


def test_non_array_json_falls_back_to_streamed_lines():
    csv_body = "original,timestamp\nhttps://example.com/a,20231201150000\n"
    client = make_client(make_response('{"error": "nope"}'), make_response(csv_body))

    response = client.query_domain("example.com", spool_path=None)

    assert isinstance(response, FallbackResponse)
    assert response.path is None
    records = list(parse_response(response))
    assert [(r.url, r.raw_timestamp) for r in records] == [("https://example.com/a", "20231201150000")]


def test_http_error_is_fatal():
    client = make_client(make_response("unavailable", status=503))
    try:
        client.query_domain("example.com")
    except FatalNetworkError as e:
        assert "503" in str(e)
    else:
        raise AssertionError("expected FatalNetworkError")


def test_connection_error_is_fatal():
    session = mock.Mock(headers={})
    session.get.side_effect = requests.ConnectionError("connection refused")
    client = CDXClient(session=session)
    try:
        client.query_domain("example.com")
    except FatalNetworkError as e:
        assert isinstance(e.__cause__, requests.ConnectionError)
    else:
        raise AssertionError("expected FatalNetworkError")


def test_fallback_request_failure_is_fatal():
    session = mock.Mock(headers={})
    session.get.side_effect = [make_response("not json"), requests.Timeout("timed out")]
    client = CDXClient(session=session)
    try:
        client.query_domain("example.com", spool_path=None)
    except FatalNetworkError:
        pass
    else:
        raise AssertionError("expected FatalNetworkError")


def broken_stream(error: Exception):
    """A CSV response whose body fails after the header and one row."""
    def iter_lines(decode_unicode=False):
        yield "original,timestamp"
        yield "https://example.com/a,20231201150000"
        raise error

    response = make_response("")
    response.iter_lines = iter_lines
    return response


def test_interrupted_spool_removes_side_file():
    error = requests.exceptions.ChunkedEncodingError("connection broken")
    client = make_client(make_response("not json"), broken_stream(error))

    with tempfile.TemporaryDirectory() as tmp:
        spool = os.path.join(tmp, "example.com_raw_urls.txt")
        try:
            client.query_domain("example.com", spool_path=spool)
        except FatalNetworkError as e:
            assert e.__cause__ is error
        else:
            raise AssertionError("expected FatalNetworkError")
        assert not os.path.exists(spool)


def test_spool_write_error_removes_side_file():
    client = make_client(make_response("not json"), broken_stream(OSError("No space left on device")))

    with tempfile.TemporaryDirectory() as tmp:
        spool = os.path.join(tmp, "example.com_raw_urls.txt")
        try:
            client.query_domain("example.com", spool_path=spool)
        except FatalNetworkError:
            raise AssertionError("a local write error is not a network failure")
        except OSError as e:
            assert "No space left" in str(e)
        else:
            raise AssertionError("expected OSError")
        assert not os.path.exists(spool)


if __name__ == "__main__":
    tests = [obj for name, obj in sorted(globals().items()) if name.startswith("test_") and callable(obj)]
    for test in tests:
        test()
        print(f"✓ {test.__name__}")
    print(f"✓ {len(tests)} CDX client tests passed")
