import httpx
import pytest

from live_sessions.core.exceptions import InvalidReference
from live_sessions.services.catalog_client import CatalogClient


def client_answering(status_code, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json={})

    return CatalogClient(
        base_url="http://catalog.test/", api_key="secret", transport=httpx.MockTransport(handler)
    )


def test_existing_reference():
    seen = []
    client = client_answering(200, seen)

    assert client.reference_exists("course", "crs_1") is True
    assert str(seen[0].url) == "http://catalog.test/internal/courses/crs_1"
    assert seen[0].headers["x-api-key"] == "secret"


def test_missing_reference_is_rejected():
    client = client_answering(404)

    assert client.reference_exists("museum", "mus_1") is False
    with pytest.raises(InvalidReference):
        client.validate_references(related_museum_id="mus_1")


@pytest.mark.parametrize("status_code", [401, 500, 503])
def test_unexpected_status_is_accepted(status_code):
    client = client_answering(status_code)
    assert client.reference_exists("course", "crs_1") is True
    client.validate_references(related_course_id="crs_1")


def test_unreachable_catalog_is_accepted():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = CatalogClient(base_url="http://catalog.test", transport=httpx.MockTransport(handler))
    assert client.reference_exists("course", "crs_1") is True


def test_no_references_means_no_calls():
    seen = []
    client = client_answering(404, seen)
    client.validate_references()
    assert seen == []
