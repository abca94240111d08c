import asyncio

import pytest

from conftest import FakeResolver
from errors import InvalidURL, LookupFailure
from validator import HostnameValidator, extract_hostname


@pytest.mark.parametrize(
    "raw_url, hostname",
    [
        ("https://www.example.com/page", "www.example.com"),
        ("http://example.com", "example.com"),
        ("HTTPS://Example.com/a/b?c=d", "Example.com"),
        ("example.com/path", "example.com"),
        ("ftp://example.com/file", "ftp:"),
        ("https://", ""),
        ("", ""),
    ],
)
def test_extract_hostname(raw_url, hostname):
    assert extract_hostname(raw_url) == hostname


@pytest.mark.asyncio
async def test_validate_returns_hostname(validator):
    assert await validator.validate("https://www.example.com/page") == "www.example.com"


@pytest.mark.asyncio
async def test_unknown_host_is_invalid(validator):
    with pytest.raises(InvalidURL) as excinfo:
        await validator.validate("https://not-a-real-host.invalid")
    assert excinfo.value.hostname == "not-a-real-host.invalid"
    assert isinstance(excinfo.value.cause, LookupFailure)
    assert excinfo.value.cause.kind == "lookup_failure"


@pytest.mark.asyncio
async def test_empty_address_list_is_invalid():
    validator = HostnameValidator(resolver=FakeResolver({"empty.example": []}))
    with pytest.raises(InvalidURL) as excinfo:
        await validator.validate("http://empty.example")
    assert excinfo.value.cause is None


@pytest.mark.asyncio
async def test_empty_hostname_skips_lookup(validator, resolver):
    with pytest.raises(InvalidURL):
        await validator.validate("https:///page")
    assert resolver.calls == []


@pytest.mark.asyncio
async def test_slow_lookup_times_out():
    async def slow_resolver(hostname):
        await asyncio.sleep(5)
        return ["127.0.0.1"]

    validator = HostnameValidator(resolver=slow_resolver, timeout=0.01)
    with pytest.raises(InvalidURL) as excinfo:
        await validator.validate("https://slow.example")
    assert "timed out" in excinfo.value.cause.reason


@pytest.mark.asyncio
async def test_default_resolver_handles_localhost():
    validator = HostnameValidator()
    assert await validator.validate("http://localhost/status") == "localhost"
