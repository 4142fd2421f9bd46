# Tests for the Trakt API client.
# * Setting and reading back the API key.
# * Refusing to call the API without a key.
# * Building /foo/bar.json style targets from dotted method names.
# * Decoding single objects and arrays of objects.
# * Mapping 401 / 404 / 503 / anything else onto typed errors.

from __future__ import annotations

import io
import json
from unittest import mock

import pytest
import requests

from api_client import TraktClient, Transport
from conftest import API_KEY, TARGET
from exceptions import (
    AuthorizationError,
    AvailabilityError,
    MissingApiKeyError,
    ResponseError,
    TraktError,
    UnknownMethodError,
    UnparsableResponseError,
    UnrecognizedStatusError,
)
from logger import setup_logging
from settings import Settings


@pytest.mark.parametrize("key", ["foobar", "", "  spaced  ", "k3y/with?special&chars="])
def test_setting_api_key(settings, key):
    client = TraktClient(settings=settings)
    client.set_api_key(key)

    assert client.get_api_key() == key
    assert client.api_key == key


def test_api_key_is_unset_by_default(settings):
    assert TraktClient(settings=settings).get_api_key() == ""


def test_missing_api_key_makes_no_request(settings, req_mock):
    req_mock.get(TARGET, json={"foo": "bar"})
    client = TraktClient(settings=settings)

    with pytest.raises(MissingApiKeyError, match="The request API key is unset."):
        client.get("foo.bar")

    assert not req_mock.called


def test_clearing_api_key_blocks_requests(trakt, req_mock):
    req_mock.get(TARGET, json={"foo": "bar"})
    trakt.set_api_key("")

    with pytest.raises(MissingApiKeyError):
        trakt.get("foo.bar")
    assert req_mock.call_count == 0


def test_request_target_and_headers(trakt, req_mock):
    req_mock.get(TARGET, json={"foo": "bar"})

    trakt.get("foo.bar")

    request = req_mock.last_request
    assert request.method == "GET"
    assert request.url == TARGET
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["trakt-api-version"] == "2"
    assert request.headers["trakt-api-key"] == API_KEY
    assert request.body is None


@pytest.mark.parametrize(
    "method, url",
    [
        ("foo.bar", "http://api.trakt.tv/foo/bar.json"),
        ("movies.popular.extended", "http://api.trakt.tv/movies/popular/extended.json"),
        ("calendars", "http://api.trakt.tv/calendars.json"),
    ],
)
def test_dots_become_path_segments(trakt, method, url):
    assert trakt._build_url(method) == url


def test_params_are_not_sent(trakt, req_mock):
    req_mock.get(TARGET, json={"foo": "bar"})

    trakt.get("foo.bar", {"page": 2, "limit": 10})

    assert req_mock.last_request.qs == {}
    assert req_mock.last_request.url == TARGET


def test_get_request_for_single_object(trakt, req_mock):
    req_mock.get(TARGET, json={"foo": "bar"})

    decoded = trakt.get("foo.bar")

    assert decoded["foo"] == "bar"


def test_get_request_for_array_of_objects(trakt, req_mock):
    req_mock.get(TARGET, json=[{"foo": "bar"}, {"foo": "baz"}])

    decoded = trakt.get("foo.bar")

    assert isinstance(decoded, list)
    assert [item["foo"] for item in decoded] == ["bar", "baz"]


def test_repeated_calls_decode_identically(trakt, req_mock):
    req_mock.get(TARGET, json={"foo": "bar", "ids": {"trakt": 1}})

    assert trakt.get("foo.bar") == trakt.get("foo.bar")
    assert req_mock.call_count == 2


def test_unparsable_success_body(trakt, req_mock):
    req_mock.get(TARGET, text="<html>oops</html>")

    with pytest.raises(UnparsableResponseError) as excinfo:
        trakt.get("foo.bar")

    assert str(excinfo.value) == "Unable to parse response: <html>oops</html>"
    assert excinfo.value.status_code == 200
    assert excinfo.value.body == "<html>oops</html>"


def test_exception_on_authorization_error(trakt, req_mock):
    req_mock.get(
        TARGET, status_code=401, json={"status": "failure", "error": "authorization mock"}
    )

    with pytest.raises(AuthorizationError) as excinfo:
        trakt.get("foo.bar")

    assert str(excinfo.value) == "authorization mock"
    assert excinfo.value.status_code == 401


def test_exception_on_availability_error(trakt, req_mock):
    req_mock.get(TARGET, status_code=503, json={"status": "failure", "error": "downtime mock"})

    with pytest.raises(AvailabilityError, match="downtime mock"):
        trakt.get("foo.bar")


def test_exception_on_bad_method_call(trakt, req_mock):
    req_mock.get(TARGET, status_code=404, json={"error": "bar"})

    with pytest.raises(UnknownMethodError, match="bar"):
        trakt.get("foo.bar")


@pytest.mark.parametrize("status_code", [404, 900])
def test_unparsable_error_body_wins_over_status(trakt, req_mock, status_code):
    req_mock.get(TARGET, status_code=status_code, text="mock body")

    with pytest.raises(UnparsableResponseError) as excinfo:
        trakt.get("foo.bar")

    assert excinfo.value.status_code == status_code
    assert excinfo.value.body == "mock body"


def test_exception_on_unknown_status(trakt, req_mock):
    req_mock.get(TARGET, status_code=418, text='{"error": "teapot"}')

    with pytest.raises(UnrecognizedStatusError) as excinfo:
        trakt.get("foo.bar")

    assert str(excinfo.value) == 'Unrecognized status code (418): {"error": "teapot"}'


def test_error_body_without_error_field(trakt, req_mock):
    req_mock.get(TARGET, status_code=401, text='{"status": "failure"}')

    with pytest.raises(AuthorizationError, match="failure"):
        trakt.get("foo.bar")


def test_errors_share_a_base_class(trakt, req_mock):
    req_mock.get(TARGET, status_code=503, json={"error": "down"})

    with pytest.raises(ResponseError):
        trakt.get("foo.bar")
    assert issubclass(MissingApiKeyError, TraktError)
    assert issubclass(ResponseError, TraktError)


def test_transport_faults_propagate(trakt, req_mock):
    req_mock.get(TARGET, exc=requests.exceptions.ConnectTimeout)

    with pytest.raises(requests.exceptions.ConnectTimeout):
        trakt.get("foo.bar")


def test_custom_endpoint(req_mock):
    settings = Settings(_env_file=None, trakt_api_endpoint="http://localhost:8080/")
    req_mock.get("http://localhost:8080/foo/bar.json", json={"foo": "local"})

    with TraktClient(settings=settings) as client:
        client.set_api_key(API_KEY)
        assert client.get("foo.bar") == {"foo": "local"}


def test_injected_transport_is_used_and_left_open(settings):
    response = mock.Mock(status_code=200, text='{"foo": "bar"}')
    response.json.return_value = {"foo": "bar"}
    transport = mock.Mock(spec=requests.Session)
    transport.get.return_value = response

    client = TraktClient(transport, settings=settings)
    client.set_api_key(API_KEY)

    assert client.get("foo.bar") == {"foo": "bar"}
    transport.get.assert_called_once_with(
        TARGET,
        headers={
            "Content-Type": "application/json",
            "trakt-api-version": "2",
            "trakt-api-key": API_KEY,
        },
    )

    client.close()
    transport.close.assert_not_called()


def test_owned_session_is_closed(settings):
    with mock.patch.object(requests.Session, "close") as close:
        with TraktClient(settings=settings) as client:
            assert isinstance(client.client, requests.Session)
        close.assert_called_once()


def test_requests_module_is_a_transport(settings):
    assert isinstance(requests, Transport)
    assert isinstance(requests.Session(), Transport)
    TraktClient(requests, settings=settings)


def test_rejects_object_without_get(settings):
    with pytest.raises(TypeError):
        TraktClient(object(), settings=settings)


def test_client_is_silent_without_logging_setup(trakt, req_mock, capsys):
    req_mock.get(TARGET, json={"foo": "bar"})
    req_mock.get("http://api.trakt.tv/down.json", status_code=503, json={"error": "down"})

    trakt.get("foo.bar", {"page": 1})
    with pytest.raises(AvailabilityError):
        trakt.get("down")

    out, err = capsys.readouterr()
    assert out == ""
    assert err == ""


def test_setup_logging_writes_json_events(trakt, req_mock):
    stream = io.StringIO()
    setup_logging(level="DEBUG", fmt="json", stream=stream)
    req_mock.get(TARGET, json={"foo": "bar"})

    trakt.get("foo.bar")

    events = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert [e["event"] for e in events] == ["trakt_request", "trakt_response"]
    assert events[0]["url"] == TARGET
    assert events[1]["status_code"] == 200
    assert API_KEY not in stream.getvalue()


def test_setup_logging_respects_level(trakt, req_mock):
    stream = io.StringIO()
    setup_logging(level="WARNING", fmt="console", stream=stream)
    setup_logging(level="WARNING", fmt="console", stream=stream)
    req_mock.get(TARGET, status_code=401, json={"error": "nope"})

    with pytest.raises(AuthorizationError):
        trakt.get("foo.bar")

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert "trakt_error" in lines[0]
    assert "AuthorizationError" in lines[0]


def test_api_version_header_ignores_environment(req_mock, monkeypatch):
    monkeypatch.setenv("TRAKT_API_VERSION", "3")
    req_mock.get(TARGET, json={"foo": "bar"})

    with TraktClient(settings=Settings(_env_file=None)) as client:
        client.set_api_key(API_KEY)
        client.get("foo.bar")

    assert req_mock.last_request.headers["trakt-api-version"] == "2"


def test_settings_do_not_read_dotenv_by_default(tmp_path, monkeypatch):
    monkeypatch.delenv("TRAKT_API_ENDPOINT", raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("TRAKT_API_ENDPOINT=http://example.invalid\n")

    assert Settings().base_url == "http://api.trakt.tv"
    assert Settings(_env_file=".env").base_url == "http://example.invalid"


def test_endpoint_from_environment(monkeypatch):
    monkeypatch.setenv("TRAKT_API_ENDPOINT", "http://localhost:9000/")

    assert Settings().base_url == "http://localhost:9000"
