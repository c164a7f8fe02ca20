import httpx
import pytest

from voe.api.exceptions import ErrorKind, VoeError
from voe.core.error_handler import ErrorClassifier
from tests.conftest import make_connect_error, make_status_error


@pytest.fixture
def classifier():
    return ErrorClassifier()


def test_401_is_authentication(classifier):
    err = classifier.classify(make_status_error(401))
    assert err.kind is ErrorKind.AUTHENTICATION
    assert err.status == 401
    assert err.message == "Unauthorized request"
    assert err.retryable is False


def test_429_is_retryable_server_rate_limit(classifier):
    err = classifier.classify(make_status_error(429))
    assert err.kind is ErrorKind.RATE_LIMIT
    assert err.local is False
    assert err.retryable is True


@pytest.mark.parametrize("status", [500, 502, 503, 504])
def test_5xx_is_server(classifier, status):
    err = classifier.classify(make_status_error(status, {"msg": "down"}))
    assert err.kind is ErrorKind.SERVER
    assert err.status == status
    assert err.data == {"msg": "down"}
    assert err.retryable is True


def test_other_status_is_response_with_body(classifier):
    err = classifier.classify(make_status_error(418, {"msg": "teapot"}))
    assert err.kind is ErrorKind.RESPONSE
    assert err.status == 418
    assert err.data == {"msg": "teapot"}
    assert err.message == "Request failed with status code 418"


def test_non_json_error_body_is_kept_as_text(classifier):
    err = classifier.classify(make_status_error(400, "bad request"))
    assert err.kind is ErrorKind.RESPONSE
    assert err.data == "bad request"


def test_no_response_is_network(classifier):
    err = classifier.classify(make_connect_error())
    assert err.kind is ErrorKind.NETWORK
    assert err.status is None
    assert err.message == "Network error occurred"


def test_timeout_is_network(classifier):
    timeout = httpx.ReadTimeout("timed out", request=httpx.Request("GET", "https://voe.sx/api/file/list"))
    assert classifier.classify(timeout).kind is ErrorKind.NETWORK


def test_voe_error_passes_through(classifier):
    err = VoeError(ErrorKind.NOT_FOUND, "File not found", status=404)
    assert classifier.classify(err) is err


def test_unknown_exception_is_response(classifier):
    err = classifier.classify(RuntimeError("weird"))
    assert err.kind is ErrorKind.RESPONSE
    assert "weird" in err.data


def test_error_to_dict_is_serializable():
    err = VoeError(ErrorKind.SERVER, "Server error occurred", status=500, data={"x": 1})
    assert err.to_dict() == {
        "kind": "server",
        "code": "SERVER_ERROR",
        "message": "Server error occurred",
        "status": 500,
        "data": {"x": 1},
        "local": False,
    }
    assert str(err) == "Server error occurred"
