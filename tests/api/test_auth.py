import pytest
from fastapi import HTTPException
from starlette.requests import Request

from stockpulse.core.auth import get_current_caller
from stockpulse.schemas.ledger import UserRole


def _request(headers):
    return Request({
        "type": "http",
        "headers": [(name.lower().encode(), value.encode()) for name, value in headers.items()],
    })


def test_caller_from_gateway_headers():
    caller = get_current_caller(_request({"X-User-Id": "5", "X-User-Role": "owner"}))

    assert caller.id == 5
    assert caller.role == UserRole.OWNER
    assert caller.is_owner_or_admin


def test_missing_headers_give_anonymous_caller():
    caller = get_current_caller(_request({}))

    assert caller.id is None
    assert caller.role is None
    assert not caller.is_owner_or_admin


@pytest.mark.parametrize("headers", [{"X-User-Id": "abc"}, {"X-User-Role": "MANAGER"}])
def test_malformed_headers_are_rejected(headers):
    with pytest.raises(HTTPException) as exc_info:
        get_current_caller(_request(headers))

    assert exc_info.value.status_code == 400
