"""Error Hierarchy — response envelopes and status codes."""

from marketplace.core.errors import (
    AlreadySoldError,
    DatabaseError,
    ErrorContext,
    InputValidationError,
    InsufficientBalanceError,
    InvalidTransitionError,
    PriceMismatchError,
    ResourceNotFoundError,
    UpstreamUnavailableError,
)


def test_domain_errors_map_to_expected_status():
    assert InputValidationError("bad").http_status == 400
    assert ResourceNotFoundError("Item", "9").http_status == 404
    assert PriceMismatchError("39", "40").http_status == 400
    assert InsufficientBalanceError().http_status == 400
    assert AlreadySoldError("1").http_status == 409
    assert InvalidTransitionError("nope").http_status == 409
    assert UpstreamUnavailableError("down", "timeout").http_status == 503
    assert DatabaseError("boom", "commit").http_status == 503


def test_to_response_error_is_a_string():
    body = ResourceNotFoundError("Item", "9").to_response()
    assert body == {"error": "Item not found", "code": "RESOURCE_NOT_FOUND"}


def test_upstream_response_hides_details():
    err = UpstreamUnavailableError("connect to 10.0.0.1 refused", "connection_error")
    assert "10.0.0.1" in err.message
    assert "10.0.0.1" not in err.to_response()["error"]


def test_database_response_hides_details():
    err = DatabaseError("duplicate key", "commit")
    assert "duplicate" not in err.to_response()["error"]


def test_log_extra_carries_context():
    ctx = ErrorContext(item_id="2", address="0xbuyer", transaction_hash="0xtx")
    extra = AlreadySoldError("2", ctx).log_extra()
    assert extra == {
        "error_code": "ALREADY_SOLD",
        "item_id": "2",
        "address": "0xbuyer",
        "transaction_hash": "0xtx",
    }
