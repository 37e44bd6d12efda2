try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import copy

import pytest

from phlink.core.config import get_settings
from phlink.core.errors import InvalidState, MissingConfiguration, MissingParameter
from phlink.services.callback_validation import (
    DecodedState,
    StateRejected,
    decode_state,
    encode_state,
    validate_callback_request,
)


@pytest.fixture()
def settings():
    return copy.deepcopy(get_settings())


def test_decode_state_splits_identity_and_nonce() -> None:
    assert decode_state("12345_abcde") == DecodedState(
        external_user_id="12345", nonce="abcde"
    )


def test_decode_state_keeps_delimiters_inside_the_nonce() -> None:
    decoded = decode_state("42_a_b_c")
    assert isinstance(decoded, DecodedState)
    assert decoded.external_user_id == "42"
    assert decoded.nonce == "a_b_c"


def test_decode_state_accepts_group_chat_ids() -> None:
    decoded = decode_state("-1001234_nonce")
    assert isinstance(decoded, DecodedState)
    assert decoded.external_user_id == "-1001234"


@pytest.mark.parametrize(
    "state",
    ["12345", "_abcde", "abc_def", "12a_x", "42_", "4 2_x", "١٢_x"],
)
def test_decode_state_rejects_malformed_values(state: str) -> None:
    decoded = decode_state(state)
    assert isinstance(decoded, StateRejected)
    assert decoded.reason


def test_encode_state_round_trips_through_decode() -> None:
    state = encode_state("987")
    decoded = decode_state(state)
    assert isinstance(decoded, DecodedState)
    assert decoded.external_user_id == "987"
    assert decoded.nonce


def test_encode_state_refuses_non_numeric_ids() -> None:
    with pytest.raises(InvalidState):
        encode_state("someone")


def test_validate_returns_callback_request(settings) -> None:
    request = validate_callback_request({"code": "abc", "state": "42_x"}, settings)
    assert request.code == "abc"
    assert request.external_user_id == "42"
    assert request.nonce == "x"


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"state": "42_x"}, ("code",)),
        ({"code": "abc"}, ("state",)),
        ({"code": "", "state": "  "}, ("code", "state")),
        ({}, ("code", "state")),
    ],
)
def test_validate_requires_code_and_state(settings, params, expected) -> None:
    with pytest.raises(MissingParameter) as excinfo:
        validate_callback_request(params, settings)
    assert excinfo.value.parameters == expected
    assert excinfo.value.status_code == 400


def test_validate_rejects_state_without_identity(settings) -> None:
    with pytest.raises(InvalidState) as excinfo:
        validate_callback_request({"code": "abc", "state": "nonce-only"}, settings)
    assert excinfo.value.status_code == 400


def test_validate_lists_every_missing_setting(settings) -> None:
    settings.producthunt.client_secret = None
    settings.producthunt.redirect_uri = None
    settings.telegram.bot_token = None

    with pytest.raises(MissingConfiguration) as excinfo:
        validate_callback_request({"code": "abc", "state": "42_x"}, settings)

    assert excinfo.value.missing == [
        "PRODUCTHUNT_CLIENT_SECRET",
        "PRODUCTHUNT_REDIRECT_URI",
        "TELEGRAM_BOT_TOKEN",
    ]
    assert excinfo.value.to_payload() == {
        "error": "Missing environment variables",
        "missing": [
            "PRODUCTHUNT_CLIENT_SECRET",
            "PRODUCTHUNT_REDIRECT_URI",
            "TELEGRAM_BOT_TOKEN",
        ],
    }


def test_validate_requires_dynamodb_table_for_dynamodb_backend(settings) -> None:
    settings.storage.backend = "dynamodb"
    settings.storage.dynamodb_table_name = None

    with pytest.raises(MissingConfiguration) as excinfo:
        validate_callback_request({"code": "abc", "state": "42_x"}, settings)

    assert excinfo.value.missing == ["DYNAMODB_TABLE_NAME"]


def test_missing_parameters_are_reported_before_configuration(settings) -> None:
    settings.producthunt.client_id = None
    with pytest.raises(MissingParameter):
        validate_callback_request({"state": "42_x"}, settings)
