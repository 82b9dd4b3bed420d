from datetime import date, datetime, timezone

import pytest

from proofs import (
    NOW,
    ROOT,
    UKR,
    VALID_ADDRESS,
    VALID_EVENT_ID,
    FakeRootVerifier,
    make_proof,
    make_signals,
)
from zkverifier.errors import (
    ConfigurationError,
    InfrastructureError,
    RootRejectedError,
    ShapeError,
    SignalFormatError,
)
from zkverifier.policy.options import (
    UNBOUNDED,
    merge_options,
    with_address,
    with_age_above,
    with_citizenships,
    with_event_id,
    with_identities_count,
    with_identity_creation_time,
    with_root_verifier,
)
from zkverifier.roots import StaticRootVerifier
from zkverifier.signals.codec import encode_date, encode_text
from zkverifier.signals.validator import validate_proof, validate_signals, years_before

T = 1700000000


def _opts(*options):
    return merge_options(None, with_root_verifier(StaticRootVerifier([ROOT])), *options)


def _validate(signals=None, *options, **values):
    return validate_signals(signals or make_signals(**values), _opts(*options), now=NOW)


def test_no_optional_configuration_passes():
    report = validate_proof(make_proof(), _opts(), now=NOW)
    assert report.ok
    assert str(report) == ""


@pytest.mark.parametrize("length", [20, 22, 0])
def test_wrong_length_is_rejected_before_reading_fields(length):
    root = FakeRootVerifier()
    opts = merge_options(None, with_root_verifier(root))
    with pytest.raises(ShapeError) as exc:
        validate_proof(make_proof(signals=["x"] * length), opts, now=NOW)
    assert root.seen == []
    assert "zk_proof/pub_signals" in exc.value.errors


def test_missing_proof_container():
    proof = make_proof()
    proof.proof = None
    with pytest.raises(ShapeError) as exc:
        validate_proof(proof, _opts(), now=NOW)
    assert str(exc.value) == "failed to validate arguments: zk_proof/proof: cannot be blank."


def test_length_message():
    with pytest.raises(ShapeError) as exc:
        validate_proof(make_proof(signals=["1"] * 20), _opts(), now=NOW)
    assert str(exc.value) == (
        "failed to validate arguments: zk_proof/pub_signals: the length must be exactly 21."
    )


def test_required_fields():
    report = _validate(None, nullifier="", selector="40", expiration_date_lower_bound=encode_date(date(2026, 6, 1)))
    assert dict(report) == {
        "pub_signals/expiration_date": "date is too early",
        "pub_signals/nullifier": "cannot be blank",
        "pub_signals/selector": "must be a valid value",
    }
    assert str(report) == (
        "pub_signals/expiration_date: date is too early; "
        "pub_signals/nullifier: cannot be blank; "
        "pub_signals/selector: must be a valid value."
    )


def test_expiration_tomorrow_passes():
    assert _validate(None, expiration_date_lower_bound=encode_date(date(2026, 6, 2))).ok


def test_unreadable_expiration_date():
    report = _validate(None, expiration_date_lower_bound=encode_text("261399"))
    assert report["pub_signals/expiration_date"] == "must be a valid date"


@pytest.mark.parametrize("years", [0, 13, 18, 21, 98])
def test_age_boundary_is_inclusive(years):
    exactly = years_before(NOW, years).date()
    assert _validate(None, with_age_above(years), birth_date_upper_bound=encode_date(exactly)).ok

    younger = years_before(NOW, years - 1).date()
    report = _validate(None, with_age_above(years), birth_date_upper_bound=encode_date(younger))
    assert report["pub_signals/birth_date"] == "date is too late"


def test_age_against_recorded_proof():
    # birth date bound 2002-06-14 is 23 full years before NOW
    assert _validate(None, with_age_above(18)).ok
    assert _validate(None, with_age_above(24))["pub_signals/birth_date"] == "date is too late"


def test_years_before_leap_day():
    leap = datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert years_before(leap, 1).date() == date(2023, 2, 28)


def test_age_beyond_calendar_start():
    assert years_before(NOW, 3000) == datetime.min.replace(tzinfo=timezone.utc)
    assert _validate(None, with_age_above(3000))["pub_signals/birth_date"] == "date is too late"


def test_citizenship_allow_set():
    assert _validate(None, with_citizenships("UKR")).ok
    assert _validate(None, with_citizenships("USA", "UKR")).ok
    report = _validate(None, with_citizenships("USA", "ENG"))
    assert dict(report) == {"pub_signals/citizenship": "must be one of: ENG, USA"}


def test_citizenship_blank_signal():
    report = _validate(None, with_citizenships("UKR"), citizenship="0")
    assert report["pub_signals/citizenship"] == "cannot be blank"


def test_citizenship_unchecked_when_unset():
    assert _validate(None, citizenship=encode_text("RUS")).ok


def test_event_id_exact_match():
    assert _validate(None, with_event_id(VALID_EVENT_ID)).ok
    report = _validate(None, with_event_id(VALID_EVENT_ID + "1"))
    assert dict(report) == {"pub_signals/event_id": "must be a valid value"}
    # numerically equal but not the same string
    assert not _validate(None, with_event_id("0" + VALID_EVENT_ID)).ok


def test_address_binding():
    assert _validate(None, with_address(VALID_ADDRESS)).ok
    report = _validate(None, with_address(bytes(20)))
    assert dict(report) == {"pub_signals/event_data": "must be a valid value"}


def test_failures_are_collected_not_short_circuited():
    report = _validate(
        None,
        with_age_above(98),
        with_citizenships("USA"),
        with_event_id("1"),
        with_address(b"\x01"),
    )
    assert list(report) == [
        "pub_signals/birth_date",
        "pub_signals/citizenship",
        "pub_signals/event_data",
        "pub_signals/event_id",
    ]


def test_count_leg_alone_never_fails_the_pair():
    # the unconfigured timestamp leg counts as passing
    assert _validate(None, with_identities_count(5), identity_counter_upper_bound="10").ok


def test_count_leg_passes_regardless_of_timestamp():
    assert _validate(
        None,
        with_identities_count(5),
        with_identity_creation_time(T),
        identity_counter_upper_bound="3",
        timestamp_upper_bound=str(T + 1000),
    ).ok


def test_timestamp_leg_substitutes_for_count():
    assert _validate(
        None,
        with_identities_count(5),
        with_identity_creation_time(T),
        identity_counter_upper_bound="10",
        timestamp_upper_bound=str(T - 1),
    ).ok


def test_both_legs_failing_report_both():
    report = _validate(
        None,
        with_identities_count(5),
        with_identity_creation_time(T),
        identity_counter_upper_bound="10",
        timestamp_upper_bound=str(T + 1),
    )
    assert dict(report) == {
        "pub_signals/identity_counter_upper_bound": "must be no greater than 5",
        "pub_signals/timestamp_upper_bound": f"must be no greater than {T}",
    }


def test_timestamp_leg_alone_never_fails_the_pair():
    assert _validate(None, with_identity_creation_time(T), timestamp_upper_bound=str(T + 1)).ok


def test_unbounded_count_satisfies_the_pair():
    assert _validate(
        None,
        with_identities_count(UNBOUNDED),
        with_identity_creation_time(T),
        identity_counter_upper_bound="999",
        timestamp_upper_bound=str(T + 1),
    ).ok


def test_zero_count_is_a_real_limit():
    report = _validate(
        None,
        with_identities_count(0),
        with_identity_creation_time(T),
        identity_counter_upper_bound="1",
        timestamp_upper_bound=str(T + 1),
    )
    assert report["pub_signals/identity_counter_upper_bound"] == "must be no greater than 0"


def test_unparseable_bound_is_shape_error():
    with pytest.raises(SignalFormatError):
        _validate(
            None,
            with_identities_count(5),
            with_identity_creation_time(T),
            identity_counter_upper_bound="ten",
        )
    # ignored while unconfigured
    assert _validate(None, identity_counter_upper_bound="ten").ok


def test_non_decimal_citizenship_is_shape_error():
    with pytest.raises(SignalFormatError):
        _validate(None, with_citizenships("UKR"), citizenship="UKR")


def test_rejected_root_is_field_error():
    opts = merge_options(None, with_root_verifier(StaticRootVerifier(["1"])))
    report = validate_signals(make_signals(), opts, now=NOW)
    assert dict(report) == {"pub_signals/id_state_hash": "identity state root is not known"}


def test_root_verifier_receives_state_root():
    root = FakeRootVerifier()
    validate_signals(make_signals(), merge_options(None, with_root_verifier(root)), now=NOW)
    assert root.seen == [ROOT]


def test_infrastructure_failure_propagates_even_when_all_fields_pass():
    root = FakeRootVerifier(InfrastructureError("identity registry unreachable"))
    with pytest.raises(InfrastructureError):
        validate_signals(make_signals(), merge_options(None, with_root_verifier(root)), now=NOW)


def test_infrastructure_failure_is_not_a_root_rejection():
    root = FakeRootVerifier(RootRejectedError("nope"))
    report = validate_signals(make_signals(), merge_options(None, with_root_verifier(root)), now=NOW)
    assert report["pub_signals/id_state_hash"] == "nope"


def test_root_verifier_is_mandatory():
    with pytest.raises(ConfigurationError):
        validate_signals(make_signals(), merge_options(None), now=NOW)


def test_default_vector_citizenship_is_ukr():
    assert make_signals()[6] == UKR
