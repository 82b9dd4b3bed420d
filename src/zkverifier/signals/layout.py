"""Positions of the passport circuit's public signals.

The circuit emits exactly :data:`PUB_SIGNALS_LENGTH` values. Indices not
listed in :class:`PubSignal` are reserved and only count toward the length.
"""
from __future__ import annotations

from enum import IntEnum

PUB_SIGNALS_LENGTH = 21
PROOF_SELECTOR_VALUE = "39"


class PubSignal(IntEnum):
    NULLIFIER = 0
    CITIZENSHIP = 6
    EVENT_ID = 9
    EVENT_DATA = 10
    ID_STATE_HASH = 11
    SELECTOR = 12
    TIMESTAMP_UPPER_BOUND = 14
    IDENTITY_COUNTER_UPPER_BOUND = 16
    BIRTH_DATE_UPPER_BOUND = 18
    EXPIRATION_DATE_LOWER_BOUND = 19

    @property
    def path(self) -> str:
        return f"pub_signals/{FIELD_NAMES[self]}"


FIELD_NAMES: dict[PubSignal, str] = {
    PubSignal.NULLIFIER: "nullifier",
    PubSignal.CITIZENSHIP: "citizenship",
    PubSignal.EVENT_ID: "event_id",
    PubSignal.EVENT_DATA: "event_data",
    PubSignal.ID_STATE_HASH: "id_state_hash",
    PubSignal.SELECTOR: "selector",
    PubSignal.TIMESTAMP_UPPER_BOUND: "timestamp_upper_bound",
    PubSignal.IDENTITY_COUNTER_UPPER_BOUND: "identity_counter_upper_bound",
    PubSignal.BIRTH_DATE_UPPER_BOUND: "birth_date",
    PubSignal.EXPIRATION_DATE_LOWER_BOUND: "expiration_date",
}

PROOF_PATH = "zk_proof/proof"
PUB_SIGNALS_PATH = "zk_proof/pub_signals"
EXTERNAL_ID_PATH = "external_id"
