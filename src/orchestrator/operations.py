from __future__ import annotations

from enum import Enum


class Operation(str, Enum):
    CREATE = "CREATE"
    CREATE_RECURRING = "CREATE_RECURRING"
    CREATE_INSTANT = "CREATE_INSTANT"
    CANCEL = "CANCEL"
    MARK_NO_SHOW = "MARK_NO_SHOW"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def verb(self) -> str:
        return "cancelling" if self is Operation.CANCEL else "creating"

    @property
    def fallthrough_message(self) -> str:
        return _FALLTHROUGH_MESSAGES[self]


_LABELS = {
    Operation.CREATE: "booking",
    Operation.CREATE_RECURRING: "recurring booking",
    Operation.CREATE_INSTANT: "instant booking",
    Operation.CANCEL: "booking",
    Operation.MARK_NO_SHOW: "no-show",
}

_FALLTHROUGH_MESSAGES = {
    Operation.CREATE: "Could not create booking.",
    Operation.CREATE_RECURRING: "Could not create recurring booking.",
    Operation.CREATE_INSTANT: "Could not create instant booking.",
    Operation.CANCEL: "Could not cancel booking.",
    Operation.MARK_NO_SHOW: "Could not mark no show.",
}
