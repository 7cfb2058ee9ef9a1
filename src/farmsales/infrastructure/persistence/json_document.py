"""Layout of the single JSON document that holds all collections."""

from __future__ import annotations

import copy

EMPTY_DOCUMENT = {
    "products": [],
    "orders": [],
    "assignments": [],
    "sequences": {
        "order": 0,
        "order_item": 0,
        "assignment": 0,
        "receipt": 0,
        "on_demand_receipt": 0,
    },
}


def empty_document() -> dict:
    return copy.deepcopy(EMPTY_DOCUMENT)


def next_sequence(document: dict, name: str) -> int:
    """Bump and return a named counter. Counters only ever go up."""
    sequences = document.setdefault("sequences", {})
    sequences[name] = sequences.get(name, 0) + 1
    return sequences[name]
