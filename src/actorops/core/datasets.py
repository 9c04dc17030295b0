"""Dataset item payloads and result sets.

The dataset items endpoint answers with different envelopes depending on
the requested format: a bare JSON array, `{"items": [...]}` or
`{"data": {"items": [...]}}`. `classify_envelope` maps a decoded payload
onto one tagged variant and `normalize_items` reduces every variant to a
plain tuple of items.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from actorops.core.errors import FetchFailed


@dataclass(frozen=True)
class BareItems:
    """Payload is the item list itself."""

    items: list[Any]


@dataclass(frozen=True)
class ItemsObject:
    """Payload is `{"items": [...]}`."""

    items: list[Any]


@dataclass(frozen=True)
class DataItemsObject:
    """Payload is `{"data": {"items": [...]}}`."""

    items: list[Any]


ItemsEnvelope = Union[BareItems, ItemsObject, DataItemsObject]


def classify_envelope(payload: Any) -> ItemsEnvelope:
    """
    Identify the envelope shape of a dataset items payload.

    Raises:
        FetchFailed: If the payload matches none of the known shapes.
    """
    if isinstance(payload, list):
        return BareItems(payload)
    if isinstance(payload, dict):
        if isinstance(payload.get("items"), list):
            return ItemsObject(payload["items"])
        data = payload.get("data")
        if isinstance(data, dict) and isinstance(data.get("items"), list):
            return DataItemsObject(data["items"])
    raise FetchFailed(
        f"Unexpected dataset items payload of type {type(payload).__name__}"
    )


def normalize_items(payload: Any) -> tuple[Any, ...]:
    """Return the items of any known dataset envelope as a tuple."""
    return tuple(classify_envelope(payload).items)


@dataclass(frozen=True)
class ResultSet:
    """
    Items read from a run's result dataset.

    Attributes:
        dataset_id: Identifier of the dataset.
        expected_count: Item count the run reported.
        items: The items, in dataset order.
    """

    dataset_id: str
    expected_count: int
    items: tuple[Any, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def head(self, limit: int) -> list[Any]:
        """Return the first `limit` items."""
        return list(self.items[:limit])
