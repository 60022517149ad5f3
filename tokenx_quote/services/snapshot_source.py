"""
Snapshot sources - the read side of the external order and pair store.

The quote engine never talks to the document store itself. Services are
handed an object satisfying OrderSnapshotSource and read raw documents
through it; InMemorySnapshotSource backs tests and local development.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from tokenx_quote.core.order import Order, OrderSide, OrderStatus, create_order
from tokenx_quote.utils.exceptions import ValidationException

Document = Mapping[str, Any]


@runtime_checkable
class OrderSnapshotSource(Protocol):
    """Read-only access to stored order and pair documents."""

    def get_resting_orders(self, pair_code: str, side: OrderSide) -> List[Document]:
        """Order documents resting on one side of a pair, in any order."""
        ...

    def get_pair(self, pair_code: str) -> Optional[Document]:
        """The pair document for a code, None when unknown."""
        ...

    def list_pairs(self) -> List[Document]:
        """Every pair document."""
        ...


class InMemorySnapshotSource:
    """
    Snapshot source holding documents in memory.

    Each read returns copies, so callers cannot alter the stored documents.
    """

    def __init__(
        self,
        pairs: Iterable[Document] = (),
        orders: Iterable[Document] = (),
    ):
        self._lock = threading.Lock()
        self._pairs: Dict[str, Dict[str, Any]] = {}
        self._orders: List[Dict[str, Any]] = []
        for pair in pairs:
            self.put_pair(pair)
        for order in orders:
            self.put_order(order)

    def put_pair(self, pair: Document) -> None:
        code = pair.get("code") or f"{pair.get('token1')}-{pair.get('token2')}"
        with self._lock:
            self._pairs[code] = {**pair, "code": code}

    def put_order(self, order: Document) -> None:
        with self._lock:
            self._orders.append(dict(order))

    def clear_orders(self) -> None:
        with self._lock:
            self._orders.clear()

    def get_resting_orders(self, pair_code: str, side: OrderSide) -> List[Document]:
        with self._lock:
            return [
                dict(doc)
                for doc in self._orders
                if doc.get("pair") == pair_code
                and str(doc.get("side", "")).upper() == side.value
                and str(doc.get("status") or OrderStatus.PENDING.value).upper()
                == OrderStatus.PENDING.value
            ]

    def get_pair(self, pair_code: str) -> Optional[Document]:
        with self._lock:
            pair = self._pairs.get(pair_code)
            return dict(pair) if pair is not None else None

    def list_pairs(self) -> List[Document]:
        with self._lock:
            return [dict(pair) for pair in self._pairs.values()]


def load_resting_orders(
    source: OrderSnapshotSource,
    pair_code: str,
    side: OrderSide,
    logger: Optional[logging.Logger] = None,
) -> List[Order]:
    """
    Read one side of a pair and map its documents onto orders.

    Documents that fail validation are skipped with a warning, as are orders
    that are not resting on the requested side.
    """
    logger = logger or logging.getLogger(__name__)
    orders = []
    for doc in source.get_resting_orders(pair_code, side):
        try:
            order = create_order(doc)
        except ValidationException as e:
            logger.warning(f"Skipping invalid order document {doc.get('id')} on {pair_code}: {e.message}")
            continue
        if order.is_resting and order.side == side:
            orders.append(order)
    return orders
