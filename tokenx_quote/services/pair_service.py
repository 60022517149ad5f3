"""
Pair Service - lookups over the pairs known to the snapshot source.

Builds the pair and token listings a client needs to offer a market:
which pairs exist, which tokens can be exchanged, and which pairs each
token appears in.
"""

import logging
from typing import Dict, List

from tokenx_quote.core.pair import Pair, create_pair
from tokenx_quote.services.snapshot_source import OrderSnapshotSource
from tokenx_quote.utils.exceptions import PairNotFoundException, ValidationException
from tokenx_quote.utils.validators import validate_pair_code


class PairService:
    """
    Service class for pair configuration lookups.

    Pair documents that fail validation are skipped from listings and
    logged, so one bad document cannot hide the rest of the market.
    """

    def __init__(self, source: OrderSnapshotSource):
        """
        Initialize pair service.

        Args:
            source: Snapshot source holding pair documents
        """
        self.source = source
        self.logger = logging.getLogger(f"{__name__}.PairService")
        self.logger.info("PairService initialized")

    def get_pair_info(self, pair_code: str) -> Pair:
        """
        Get the configuration of one pair.

        Raises:
            PairNotFoundException: If the source has no such pair
            ValidationException: If the code or the stored document is invalid
        """
        pair_code = validate_pair_code(pair_code)
        doc = self.source.get_pair(pair_code)
        if doc is None:
            raise PairNotFoundException(
                f"Could not get pair info for pair: {pair_code}",
                details={"pair": pair_code}
            )
        return create_pair({**doc, "code": doc.get("code") or pair_code})

    def get_pairs_map(self) -> Dict[str, Pair]:
        """All valid pairs keyed by pair code."""
        pairs: Dict[str, Pair] = {}
        for doc in self.source.list_pairs():
            try:
                pair = create_pair(doc)
            except ValidationException as e:
                self.logger.warning(f"Skipping invalid pair document {doc.get('code')}: {e.message}")
                continue
            pairs[pair.code] = pair
        return pairs

    def get_pairs_list(self) -> List[Pair]:
        return list(self.get_pairs_map().values())

    def get_tokens_pair_map(self) -> Dict[str, List[Dict[str, str]]]:
        """
        Map each token to the pairs it appears in.

        Returns:
            Dictionary of token -> list of {"pair_code", "pair_id"}
        """
        tokens: Dict[str, List[Dict[str, str]]] = {}
        for pair_id, pair in self.get_pairs_map().items():
            entry = {"pair_code": pair.code, "pair_id": pair_id}
            tokens.setdefault(pair.token1, []).append(entry)
            tokens.setdefault(pair.token2, []).append(dict(entry))
        return tokens

    def get_tokens_list(self) -> List[str]:
        """Every token that can be exchanged."""
        return list(self.get_tokens_pair_map().keys())
