"""
Distributor agreements.

Any relayer may submit an agreement: authorisation rests entirely on the
distributor's Agreement(address distributor,bytes terms,uint256 nonce)
signature. A new agreement replaces the distributor's previous terms.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from eth_utils import keccak

from .config import AGREEMENT_DOMAIN_NAME, DEFAULT_CHAIN_ID, DOMAIN_VERSION
from .encoding import BytesLike, as_bytes, normalize_address, require_address
from .errors import EmptyField, InvalidAmount
from .ledger import Ledger, read_view
from .registry import SignedRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Agreement:
    terms_hash: bytes
    product_id: int
    units: int
    unit_price: int
    percentage: int


class AgreementRegistry(SignedRegistry):
    """Latest-terms registry keyed by distributor"""

    def __init__(
        self,
        ledger: Ledger,
        admin: str,
        address: str,
        name: str = AGREEMENT_DOMAIN_NAME,
        version: str = DOMAIN_VERSION,
        chain_id: int = DEFAULT_CHAIN_ID,
    ):
        super().__init__(ledger, name, version, address, admin, chain_id)
        self._agreements: Dict[str, Agreement] = {}

    def create_agreement(
        self,
        caller: str,
        distributor: str,
        signature: BytesLike,
        terms: BytesLike,
        product_id: int,
        units: int,
        unit_price: int,
        percentage: int,
        nonce: int,
    ) -> Agreement:
        with self.ledger.atomic():
            self.pause_switch.check_not_paused()

            distributor = require_address(distributor)
            sig = self._require_signature(signature)
            terms = as_bytes(terms)
            if not terms:
                raise EmptyField("terms", "REJUVE: Empty agreement terms")
            product_id = self._require_uint(product_id, "product id")
            amounts = []
            for label, value in (("Units", units), ("Unit price", unit_price), ("Percentage", percentage)):
                if int(value) <= 0:
                    raise InvalidAmount(label)
                amounts.append(self._require_uint(value, label.lower()))
            units, unit_price, percentage = amounts
            nonce = self._require_nonce(nonce)

            digest = self._authenticate(
                "Agreement",
                {"distributor": distributor, "terms": terms, "nonce": nonce},
                sig,
                distributor,
            )

            agreement = Agreement(keccak(terms), product_id, units, unit_price, percentage)
            self.ledger.write(self._agreements, distributor, agreement)

            self.ledger.emit(
                self.name,
                "AgreementCreated",
                distributor=distributor,
                terms=terms,
                terms_hash=agreement.terms_hash,
                product_id=agreement.product_id,
                units=agreement.units,
                unit_price=agreement.unit_price,
                percentage=agreement.percentage,
                nonce=nonce,
                submitter=normalize_address(caller),
                digest=digest,
            )

        logger.info("Agreement for product %d recorded for %s", agreement.product_id, distributor)
        return agreement

    @read_view
    def get_agreement(self, distributor: str) -> Optional[Agreement]:
        return self._agreements.get(normalize_address(distributor))
