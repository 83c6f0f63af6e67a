import logging
from typing import List
from typing import Optional

from cryptojwt.jwt import utc_time_sans_frac
from idpyoidc.impexp import ImpExp

logger = logging.getLogger(__name__)


class ResolvedChain(ImpExp):
    """
    Class in which to store the result of verifying and flattening a chain of
    metadata statements.
    """

    parameter = {
        "exp": 0,
        "fo": "",
        "iss_path": [],
        "metadata": {},
        "verified_chain": []
    }

    def __init__(self,
                 metadata: Optional[dict] = None,
                 fo: Optional[str] = "",
                 exp: int = 0,
                 iss_path: Optional[List[str]] = None,
                 verified_chain: Optional[List[dict]] = None):
        """
        :param metadata: The flattened claims
        :param fo: The federation operator the chain ends in
        :param exp: Expiration time
        :param iss_path: Issuers from the outermost statement to the root
        :param verified_chain: Verified payloads, root first
        """
        ImpExp.__init__(self)
        self.metadata = metadata or {}
        self.fo = fo
        self.exp = exp
        self.iss_path = iss_path or []
        self.verified_chain = verified_chain or []

    def keys(self):
        return self.metadata.keys()

    def items(self):
        return self.metadata.items()

    def __getitem__(self, item):
        return self.metadata[item]

    def __contains__(self, item):
        return item in self.metadata

    def get(self, item, default=None):
        return self.metadata.get(item, default)

    def claims(self):
        """
        The result after flattening the statements
        """
        return self.metadata

    def is_expired(self):
        if not self.exp:
            return False

        now = utc_time_sans_frac()
        if self.exp < now:
            logger.debug(f'is_expired: {self.exp} < {now}')
            return True
        else:
            return False


def chain_expires_at(verified_chain: List[dict]) -> int:
    """
    The earliest expiration time among the statements in a chain.

    :param verified_chain: List of verified payloads
    :return: Expiration time, 0 if none of the statements expire
    """
    _exp = [v["exp"] for v in verified_chain if "exp" in v]
    if _exp:
        return min(_exp)
    return 0
