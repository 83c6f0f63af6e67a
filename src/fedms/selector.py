import logging
from typing import List
from typing import Optional

from fedms.events import NO_MATCHING_OPERATOR
from fedms.metadata_statement.locate import federation_operators
from fedms.metadata_statement.resolve import ChainResolver
from fedms.metadata_statement.statement import ResolvedChain

logger = logging.getLogger(__name__)


class FederationSelector(ChainResolver):
    """
    Given a discovery document, tries to get a federated/signed version of it.

    The federation operators are tried in a fixed order, the priority list if one
    is given otherwise the order of the trust anchors. The first federation
    operator for which the discovery document carries a metadata statement is
    used, and nothing else is tried after that.
    """

    def __init__(self, trust_anchors: dict, priority: Optional[List[str]] = None, **kwargs):
        """
        :param trust_anchors: Federation operator IDs mapped to JWKSs or KeySet instances
        :param priority: Federation operator IDs in the order they should be tried
        :param kwargs: Extra keyword arguments to :py:class:`ChainResolver`
        """
        ChainResolver.__init__(self, trust_anchors, **kwargs)
        self.priority = priority or []

    def operator_order(self) -> List[str]:
        if self.priority:
            _order = []
            for fo in self.priority:
                if fo in self.trust_anchors:
                    _order.append(fo)
                else:
                    logger.warning(f"No trust anchor for prioritized federation operator {fo}")
            return _order
        else:
            return list(self.trust_anchors.keys())

    def select(self, discovery_doc: dict) -> Optional[ResolvedChain]:
        """

        :param discovery_doc: Discovery document as retrieved from
            .well-known/openid-configuration
        :return: A ResolvedChain instance or None if the discovery document has no
            metadata statements for any of the trusted federation operators
        """
        for fo in self.operator_order():
            _jws = self.locator(discovery_doc, fo)
            if _jws is not None:
                logger.debug(f"Statement for federation id {fo}")
                return self(_jws, fo)

        logger.debug("There are no metadata_statements for any trusted FO")
        _other = federation_operators(discovery_doc)
        if _other:
            logger.debug(f"There are statements for other FOs: {_other}")
        self.events.emit(NO_MATCHING_OPERATOR, available=_other)
        return None


def select(discovery_doc: dict, trust_anchors: dict, **kwargs) -> Optional[ResolvedChain]:
    """
    Pick the first trusted federation for which the discovery document has a
    metadata statement and resolve that chain.

    :param discovery_doc: Discovery document
    :param trust_anchors: Federation operator IDs mapped to JWKSs or KeySet instances
    :param kwargs: Extra keyword arguments to :py:class:`FederationSelector`
    :return: A ResolvedChain instance or None
    """
    return FederationSelector(trust_anchors, **kwargs).select(discovery_doc)
