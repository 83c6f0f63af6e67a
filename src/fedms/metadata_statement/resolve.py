import logging
from typing import Callable
from typing import List
from typing import Optional

from fedms.defaults import ALLOWED_DELTA
from fedms.defaults import MAX_DEPTH
from fedms.events import CHAIN_RESOLVED
from fedms.events import Events
from fedms.events import HOP_ENTERED
from fedms.events import POLICY_BREACH
from fedms.events import SIGNATURE_VERIFIED
from fedms.exception import Cancelled
from fedms.exception import ChainTooDeep
from fedms.exception import FedMSError
from fedms.exception import MalformedStatement
from fedms.exception import PolicyBreach
from fedms.exception import UnknownFederationOperator
from fedms.fetch import DocumentFetcher
from fedms.keybundle import KeySet
from fedms.keybundle import keyset_from_jwks
from fedms.metadata_statement.flatten import flatten
from fedms.metadata_statement.locate import StatementLocator
from fedms.metadata_statement.statement import ResolvedChain
from fedms.metadata_statement.statement import chain_expires_at
from fedms.metadata_statement.verify import decode_statement
from fedms.metadata_statement.verify import verify_signature
from fedms.metadata_statement.verify import verify_time_claims

logger = logging.getLogger(__name__)


class ChainResolver(object):
    """
    Decodes, verifies and flattens a compounded metadata statement for a specific
    federation operator.
    """

    def __init__(self,
                 trust_anchors: dict,
                 fetch: Optional[Callable] = None,
                 locator: Optional[Callable] = None,
                 allowed_delta: Optional[int] = ALLOWED_DELTA,
                 max_depth: Optional[int] = MAX_DEPTH,
                 events: Optional[Events] = None,
                 cancelled: Optional[Callable] = None):
        """

        :param trust_anchors: Federation operator IDs mapped to JWKSs or KeySet instances
        :param fetch: Callable that returns a document given a URL
        :param locator: Callable that finds the inner statement given a statement and a
            federation operator ID
        :param allowed_delta: Allowed clock skew in seconds
        :param max_depth: Max number of nested statements in a chain
        :param events: Where diagnostic events should be sent
        :param cancelled: Callable returning True if the resolution should be abandoned
        """
        self.trust_anchors = {fo: keyset_from_jwks(keys) for fo, keys in trust_anchors.items()}
        self.events = events or Events()
        self.fetch = fetch or DocumentFetcher()
        self.locator = locator or StatementLocator(self.fetch, self.events)
        self.allowed_delta = allowed_delta
        self.max_depth = max_depth
        self.cancelled = cancelled

    def signing_keys(self, statement: dict) -> KeySet:
        """
        The keys a verified and flattened statement allows the next statement to be
        signed with.

        :param statement: Verified and flattened statement
        :return: KeySet instance
        """
        keys = None
        if "signing_keys" in statement:
            keys = keyset_from_jwks(statement["signing_keys"])
        if "signing_keys_uri" in statement:
            _remote = keyset_from_jwks(self.fetch(statement["signing_keys_uri"]))
            if keys is None:
                keys = _remote
            else:
                keys = keys.union(_remote)

        if keys is None:
            raise MalformedStatement(
                f"Inner statement by {statement.get('iss')} carries no signing keys")
        return keys

    def resolve(self, signed_jwt: str, fo: str, depth: Optional[int] = 0,
                verified_chain: Optional[List[dict]] = None) -> dict:
        """
        Resolve one hop. Inner statements are resolved first.

        :param signed_jwt: Signed metadata statement
        :param fo: Federation operator ID
        :param depth: How deep into the chain this statement is
        :param verified_chain: Verified payloads are appended here, root first
        :return: The flattened claims of this statement and all inner statements
        """
        if self.cancelled and self.cancelled():
            raise Cancelled(f"Resolution of chain for {fo} cancelled")
        if depth >= self.max_depth:
            raise ChainTooDeep(f"More than {self.max_depth} nested metadata statements")

        if verified_chain is None:
            verified_chain = []

        _jws, payload = decode_statement(signed_jwt)
        _kid = _jws.jwt.headers.get("kid", "")
        self.events.emit(HOP_ENTERED, fo=fo, depth=depth, iss=payload.get("iss"), kid=_kid)

        inner_jwt = self.locator(payload, fo)
        if inner_jwt is not None:
            inner = self.resolve(inner_jwt, fo, depth + 1, verified_chain)
            keys = self.signing_keys(inner)
        else:
            # This is the innermost statement, must be signed by the federation operator
            try:
                keys = self.trust_anchors[fo]
            except KeyError:
                raise UnknownFederationOperator(f"No trust anchor for '{fo}'")
            inner = None

        verified = verify_signature(_jws, keys)
        verify_time_claims(verified, self.allowed_delta)
        self.events.emit(SIGNATURE_VERIFIED, fo=fo, depth=depth, iss=verified.get("iss"),
                         kid=_kid)
        verified_chain.append(verified)

        if inner is None:
            return verified

        try:
            return flatten(verified, inner)
        except PolicyBreach as err:
            self.events.emit(POLICY_BREACH, fo=fo, depth=depth, claim=err.claim,
                             inner_value=err.inner_value, outer_value=err.outer_value)
            raise

    def __call__(self, signed_jwt: str, fo: str) -> ResolvedChain:
        verified_chain = []
        try:
            metadata = self.resolve(signed_jwt, fo, verified_chain=verified_chain)
        except FedMSError as err:
            logger.debug(f"Error validating metadata statement for {fo}: {err}")
            raise

        iss_path = [v.get("iss", "") for v in reversed(verified_chain)]
        self.events.emit(CHAIN_RESOLVED, fo=fo, iss_path=iss_path)
        return ResolvedChain(metadata=metadata, fo=fo, exp=chain_expires_at(verified_chain),
                             iss_path=iss_path, verified_chain=verified_chain)


def resolve(signed_jwt: str, fo: str, trust_anchors: dict, **kwargs) -> ResolvedChain:
    """
    Verify and flatten a chain of metadata statements.

    :param signed_jwt: The outermost signed metadata statement
    :param fo: Federation operator ID
    :param trust_anchors: Federation operator IDs mapped to JWKSs or KeySet instances
    :param kwargs: Extra keyword arguments to :py:class:`ChainResolver`
    :return: A ResolvedChain instance
    """
    return ChainResolver(trust_anchors, **kwargs)(signed_jwt, fo)
