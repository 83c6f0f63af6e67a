import json
import logging
import threading
from typing import Callable
from typing import List
from typing import Optional

from idpyoidc.message.oidc import ProviderConfigurationResponse

from fedms.configure import FedMSConfiguration
from fedms.defaults import ALLOWED_DELTA
from fedms.defaults import MAX_DEPTH
from fedms.events import Events
from fedms.exception import Cancelled
from fedms.exception import InvalidDiscoveryDocument
from fedms.exception import JsonDeserializationError
from fedms.fetch import DocumentFetcher
from fedms.selector import FederationSelector

logger = logging.getLogger(__name__)


class FederatedDiscovery(object):
    """
    Fetches an OpenID Connect discovery document and, if it carries a metadata
    statement for one of the trusted federation operators, replaces it with the
    verified and flattened claims from that chain.
    """
    response_cls = ProviderConfigurationResponse

    def __init__(self,
                 trust_anchors: dict,
                 priority: Optional[List[str]] = None,
                 http_cli: Optional[Callable] = None,
                 httpc_params: Optional[dict] = None,
                 allowed_delta: Optional[int] = ALLOWED_DELTA,
                 max_depth: Optional[int] = MAX_DEPTH,
                 listeners: Optional[List[Callable]] = None):
        self.trust_anchors = trust_anchors
        self.priority = priority or []
        self.fetch = DocumentFetcher(http_cli=http_cli, httpc_params=httpc_params)
        self.allowed_delta = allowed_delta
        self.max_depth = max_depth
        self.events = Events(listeners)

    @classmethod
    def from_config(cls, conf: FedMSConfiguration, http_cli: Optional[Callable] = None,
                    listeners: Optional[List[Callable]] = None):
        return cls(trust_anchors=conf.trust_anchors,
                   priority=conf.priority,
                   http_cli=http_cli,
                   httpc_params=conf.httpc_params,
                   allowed_delta=conf.allowed_delta,
                   max_depth=conf.max_depth,
                   listeners=listeners)

    def get_discovery_document(self, discovery_uri: str) -> dict:
        _info = self.fetch(discovery_uri)
        try:
            discovery_doc = json.loads(_info)
        except ValueError as err:
            logger.error(f"Error parsing discovery document from {discovery_uri}: {err}")
            raise JsonDeserializationError(f"Error parsing discovery document: {err}") from err

        if not isinstance(discovery_doc, dict):
            raise JsonDeserializationError("The discovery document must be a JSON object")
        return discovery_doc

    def parse_configuration(self, claims: dict) -> ProviderConfigurationResponse:
        try:
            _pi = self.response_cls(**claims)
            _pi.verify()
        except Exception as err:
            logger.error(f"Malformed discovery document: {err}")
            raise InvalidDiscoveryDocument(f"{err.__class__.__name__}: {err}") from err
        return _pi

    def discover(self, discovery_uri: str, cancelled: Optional[Callable] = None):
        """

        :param discovery_uri: The OpenID Connect discovery URI
        :param cancelled: Callable returning True if the process should be abandoned
        :return: tuple with a ProviderConfigurationResponse instance and the
            ResolvedChain instance, the latter None if the discovery document was used
            as is
        """
        discovery_doc = self.get_discovery_document(discovery_uri)

        selector = FederationSelector(self.trust_anchors,
                                      priority=self.priority,
                                      fetch=self.fetch,
                                      allowed_delta=self.allowed_delta,
                                      max_depth=self.max_depth,
                                      events=self.events,
                                      cancelled=cancelled)
        chain = selector.select(discovery_doc)
        if chain is None:
            logger.debug(f"Using unverified discovery document from {discovery_uri}")
            claims = discovery_doc
        else:
            logger.debug(f"Using discovery document verified by {chain.fo}")
            claims = chain.claims()

        return self.parse_configuration(claims), chain

    def get_configuration(self, discovery_uri: str,
                          cancelled: Optional[Callable] = None) -> ProviderConfigurationResponse:
        return self.discover(discovery_uri, cancelled=cancelled)[0]


class DiscoveryTask(threading.Thread):
    """
    Runs a discovery in the background. The callback is called with
    (configuration, None) on success and (None, error) on failure.
    """

    def __init__(self, discovery: FederatedDiscovery, discovery_uri: str, callback: Callable):
        threading.Thread.__init__(self, daemon=True)
        self.discovery = discovery
        self.discovery_uri = discovery_uri
        self.callback = callback
        self._cancel = threading.Event()

    def cancel(self):
        """
        Abandon the discovery. Takes effect between two steps in the chain, an ongoing
        HTTP request is not interrupted.
        """
        self._cancel.set()

    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self):
        try:
            if self.cancelled():
                raise Cancelled(f"Discovery of {self.discovery_uri} cancelled")
            configuration = self.discovery.get_configuration(self.discovery_uri,
                                                             cancelled=self.cancelled)
        except Exception as err:
            logger.error(f"Discovery of {self.discovery_uri} failed: {err}")
            self.callback(None, err)
        else:
            self.callback(configuration, None)


def fetch_discovery_with_federation(discovery_uri: str, trust_anchors: dict,
                                    **kwargs) -> ProviderConfigurationResponse:
    """
    Fetch a provider configuration from an OpenID Connect discovery URI, using
    federation metadata statements if there are any for a trusted federation.

    :param discovery_uri: The OpenID Connect discovery URI
    :param trust_anchors: Federation operator IDs mapped to JWKSs
    :param kwargs: Extra keyword arguments to :py:class:`FederatedDiscovery`
    :return: A ProviderConfigurationResponse instance
    """
    return FederatedDiscovery(trust_anchors, **kwargs).get_configuration(discovery_uri)


def fetch_discovery_with_federation_async(discovery_uri: str, trust_anchors: dict,
                                          callback: Callable, **kwargs) -> DiscoveryTask:
    """
    Same as :py:func:`fetch_discovery_with_federation` but done in a background thread.

    :param discovery_uri: The OpenID Connect discovery URI
    :param trust_anchors: Federation operator IDs mapped to JWKSs
    :param callback: Called with (configuration, error) when done
    :param kwargs: Extra keyword arguments to :py:class:`FederatedDiscovery`
    :return: The started DiscoveryTask
    """
    task = DiscoveryTask(FederatedDiscovery(trust_anchors, **kwargs), discovery_uri, callback)
    task.start()
    return task
