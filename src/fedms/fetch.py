import logging
from typing import Callable
from typing import Optional

import requests
from requests.exceptions import RequestException

from fedms.exception import NetworkError

logger = logging.getLogger(__name__)


class DocumentFetcher(object):
    """
    Fetches documents over HTTP. Used both for discovery documents and for metadata
    statements referenced by metadata_statement_uris.
    """

    def __init__(self, http_cli: Optional[Callable] = None, httpc_params: Optional[dict] = None):
        """
        :param http_cli: A callable with the same signature as :py:func:`requests.request`
        :param httpc_params: Additional parameters to pass to the HTTP client function
        """
        self.http_cli = http_cli or requests.request
        self.httpc_params = httpc_params or {}
        logger.debug(f'httpc_params: {self.httpc_params}')

    def __call__(self, url: str) -> str:
        """

        :param url: Target URL
        :return: The response body as text
        """
        logger.debug(f"Fetching {url}")
        try:
            response = self.http_cli("GET", url, **self.httpc_params)
        except RequestException as err:
            logger.error(f'Could not connect to {url}: {err}')
            raise NetworkError(f"Could not fetch '{url}': {err}") from err

        if response.status_code == 200:
            return response.text
        else:
            logger.error(f"Got status code {response.status_code} from {url}")
            raise NetworkError(f"Could not fetch '{url}': status code {response.status_code}")
