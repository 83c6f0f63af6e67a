import logging
from typing import Callable
from typing import List
from typing import Optional

from fedms.events import Events
from fedms.events import STATEMENT_FETCHED

logger = logging.getLogger(__name__)


def _statement_map(statement: dict, claim: str) -> dict:
    _map = statement.get(claim)
    if isinstance(_map, dict):
        return _map
    return {}


def locate(statement: dict, fo: str, fetch: Callable,
           events: Optional[Events] = None) -> Optional[str]:
    """
    Collects the inner metadata statement for a specific federation operator.

    :param statement: Metadata statement (or discovery document) that may contain
        inner metadata statements
    :param fo: Federation operator ID
    :param fetch: Callable that returns the content of a document given its URL
    :param events: Where diagnostic events should be sent
    :return: A signed JWT or None if there is no inner statement for the federation
        operator
    """
    _embedded = _statement_map(statement, "metadata_statements")
    if fo in _embedded:
        return _embedded[fo]

    _uris = _statement_map(statement, "metadata_statement_uris")
    if fo in _uris:
        logger.debug(f"Getting metadata statement for {fo} from {_uris[fo]}")
        _jws = fetch(_uris[fo])
        if events:
            events.emit(STATEMENT_FETCHED, fo=fo, uri=_uris[fo])
        return _jws.strip()

    return None


def federation_operators(statement: dict) -> List[str]:
    """
    The federation operators that a statement has inner metadata statements for.

    :param statement: Metadata statement or discovery document
    :return: List of federation operator IDs
    """
    res = list(_statement_map(statement, "metadata_statements").keys())
    for fo in _statement_map(statement, "metadata_statement_uris").keys():
        if fo not in res:
            res.append(fo)
    return res


class StatementLocator(object):
    def __init__(self, fetch: Callable, events: Optional[Events] = None):
        self.fetch = fetch
        self.events = events

    def __call__(self, statement: dict, fo: str) -> Optional[str]:
        return locate(statement, fo, self.fetch, self.events)
