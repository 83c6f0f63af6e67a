import logging
from typing import Callable
from typing import List
from typing import Optional

logger = logging.getLogger(__name__)

HOP_ENTERED = "hop_entered"
STATEMENT_FETCHED = "statement_fetched"
SIGNATURE_VERIFIED = "signature_verified"
POLICY_BREACH = "policy_breach"
CHAIN_RESOLVED = "chain_resolved"
NO_MATCHING_OPERATOR = "no_matching_operator"

EVENTS = [HOP_ENTERED, STATEMENT_FETCHED, SIGNATURE_VERIFIED, POLICY_BREACH, CHAIN_RESOLVED,
          NO_MATCHING_OPERATOR]


class Events(object):
    """
    Dispatches diagnostic events raised while a trust chain is resolved.

    A listener is a callable taking the event name and a dictionary with
    information about the event. Listeners only observe; whatever they do the
    outcome of the resolution stays the same.
    """

    def __init__(self, listeners: Optional[List[Callable]] = None):
        self.listeners = list(listeners or [])

    def subscribe(self, listener: Callable):
        self.listeners.append(listener)

    def emit(self, event: str, **info):
        logger.debug(f"{event}: {info}")
        for listener in self.listeners:
            try:
                listener(event, info)
            except Exception as err:
                logger.exception(f"Listener {listener} failed on {event}: {err}")
