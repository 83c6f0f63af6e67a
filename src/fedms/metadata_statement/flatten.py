import copy
import logging

from fedms.exception import PolicyBreach
from fedms.metadata_statement.subset import is_subset

logger = logging.getLogger(__name__)

# Claims where the value in the lower statement is always used
USE_LOWER = ["iss", "sub", "aud", "exp", "nbf", "iat", "jti"]

# Claims where the value in the upper statement is always used
USE_UPPER = ["signing_keys", "signing_keys_uri", "metadata_statement_uris", "kid",
             "metadata_statements", "usage"]


def flatten(upper: dict, lower: dict) -> dict:
    """
    Flatten two metadata statements into one, following the rules from the
    OpenID Connect Federation draft.

    :param upper: Metadata statement (n)
    :param lower: Metadata statement (n-1), already flattened and verified
    :return: A new dictionary with the flattened version of both statements.
    :raises PolicyBreach: when upper tries to override a claim in lower with
        something that is not a subset of the lower value.
    """
    flattened = copy.deepcopy(lower)
    for claim, value in upper.items():
        if claim in USE_LOWER:
            continue

        if claim in USE_UPPER or claim not in lower or is_subset(value, lower[claim]):
            flattened[claim] = copy.deepcopy(value)
        else:
            logger.debug(f"Policy breach on '{claim}': {value} not a subset of {lower[claim]}")
            raise PolicyBreach(claim, lower[claim], value)

    return flattened
