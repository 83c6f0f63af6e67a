import copy
import json
import logging
from typing import Union

from cryptojwt import key_bundle
from cryptojwt.exception import JWKESTException

from fedms.exception import MalformedStatement

logger = logging.getLogger(__name__)


class KeySet(key_bundle.KeyBundle):
    """
    Extended :py:class:`cryptojwt.key_bundle.KeyBundle` class where keys are unique
    by key ID and two sets can be joined.
    """

    def union(self, other: "KeySet") -> "KeySet":
        """
        Construct a new key set with the keys in this set and the keys in the other.
        If both sets contain a key with the same key ID the one in this set is kept.

        :param other: Another KeySet instance
        :return: A new KeySet instance
        """
        res = KeySet()
        _kids = set()
        for key in list(self.keys()) + list(other.keys()):
            if key.kid:
                if key.kid in _kids:
                    continue
                _kids.add(key.kid)
            elif key in res.keys():
                continue
            res.append(key)
        return res

    def __or__(self, other):
        return self.union(other)


def keyset_from_jwks(jwks: Union[str, dict, KeySet]) -> KeySet:
    """
    Create a KeySet from a JWKS.

    :param jwks: A JWKS as a dictionary or a JSON document. A KeySet is returned as is.
    :return: KeySet instance
    """
    if isinstance(jwks, KeySet):
        return jwks

    if isinstance(jwks, str):
        try:
            jwks = json.loads(jwks)
        except ValueError as err:
            raise MalformedStatement(f"Not a JWKS: {err}")

    try:
        _keys = jwks["keys"]
    except (KeyError, TypeError):
        raise MalformedStatement("Missing 'keys' in JWKS")

    if not isinstance(_keys, list):
        raise MalformedStatement("The value of 'keys' in a JWKS must be a list")
    if not all(isinstance(k, dict) for k in _keys):
        raise MalformedStatement("The keys in a JWKS must be JSON objects")

    # KeyBundle modifies the JWKs it is given
    try:
        _ks = KeySet(keys=copy.deepcopy(_keys))
    except (JWKESTException, KeyError, AttributeError, TypeError, ValueError) as err:
        logger.debug(f"Could not load JWKS: {err}")
        raise MalformedStatement(f"Invalid JWK: {err.__class__.__name__}: {err}")

    # drop duplicate key IDs
    return _ks.union(KeySet())
