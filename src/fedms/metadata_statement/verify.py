import logging

from cryptojwt.exception import JWKESTException
from cryptojwt.jws.jws import factory
from cryptojwt.jwt import utc_time_sans_frac

from fedms.exception import ClaimsInvalid
from fedms.exception import MalformedStatement
from fedms.exception import SignatureInvalid
from fedms.keybundle import KeySet

logger = logging.getLogger(__name__)

# Standard claims that carry time stamps
TIME_CLAIMS = ["exp", "nbf", "iat"]


def decode_statement(signed_jwt: str):
    """
    Parse a signed metadata statement without verifying the signature.

    :param signed_jwt: A signed JWT in compact serialization
    :return: tuple with a :py:class:`cryptojwt.jws.jws.JWS` instance and the payload
    """
    if not isinstance(signed_jwt, str):
        raise MalformedStatement(f"Expected a signed JWT, got {type(signed_jwt).__name__}")

    try:
        _jws = factory(signed_jwt)
    except (AttributeError, TypeError, ValueError) as err:
        raise MalformedStatement(f"Not a signed JWT: {err}")

    # JSON serialized JWSs are not accepted, only the compact form
    if _jws is None or _jws.jwt is None:
        raise MalformedStatement("Not a signed JWT in compact serialization")

    try:
        payload = _jws.jwt.payload()
    except (AttributeError, ValueError) as err:
        raise MalformedStatement(f"Payload is not JSON: {err}")

    if not isinstance(payload, dict):
        raise MalformedStatement("Payload is not a JSON object")

    return _jws, payload


def verify_time_claims(payload: dict, allowed_delta: int = 300, now: int = 0):
    """
    Check the temporal claims in a payload.

    :param payload: The payload of a signed JWT
    :param allowed_delta: Allowed clock skew in seconds
    :param now: Current time, mostly for testing
    """
    now = now or utc_time_sans_frac()
    for claim in TIME_CLAIMS:
        if claim in payload and not isinstance(payload[claim], (int, float)):
            raise ClaimsInvalid(f"'{claim}' must be a number")

    if "exp" in payload and now > payload["exp"] + allowed_delta:
        raise ClaimsInvalid(f"Statement expired at {payload['exp']}")
    if "nbf" in payload and now < payload["nbf"] - allowed_delta:
        raise ClaimsInvalid(f"Statement not valid before {payload['nbf']}")
    if "iat" in payload and now < payload["iat"] - allowed_delta:
        raise ClaimsInvalid(f"Statement issued in the future ({payload['iat']})")


def verify_signature(jws, key_set: KeySet) -> dict:
    """
    Verifies the signature of a JWT using the indicated keys.

    :param jws: A :py:class:`cryptojwt.jws.jws.JWS` instance as returned by
        :py:func:`decode_statement`
    :param key_set: Keys that can be used to verify the token
    :return: The verified payload
    """
    _keys = key_set.keys()
    if not _keys:
        raise SignatureInvalid("No keys to verify the signature with")

    try:
        return jws.verify_compact(keys=_keys)
    except JWKESTException as err:
        raise SignatureInvalid(f"{err.__class__.__name__}: {err}")


def verify_statement(signed_jwt: str, key_set: KeySet, allowed_delta: int = 300) -> dict:
    """
    Verify signature and time claims of a signed metadata statement.

    :param signed_jwt: A signed JWT
    :param key_set: The keys the statement should be signed with
    :param allowed_delta: Allowed clock skew in seconds
    :return: The verified payload
    """
    _jws, _ = decode_statement(signed_jwt)
    payload = verify_signature(_jws, key_set)
    verify_time_claims(payload, allowed_delta)
    return payload
