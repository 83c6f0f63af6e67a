import logging

from cryptojwt.jwt import JWT

logger = logging.getLogger(__name__)


def create_metadata_statement(iss, key_jar, signing_keys=None, metadata_statements=None,
                              metadata_statement_uris=None, lifetime=86400, sign_alg="RS256",
                              key_owner="", **kwargs):
    """

    :param iss: The issuer of the signed JSON Web Token
    :param key_jar: A KeyJar instance with the issuers signing keys
    :param signing_keys: A JWKS with the keys the next statement in the chain
        may be signed with
    :param metadata_statements: Inner metadata statements, a dictionary with
        federation operator IDs as keys and signed JWTs as values
    :param metadata_statement_uris: Where inner metadata statements can be found,
        a dictionary with federation operator IDs as keys and URLs as values
    :param lifetime: The life time of the signed JWT.
    :param sign_alg: Signing algorithm
    :param key_owner: Who the signing keys belong to in the key jar
    :param kwargs: Other claims
    :return: A signed JSON Web Token
    """

    msg = {}
    if signing_keys:
        msg['signing_keys'] = signing_keys

    if metadata_statements:
        msg['metadata_statements'] = metadata_statements

    if metadata_statement_uris:
        msg['metadata_statement_uris'] = metadata_statement_uris

    if kwargs:
        msg.update(kwargs)

    packer = JWT(key_jar=key_jar, iss=iss, lifetime=lifetime, sign_alg=sign_alg)

    return packer.pack(payload=msg, issuer_id=key_owner)
