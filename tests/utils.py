import json

from cryptojwt.jws.jws import factory
from cryptojwt.key_jar import init_key_jar

from fedms.metadata_statement.create import create_metadata_statement

KEYSPEC = [
    {"type": "RSA", "use": ["sig"]},
    {"type": "EC", "crv": "P-256", "use": ["sig"]},
]

FO = "https://swamid.sunet.se"
ORG = "https://www.umu.se"
OP = "https://op.umu.se"


def new_key_jar():
    return init_key_jar(key_defs=KEYSPEC)


def public_jwks(key_jar):
    return key_jar.export_jwks()


def unverified_payload(signed_jwt):
    return factory(signed_jwt).jwt.payload()


class DocumentStore(object):
    """Stands in for the HTTP client, returns documents by URL."""

    def __init__(self, documents=None):
        self.documents = documents or {}
        self.requested = []

    def __setitem__(self, url, document):
        if isinstance(document, dict):
            document = json.dumps(document)
        self.documents[url] = document

    def __call__(self, url):
        self.requested.append(url)
        return self.documents[url]


class Federation(object):
    """
    A federation operator, an organisation and an OpenID provider, each with its
    own signing keys.
    """

    def __init__(self):
        self.fo_keys = new_key_jar()
        self.org_keys = new_key_jar()
        self.op_keys = new_key_jar()
        self.trust_anchors = {FO: public_jwks(self.fo_keys)}

    def fo_statement(self, **kwargs):
        _args = {
            "signing_keys": public_jwks(self.org_keys),
            "response_types_supported": ["code", "token", "id_token"],
            "id_token_signing_alg_values_supported": ["RS256", "ES256"],
        }
        _args.update(kwargs)
        return create_metadata_statement(FO, self.fo_keys, **_args)

    def org_statement(self, inner=None, **kwargs):
        _args = {
            "signing_keys": public_jwks(self.op_keys),
            "metadata_statements": {FO: inner or self.fo_statement()},
            "response_types_supported": ["code", "token"],
        }
        _args.update(kwargs)
        return create_metadata_statement(ORG, self.org_keys, **_args)

    def op_statement(self, inner=None, **kwargs):
        _args = {
            "metadata_statements": {FO: inner or self.org_statement()},
            "issuer": OP,
            "response_types_supported": ["code"],
        }
        _args.update(kwargs)
        return create_metadata_statement(OP, self.op_keys, **_args)
