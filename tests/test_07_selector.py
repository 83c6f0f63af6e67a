import pytest

from fedms.events import Events
from fedms.events import NO_MATCHING_OPERATOR
from fedms.exception import MalformedStatement
from fedms.exception import PolicyBreach
from fedms.exception import SignatureInvalid
from fedms.metadata_statement.create import create_metadata_statement
from fedms.selector import FederationSelector
from fedms.selector import select
from tests.utils import DocumentStore
from tests.utils import FO
from tests.utils import Federation
from tests.utils import OP
from tests.utils import ORG
from tests.utils import new_key_jar
from tests.utils import public_jwks
from tests.utils import unverified_payload

FO1 = "https://fo1.example.org"
FO2 = "https://fo2.example.org"


def test_single_statement():
    root_keys = new_key_jar()
    _s1 = create_metadata_statement(FO1, root_keys, issuer="https://idp.example",
                                    response_types_supported=["code"])
    discovery_doc = {
        "issuer": "https://idp.example",
        "metadata_statements": {FO1: _s1}
    }

    chain = select(discovery_doc, {FO1: public_jwks(root_keys)})
    assert chain.fo == FO1
    assert chain.claims() == unverified_payload(_s1)
    assert chain["response_types_supported"] == ["code"]


def test_single_statement_wrong_root_keys():
    _s1 = create_metadata_statement(FO1, new_key_jar(), issuer="https://idp.example")
    discovery_doc = {"metadata_statements": {FO1: _s1}}

    with pytest.raises(SignatureInvalid):
        select(discovery_doc, {FO1: public_jwks(new_key_jar())})


class TestSelector(object):
    @pytest.fixture(autouse=True)
    def create_federations(self):
        self.federation = Federation()
        self.fo1_keys = new_key_jar()
        self.fo2_keys = new_key_jar()
        self.trust_anchors = {
            FO1: public_jwks(self.fo1_keys),
            FO2: public_jwks(self.fo2_keys)
        }
        self.events = []
        self.store = DocumentStore()

    def selector(self, trust_anchors=None, **kwargs):
        return FederationSelector(trust_anchors or self.trust_anchors, fetch=self.store,
                                  events=Events([lambda e, i: self.events.append((e, i))]),
                                  **kwargs)

    def statement(self, fo, keys, **kwargs):
        return create_metadata_statement(fo, keys, issuer=OP, **kwargs)

    def test_no_statements(self):
        assert self.selector().select({"issuer": OP}) is None
        assert self.events == [(NO_MATCHING_OPERATOR, {"available": []})]

    def test_other_federations(self):
        discovery_doc = {
            "issuer": OP,
            "metadata_statements": {FO: self.federation.op_statement()},
            "metadata_statement_uris": {"https://incommon.org": "https://incommon.org/ms/op"}
        }
        assert self.selector().select(discovery_doc) is None
        assert self.events == [
            (NO_MATCHING_OPERATOR, {"available": [FO, "https://incommon.org"]})]
        assert self.store.requested == []

    def test_first_match_wins(self):
        discovery_doc = {
            "metadata_statements": {
                FO2: self.statement(FO2, self.fo2_keys, scope=["openid"]),
                FO1: self.statement(FO1, self.fo1_keys, scope=["openid", "email"])
            }
        }
        chain = self.selector().select(discovery_doc)
        assert chain.fo == FO1
        assert chain["scope"] == ["openid", "email"]

    def test_priority(self):
        discovery_doc = {
            "metadata_statements": {
                FO2: self.statement(FO2, self.fo2_keys, scope=["openid"]),
                FO1: self.statement(FO1, self.fo1_keys, scope=["openid", "email"])
            }
        }
        chain = self.selector(priority=[FO2, FO1]).select(discovery_doc)
        assert chain.fo == FO2
        assert chain["scope"] == ["openid"]

    def test_priority_unknown_operator(self):
        discovery_doc = {
            "metadata_statements": {
                FO: self.federation.op_statement(),
                FO2: self.statement(FO2, self.fo2_keys, scope=["openid"]),
            }
        }
        # FO is not among the trust anchors
        chain = self.selector(priority=[FO, FO2]).select(discovery_doc)
        assert chain.fo == FO2

    def test_matching_later(self):
        discovery_doc = {
            "metadata_statements": {FO2: self.statement(FO2, self.fo2_keys, scope=["openid"])}
        }
        chain = self.selector().select(discovery_doc)
        assert chain.fo == FO2

    def test_no_fallback_on_failure(self):
        discovery_doc = {
            "metadata_statements": {
                # signed with the wrong keys
                FO1: self.statement(FO1, self.fo2_keys, scope=["openid"]),
                FO2: self.statement(FO2, self.fo2_keys, scope=["openid"])
            }
        }
        with pytest.raises(SignatureInvalid):
            self.selector().select(discovery_doc)

    def test_chain_by_reference(self):
        _uri = "https://op.umu.se/ms/swamid"
        self.store[_uri] = self.federation.op_statement()
        discovery_doc = {"metadata_statement_uris": {FO: _uri}}

        chain = self.selector(self.federation.trust_anchors).select(discovery_doc)
        assert chain.iss_path == [OP, ORG, FO]
        assert self.store.requested == [_uri]

    def test_policy_breach(self):
        _org = self.federation.org_statement(response_types_supported=["code"])
        _jws = self.federation.op_statement(inner=_org, response_types_supported=["code", "token"])
        discovery_doc = {"metadata_statements": {FO: _jws}}

        with pytest.raises(PolicyBreach):
            self.selector(self.federation.trust_anchors).select(discovery_doc)


def test_json_serialized_statement():
    discovery_doc = {
        "issuer": "https://idp.example",
        "metadata_statements": {FO1: '{"payload": "e30", "protected": "e30", "signature": "x"}'}
    }

    with pytest.raises(MalformedStatement):
        select(discovery_doc, {FO1: public_jwks(new_key_jar())})
