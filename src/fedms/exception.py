class FedMSError(Exception):
    pass


class MalformedStatement(FedMSError):
    pass


class PolicyBreach(FedMSError):
    def __init__(self, claim, inner_value, outer_value):
        FedMSError.__init__(
            self,
            f"Policy breach with claim: {claim}. Lower value={inner_value}. "
            f"Upper value={outer_value}")
        self.claim = claim
        self.inner_value = inner_value
        self.outer_value = outer_value


class SignatureInvalid(FedMSError):
    pass


class ClaimsInvalid(FedMSError):
    pass


class UnknownFederationOperator(FedMSError):
    pass


class NetworkError(FedMSError):
    pass


class UnexpectedValueType(FedMSError, TypeError):
    pass


class ChainTooDeep(FedMSError):
    pass


class Cancelled(FedMSError):
    pass


class JsonDeserializationError(FedMSError):
    pass


class InvalidDiscoveryDocument(FedMSError):
    pass
