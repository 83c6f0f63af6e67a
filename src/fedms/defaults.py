# Max number of nested metadata statements in one chain
MAX_DEPTH = 10

# Allowed clock skew in seconds when checking exp, nbf and iat
ALLOWED_DELTA = 300

DEFAULT_CONFIG = {
    "trust_anchors": "trust_anchors.json",
    "priority": [],
    "allowed_delta": ALLOWED_DELTA,
    "max_depth": MAX_DEPTH,
    "httpc_params": {
        "verify": True,
        "timeout": 10
    }
}
