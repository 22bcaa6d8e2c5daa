"""Package-wide constants for NUC tokens."""
from __future__ import annotations

ONE_MINUTE_SECONDS = 60

# Random bytes in a builder-generated nonce (hex-encoded, so 32 characters).
DEFAULT_NONCE_LENGTH = 16

# Commands are ``/``-separated paths; revocation is reachable from any chain.
REVOKE_COMMAND = "/nuc/revoke"

# Validation limits applied when the caller does not override them.
DEFAULT_MAX_CHAIN_LENGTH = 5
DEFAULT_MAX_POLICY_WIDTH = 10
DEFAULT_MAX_POLICY_DEPTH = 5

# Only algorithm accepted in token headers.
ES256K = "ES256K"

# Header ``typ`` discriminators.
NUC_TYPE_NATIVE = "nuc"
NUC_TYPE_EIP712 = "nuc+eip712"

NUC_PAYLOAD_VERSION = "1.0.0"
