"""cswebhook -- Contentstack webhook verification.

Top-level convenience re-exports::

    from cswebhook import verify, verify_sync, VerificationError, ErrorKind
    from cswebhook.sdk import VerificationConfig, resolve_config
"""

__version__ = "0.1.0"

from cswebhook.protocol.errors import ErrorKind, VerificationError
from cswebhook.sdk.config import DEFAULT_CONFIG, VerificationConfig
from cswebhook.sdk.verifier import verify, verify_sync

__all__ = [
    "__version__",
    "DEFAULT_CONFIG",
    "ErrorKind",
    "VerificationConfig",
    "VerificationError",
    "verify",
    "verify_sync",
]
