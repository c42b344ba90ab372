"""Manager access strategies.

- shared_secret: ``?key=`` compared with a configured key
- session: self-hosted password sign-in with a signed cookie
- delegated: hosted identity provider session verified per request
"""
from .base import AccessGate, ManagerIdentity
from .delegated import ClerkSessionGate, IdentityVerificationError
from .factory import create_access_gate
from .session import SignedSessionGate
from .shared_secret import SharedSecretGate

__all__ = [
    "AccessGate",
    "ManagerIdentity",
    "SharedSecretGate",
    "SignedSessionGate",
    "ClerkSessionGate",
    "IdentityVerificationError",
    "create_access_gate",
]
