"""
Credentials and request signing.

Provides:
- Project / Organization credentials bound to an environment
- ECDSA request signatures (Access-Id / Access-Time / Access-Signature)
- Key pair generation for registering new credentials
"""

from .credentials import Environment, Organization, Project, User
from .signer import create_key_pair, sign_request, verify_signature

__all__ = [
    "Environment",
    "Organization",
    "Project",
    "User",
    "create_key_pair",
    "sign_request",
    "verify_signature",
]
