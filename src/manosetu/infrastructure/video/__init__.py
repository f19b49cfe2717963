"""
Media-transport credential signing.

The provider implementation is imported lazily so the rest of the
application does not depend on the provider SDK being importable.
"""

from typing import Optional

from manosetu.infrastructure.video.signer import CredentialRole, CredentialSigner

# Singleton instance for reuse
_signer: Optional[CredentialSigner] = None


def get_credential_signer() -> CredentialSigner:
    """Get the configured credential signer."""
    global _signer
    if _signer is None:
        from manosetu.infrastructure.video.agora_signer import AgoraTokenSigner
        _signer = AgoraTokenSigner()
    return _signer


__all__ = [
    "CredentialRole",
    "CredentialSigner",
    "get_credential_signer",
]
