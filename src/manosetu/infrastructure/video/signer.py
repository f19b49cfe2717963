"""
Credential Signer Abstract Interface

Defines the contract for media-transport token signing.
The signing algorithm belongs to the provider; the backend only
supplies channel, identity, role and expiry.
"""

from abc import ABC, abstractmethod
from enum import IntEnum


class CredentialRole(IntEnum):
    """Privilege level of a room credential, as numbered by the provider."""
    
    PUBLISHER = 1
    SUBSCRIBER = 2


class CredentialSigner(ABC):
    """Secret-keyed token signing primitive of the media-transport provider."""
    
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name for logging/tracking."""
        pass
    
    @abstractmethod
    def sign(
        self,
        *,
        app_id: str,
        app_secret: str,
        channel_name: str,
        uid: int,
        role: CredentialRole,
        expire_ts: int,
    ) -> str:
        """
        Sign a room credential.
        
        Args:
            app_id: Provider application id
            app_secret: Provider application certificate
            channel_name: Channel the credential is scoped to
            uid: Numeric identity within the channel
            role: Privilege level
            expire_ts: Expiry as epoch seconds
            
        Returns:
            Opaque token string
        """
        pass
