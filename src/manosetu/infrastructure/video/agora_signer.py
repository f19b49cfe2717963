"""
Agora RTC Credential Signer

Implementation of the credential signer interface using the
Agora access token algorithm.
"""

from agora_token_builder import RtcTokenBuilder

from manosetu.infrastructure.video.signer import CredentialRole, CredentialSigner


class AgoraTokenSigner(CredentialSigner):
    """
    Agora RTC token signer.
    
    Usage:
        signer = AgoraTokenSigner()
        token = signer.sign(app_id=..., app_secret=..., channel_name=..., ...)
    """
    
    @property
    def provider_name(self) -> str:
        return "agora"
    
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
        return RtcTokenBuilder.buildTokenWithUid(
            app_id,
            app_secret,
            channel_name,
            uid,
            int(role),
            expire_ts,
        )
