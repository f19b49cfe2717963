"""
Unit Tests for the Agora Credential Signer
"""

from manosetu.infrastructure.video import get_credential_signer
from manosetu.infrastructure.video.agora_signer import AgoraTokenSigner
from manosetu.infrastructure.video.signer import CredentialRole

APP_ID = "970ca35de60c44645bbae8a215061b33"
APP_CERTIFICATE = "5cfd2fd1755d40ecb72977518be15d3b"


def test_signs_versioned_token():
    token = AgoraTokenSigner().sign(
        app_id=APP_ID,
        app_secret=APP_CERTIFICATE,
        channel_name="session-7d3f",
        uid=2882341273,
        role=CredentialRole.PUBLISHER,
        expire_ts=1446455471,
    )
    
    assert token.startswith("006" + APP_ID)


def test_tokens_differ_per_channel():
    signer = AgoraTokenSigner()
    common = dict(
        app_id=APP_ID,
        app_secret=APP_CERTIFICATE,
        uid=42,
        role=CredentialRole.PUBLISHER,
        expire_ts=1446455471,
    )
    
    assert signer.sign(channel_name="session-a", **common) != signer.sign(channel_name="session-b", **common)


def test_default_signer_is_agora():
    assert get_credential_signer().provider_name == "agora"
