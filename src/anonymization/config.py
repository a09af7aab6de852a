"""
Session context for anonymizers.

A SessionContext carries the per-study secrets an anonymizer may read: the
hash salt and the seeds from which GPS and timeline offsets are derived.
Offsets are deterministic for a given session so every record of the
session is shifted identically.
"""

import hashlib
import logging
import os
import secrets
from dataclasses import dataclass
from typing import Optional

from utils.vault_client import VaultClient

logger = logging.getLogger(__name__)

MIN_SALT_LENGTH = 8


@dataclass(frozen=True)
class SessionContext:
    """
    Execution context handed to every anonymizer invocation.

    Attributes:
        session_id: Identifier of the study/protocol the records belong to
        hash_salt: Salt mixed into hashing anonymizers
        participant_id: Participant the device is enrolled as, if any
    """

    session_id: str
    hash_salt: str
    participant_id: Optional[str] = None

    def __post_init__(self):
        if not self.session_id:
            raise ValueError("session_id must be a non-empty string")
        if len(self.hash_salt) < MIN_SALT_LENGTH:
            raise ValueError(
                f"Salt must be at least {MIN_SALT_LENGTH} characters long"
            )

    def _fraction(self, *parts: str) -> float:
        digest = hashlib.sha256(
            ":".join((self.hash_salt, *parts)).encode()
        ).digest()
        return int.from_bytes(digest[:8], "big") / 2**64

    def study_offset(self, label: str) -> float:
        """Return a value in [-1, 1) fixed for the study and label."""
        return self._fraction("study", self.session_id, label) * 2 - 1

    def participant_offset(self, label: str) -> float:
        """
        Return a value in [-1, 1) fixed for the participant and label.

        Devices without a participant id fall back to the study offset so
        their records stay consistent with each other.
        """
        if self.participant_id is None:
            return self.study_offset(label)
        return (
            self._fraction("participant", self.session_id, self.participant_id, label)
            * 2
            - 1
        )


def load_session_context(
    session_id: Optional[str] = None,
    use_vault: bool = False,
    vault_client: Optional[VaultClient] = None,
) -> SessionContext:
    """
    Build the session context from the environment or Vault.

    Environment variables:
        ANON_SESSION_ID: Session identifier (required unless passed in)
        ANON_PARTICIPANT_ID: Participant identifier (optional)
        ANON_HASH_SALT: Hash salt (generated when absent)

    Args:
        session_id: Overrides ANON_SESSION_ID
        use_vault: Read the salt from Vault instead of the environment
        vault_client: Client to use (default: built from VAULT_ADDR/VAULT_TOKEN)

    Returns:
        SessionContext

    Raises:
        ValueError: If no session id is available, Vault is unavailable or
            the salt is too short
    """
    session_id = session_id or os.getenv("ANON_SESSION_ID")
    if not session_id:
        raise ValueError(
            "Session id not provided. Set ANON_SESSION_ID environment variable "
            "or pass session_id parameter."
        )

    participant_id = os.getenv("ANON_PARTICIPANT_ID")

    if use_vault:
        client = vault_client or VaultClient()
        if not client.health_check():
            raise ValueError(f"Vault at {client.vault_addr} is sealed or unreachable")
        secret = client.get_anonymization_secrets(session_id)
        salt = secret["hash_salt"]
        participant_id = secret.get("participant_id", participant_id)
        logger.info(f"Loaded anonymization secrets for session {session_id} from Vault")
    else:
        salt = os.getenv("ANON_HASH_SALT")
        if salt is None:
            salt = secrets.token_hex(16)
            logger.warning(
                "No ANON_HASH_SALT provided. Generated random salt. "
                "For consistent hashing across runs, provide an explicit salt."
            )

    return SessionContext(
        session_id=session_id,
        hash_salt=salt,
        participant_id=participant_id,
    )
