"""
HashiCorp Vault client for anonymization secrets

Per-session hash salts live in the KV v2 secrets engine under
``secret/anonymization/<session_id>`` so they never appear in configuration
files or in exported data.
"""

import logging
import os
import re
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

SAFE_PATH = re.compile(r"^[a-zA-Z0-9/_-]+$")
SAFE_SESSION_ID = re.compile(r"^[a-zA-Z0-9_-]+$")


class VaultClient:
    """
    Minimal Vault KV v2 client.
    """

    def __init__(
        self,
        vault_addr: Optional[str] = None,
        vault_token: Optional[str] = None,
        namespace: Optional[str] = None,
        mount_point: str = "secret",
    ):
        """
        Initialize Vault client

        Args:
            vault_addr: Vault server address (default: from VAULT_ADDR env var)
            vault_token: Vault authentication token (default: from VAULT_TOKEN env var)
            namespace: Vault namespace (optional, for Vault Enterprise)
            mount_point: KV v2 mount point

        Raises:
            ValueError: If vault_addr or vault_token are not provided
        """
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_token = vault_token or os.getenv("VAULT_TOKEN")
        self.namespace = namespace
        self.mount_point = mount_point

        if not self.vault_addr:
            raise ValueError(
                "Vault address not provided. Set VAULT_ADDR environment variable "
                "or pass vault_addr parameter."
            )

        if not self.vault_token:
            raise ValueError(
                "Vault token not provided. Set VAULT_TOKEN environment variable "
                "or pass vault_token parameter."
            )

        self.vault_addr = self.vault_addr.rstrip("/")

        self.headers = {
            "X-Vault-Token": self.vault_token,
            "Content-Type": "application/json",
        }
        if self.namespace:
            self.headers["X-Vault-Namespace"] = self.namespace

        logger.info(f"Initialized Vault client for {self.vault_addr}")

    def get_secret(self, secret_path: str) -> Dict[str, Any]:
        """
        Fetch secret data from the KV v2 engine

        Args:
            secret_path: Path below the mount point (e.g., "anonymization/study-42")

        Returns:
            Dictionary containing secret data

        Raises:
            ValueError: If secret_path is invalid or the secret is missing
            requests.RequestException: If the Vault request fails
        """
        if not secret_path or not isinstance(secret_path, str):
            raise ValueError("secret_path must be a non-empty string")

        if ".." in secret_path or secret_path.startswith("/"):
            raise ValueError(
                f"Invalid secret_path: {secret_path}. "
                "Path traversal attempts are not allowed."
            )

        if not SAFE_PATH.match(secret_path):
            raise ValueError(
                f"Invalid secret_path: {secret_path}. "
                "Only alphanumeric characters, slashes, underscores, and hyphens are allowed."
            )

        url = f"{self.vault_addr}/v1/{self.mount_point}/data/{secret_path}"
        logger.debug(f"Fetching secret from: {url}")

        response = requests.get(url, headers=self.headers, timeout=10)

        if response.status_code == 404:
            raise ValueError(f"Secret not found at path: {secret_path}")

        response.raise_for_status()

        secret_data = response.json().get("data", {}).get("data", {})
        if not secret_data:
            raise ValueError(f"No data found in secret at path: {secret_path}")

        return secret_data

    def get_anonymization_secrets(self, session_id: str) -> Dict[str, Any]:
        """
        Fetch the anonymization secrets of a session

        Args:
            session_id: Session (study) identifier

        Returns:
            Dictionary with at least ``hash_salt``

        Raises:
            ValueError: If session_id is invalid or hash_salt is missing
        """
        if not session_id or not SAFE_SESSION_ID.match(session_id):
            raise ValueError(
                f"Invalid session_id: {session_id}. "
                "Only alphanumeric characters, underscores, and hyphens are allowed."
            )

        secret_data = self.get_secret(f"anonymization/{session_id}")

        if "hash_salt" not in secret_data:
            raise ValueError("Missing required field in secret: hash_salt")

        logger.info(f"Fetched anonymization secrets for session {session_id}")
        return secret_data

    def health_check(self) -> bool:
        """
        Check if Vault is accessible and unsealed

        Returns:
            True if Vault is healthy, False otherwise
        """
        url = f"{self.vault_addr}/v1/sys/health"

        try:
            response = requests.get(url, timeout=5)
            # 200 active, 429 standby, 472/473 replication/perf standby
            return response.status_code in [200, 429, 472, 473]
        except requests.RequestException as e:
            logger.error(f"Vault health check failed: {e}")
            return False
