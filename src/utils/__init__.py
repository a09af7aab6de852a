"""
Shared infrastructure for the anonymization engine

Provides:
- logging: Structured logging setup and formatters
- tracing: OpenTelemetry tracer setup and helpers
- vault_client: HashiCorp Vault access for per-session secrets
"""

__version__ = "1.0.0"
__all__ = ["logging", "tracing", "vault_client"]
