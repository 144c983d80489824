"""
Signing secret providers.

A provider hands the verifier every secret that is currently accepted.
Verification succeeds when any secret's digest matches any signature in the
header, which lets a webhook endpoint roll its secret without downtime.
"""

from typing import Protocol, Sequence, Tuple, Union, runtime_checkable

from payhook.config import get_settings
from payhook.errors import MissingSecretError


@runtime_checkable
class SecretProvider(Protocol):
    """Source of candidate signing secrets."""

    def candidate_secrets(self) -> Sequence[bytes]: ...


def _to_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, bytes):
        return secret
    if isinstance(secret, str):
        return secret.encode("utf-8")
    raise TypeError(f"secret must be str or bytes, not {type(secret).__name__}")


class StaticSecret:
    """Provider wrapping a single signing secret."""

    __slots__ = ("_secret",)

    def __init__(self, secret: Union[str, bytes]):
        secret = _to_bytes(secret)
        if not secret:
            raise MissingSecretError("Signing secret must not be empty")
        self._secret = secret

    def candidate_secrets(self) -> Tuple[bytes, ...]:
        return (self._secret,)

    def __repr__(self) -> str:
        return "StaticSecret(<redacted>)"


class RotatingSecrets:
    """
    Provider for several simultaneously active secrets.

    Order is preserved; put the newest secret first.
    """

    __slots__ = ("_secrets",)

    def __init__(self, secrets: Sequence[Union[str, bytes]]):
        converted = tuple(_to_bytes(secret) for secret in secrets if secret)
        if not converted:
            raise MissingSecretError("At least one non-empty signing secret is required")
        self._secrets = converted

    def candidate_secrets(self) -> Tuple[bytes, ...]:
        return self._secrets

    def __len__(self) -> int:
        return len(self._secrets)

    def __repr__(self) -> str:
        return f"RotatingSecrets(<{len(self._secrets)} redacted>)"


SecretLike = Union[str, bytes, SecretProvider]


def resolve_secret_provider(secret: Union[SecretLike, None] = None) -> SecretProvider:
    """
    Turn whatever the caller passed into a SecretProvider.

    None falls back to WEBHOOK_SECRET / WEBHOOK_SECRETS from settings.

    Raises:
        MissingSecretError: if no secret is passed and none is configured
    """
    if secret is None:
        configured = get_settings().configured_secrets()
        if not configured:
            raise MissingSecretError(
                "No signing secret provided and WEBHOOK_SECRET is not configured"
            )
        return RotatingSecrets(configured)
    if isinstance(secret, (str, bytes)):
        return StaticSecret(secret)
    if isinstance(secret, SecretProvider):
        return secret
    raise TypeError(
        f"secret must be str, bytes or a SecretProvider, not {type(secret).__name__}"
    )
