from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken

ENCRYPTED_PREFIX = "fernet:"


class EncryptionProvider(Protocol):
    def encrypt(self, value: str) -> str:
        ...

    def decrypt(self, token: str) -> str:
        ...


class FernetEncryptionProvider:
    def __init__(self, key: str):
        self._fernet = Fernet(key.encode("utf-8"))

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str) -> str:
        return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")


@dataclass(slots=True)
class SecurityService:
    """Seal stored secrets (SMTP passwords) when an encryption key is set.

    Without a provider, values are stored and returned as plain text.
    Sealed values carry ``ENCRYPTED_PREFIX`` so plain legacy rows still read.
    """

    encryption_provider: EncryptionProvider | None = None

    def seal(self, value: str | None) -> str | None:
        if not value or self.encryption_provider is None:
            return value
        return ENCRYPTED_PREFIX + self.encryption_provider.encrypt(value)

    def unseal(self, value: str | None) -> str | None:
        if not value or not value.startswith(ENCRYPTED_PREFIX):
            return value
        if self.encryption_provider is None:
            raise ValueError("Encryption provider is required to read a sealed secret")
        try:
            return self.encryption_provider.decrypt(value[len(ENCRYPTED_PREFIX):])
        except InvalidToken as exc:
            raise ValueError("Stored secret cannot be decrypted with the configured key") from exc


def build_security_service(fernet_key: str | None) -> SecurityService:
    if not fernet_key:
        return SecurityService()
    return SecurityService(FernetEncryptionProvider(fernet_key))
