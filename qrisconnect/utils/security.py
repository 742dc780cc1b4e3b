import base64
import hashlib
import hmac
from pathlib import Path
from typing import Optional, Protocol

from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA
from Crypto.Signature import pkcs1_15

from ..errors import SigningError


class Signer(Protocol):
    def sign(self, message: str) -> str:
        ...


def hmac_sha512_hex(secret: str, payload: bytes) -> str:
    mac = hmac.new(secret.encode("utf-8"), payload, hashlib.sha512).digest()
    return mac.hex()


def sha256_hex(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


def basic_auth(client_id: str, client_secret: str) -> str:
    token = base64.b64encode(f"{client_id}:{client_secret}".encode("utf-8")).decode("utf-8")
    return f"Basic {token}"


class HmacSigner:
    """hex(HMAC-SHA512(secret, message))"""

    def __init__(self, secret: str):
        self._secret = secret

    def sign(self, message: str) -> str:
        return hmac_sha512_hex(self._secret, message.encode("utf-8"))


class RsaSigner:
    """
    base64(RSASSA-PKCS1-v1_5(SHA256(message))).

    The key is either PEM text or a path to a PEM file (PKCS#1 as issued by the
    bank; PKCS#8 is accepted as well). It is loaded on the first signature and
    kept for the lifetime of the signer.
    """

    def __init__(self, private_key: Optional[str] = None, private_key_path: Optional[str] = None):
        self._pem = private_key or None
        self._path = private_key_path or None
        self._key: Optional[RSA.RsaKey] = None

    def _load_key(self) -> RSA.RsaKey:
        if self._key is not None:
            return self._key

        pem = self._pem
        if pem is None:
            if not self._path:
                raise SigningError("RSA private key is not configured")
            try:
                pem = Path(self._path).read_text(encoding="utf-8")
            except OSError as exc:
                raise SigningError(f"cannot read private key {self._path}: {exc}") from exc

        try:
            key = RSA.import_key(pem)
        except (ValueError, IndexError, TypeError) as exc:
            raise SigningError(f"malformed RSA private key: {exc}") from exc
        if not key.has_private():
            raise SigningError("RSA key has no private part")

        self._key = key
        return key

    def sign(self, message: str) -> str:
        key = self._load_key()
        digest = SHA256.new(message.encode("utf-8"))
        try:
            signature = pkcs1_15.new(key).sign(digest)
        except (ValueError, TypeError) as exc:
            raise SigningError(f"RSA signing failed: {exc}") from exc
        return base64.b64encode(signature).decode("utf-8")
