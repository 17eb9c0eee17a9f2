# src/Services/crypto.py

"""
Passphrase Cipher
=================

Device passphrases are stored encrypted and decrypted when the owner
opens the edit form or when the device logs in. The key is derived from
SECRET_KEY and the device name, so renaming a device requires
re-encrypting its passphrase (the edit form always does).

Usage:
    from src.Services.crypto import passphrase_cipher

    token = passphrase_cipher.encrypt("secret", "jan:meteo1")
    passphrase_cipher.decrypt(token, "jan:meteo1")  # "secret"
"""

import base64
import hashlib
from cryptography.fernet import Fernet, InvalidToken

from src.Core.config import settings


class PassphraseCipher:
    """
    Symmetric encryption of device passphrases keyed by device name.
    """

    def __init__(self, secret: str):
        self._secret = secret.encode("utf-8")

    def _fernet(self, name: str) -> Fernet:
        digest = hashlib.sha256(self._secret + b":" + name.encode("utf-8")).digest()
        return Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, passphrase: str, name: str) -> str:
        return self._fernet(name).encrypt(passphrase.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str, name: str) -> str:
        """
        Raises:
            ValueError: token was not produced for this name / secret
        """
        try:
            return self._fernet(name).decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken as e:
            raise ValueError(f"cannot decrypt passphrase of '{name}'") from e


passphrase_cipher = PassphraseCipher(settings.SECRET_KEY)
