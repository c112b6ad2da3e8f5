"""Unlock the stored GitHub token.

The token is kept as an SJCL JSON descriptor: AES in CCM mode with a key
derived by PBKDF2-HMAC-SHA256. Every parameter needed to decrypt (IV, salt,
iteration count, key size and tag size) travels inside the descriptor, so the
only secret is the passphrase.
"""
import base64
import json
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESCCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DecryptionError, InvalidDescriptor

DEFAULT_ITERATIONS = 10000
DEFAULT_KEY_SIZE = 128
DEFAULT_TAG_SIZE = 64

KEY_SIZES = (128, 192, 256)
TAG_SIZES = (64, 96, 128)


@dataclass
class EncryptedToken:
    iv: bytes
    salt: bytes
    ct: bytes
    iter: int = DEFAULT_ITERATIONS
    ks: int = DEFAULT_KEY_SIZE
    ts: int = DEFAULT_TAG_SIZE
    adata: bytes = b""
    v: int = 1
    mode: str = "ccm"
    cipher: str = "aes"

    @classmethod
    def parse(cls, descriptor):
        try:
            raw = json.loads(descriptor) if isinstance(descriptor, str) else dict(descriptor)
        except (TypeError, ValueError) as e:
            raise InvalidDescriptor(f"Descriptor is not JSON: {e}") from e
        if not isinstance(raw, dict):
            raise InvalidDescriptor("Descriptor must be a JSON object")

        try:
            token = cls(
                iv=_b64(raw["iv"]),
                salt=_b64(raw["salt"]),
                ct=_b64(raw["ct"]),
                iter=int(raw.get("iter", DEFAULT_ITERATIONS)),
                ks=int(raw.get("ks", DEFAULT_KEY_SIZE)),
                ts=int(raw.get("ts", DEFAULT_TAG_SIZE)),
                adata=_b64(raw.get("adata", "")),
                v=int(raw.get("v", 1)),
                mode=raw.get("mode", "ccm"),
                cipher=raw.get("cipher", "aes"),
            )
        except KeyError as e:
            raise InvalidDescriptor(f"Descriptor is missing {e.args[0]!r}") from e
        except (TypeError, ValueError) as e:
            raise InvalidDescriptor(f"Descriptor field is invalid: {e}") from e

        token.validate()
        return token

    def validate(self):
        if self.v != 1:
            raise InvalidDescriptor(f"Unsupported descriptor version {self.v}")
        if self.cipher != "aes" or self.mode != "ccm":
            raise InvalidDescriptor(f"Unsupported cipher {self.cipher}-{self.mode}")
        if self.ks not in KEY_SIZES:
            raise InvalidDescriptor(f"Unsupported key size {self.ks}")
        if self.ts not in TAG_SIZES:
            raise InvalidDescriptor(f"Unsupported tag size {self.ts}")
        if len(self.iv) < 7 or self.iter < 1:
            raise InvalidDescriptor("IV or iteration count is invalid")
        if len(self.ct) < self.ts // 8:
            raise InvalidDescriptor("Ciphertext is shorter than its tag")

    def dumps(self):
        # Same key order SJCL writes.
        return json.dumps({
            "iv": _b64encode(self.iv),
            "v": self.v,
            "iter": self.iter,
            "ks": self.ks,
            "ts": self.ts,
            "mode": self.mode,
            "adata": _b64encode(self.adata),
            "cipher": self.cipher,
            "salt": _b64encode(self.salt),
            "ct": _b64encode(self.ct),
        }, separators=(",", ":"))


def _b64(value):
    return base64.b64decode(value, validate=True)


def _b64encode(data):
    return base64.b64encode(data).decode("ascii")


def derive_key(passphrase, salt, iterations, key_size):
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=key_size // 8,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def ccm_nonce(iv, message_length):
    """Truncate the IV the way SJCL does before handing it to CCM.

    The length field grows with the message (2 bytes up to 64 KiB), and the
    nonce gets whatever is left of the 15 bytes.
    """
    length_size = 2
    while length_size < 4 and message_length >> (8 * length_size):
        length_size += 1
    if length_size < 15 - len(iv):
        length_size = 15 - len(iv)
    return iv[:15 - length_size]


def decrypt_with_key(key, token):
    """Open the CCM ciphertext in `token` with an already derived key; return bytes."""
    tag_bytes = token.ts // 8
    nonce = ccm_nonce(token.iv, len(token.ct) - tag_bytes)
    try:
        return AESCCM(key, tag_length=tag_bytes).decrypt(nonce, token.ct, token.adata or None)
    except InvalidTag as e:
        raise DecryptionError("Passphrase is incorrect") from e


def decrypt_token(passphrase, descriptor):
    """Return the plaintext token, or raise DecryptionError."""
    if not passphrase:
        raise DecryptionError("No passphrase given")
    if not isinstance(passphrase, str):
        raise DecryptionError("Passphrase must be text")

    token = descriptor if isinstance(descriptor, EncryptedToken) else EncryptedToken.parse(descriptor)
    key = derive_key(passphrase, token.salt, token.iter, token.ks)
    plain = decrypt_with_key(key, token)

    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("Decrypted token is not text") from e


def encrypt_token(passphrase, plaintext, iterations=DEFAULT_ITERATIONS,
                  key_size=DEFAULT_KEY_SIZE, tag_size=DEFAULT_TAG_SIZE):
    """Build a new descriptor string for `plaintext`."""
    if not passphrase:
        raise DecryptionError("No passphrase given")

    token = EncryptedToken(
        iv=os.urandom(16),
        salt=os.urandom(8),
        ct=b"",
        iter=iterations,
        ks=key_size,
        ts=tag_size,
    )
    data = plaintext.encode("utf-8")
    key = derive_key(passphrase, token.salt, token.iter, token.ks)
    nonce = ccm_nonce(token.iv, len(data))
    token.ct = AESCCM(key, tag_length=tag_size // 8).encrypt(nonce, data, None)
    token.validate()
    return token.dumps()

