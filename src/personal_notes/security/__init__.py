"""Security module for the personal notes service.

Provides AES-256-GCM field encryption, key persistence, and the validity
gate that guards every write.
"""

from personal_notes.security.codec import FieldCodec
from personal_notes.security.encryption import CipherEngine
from personal_notes.security.gate import EncryptionGate
from personal_notes.security.keys import KeyStore

__all__ = ["CipherEngine", "EncryptionGate", "FieldCodec", "KeyStore"]
