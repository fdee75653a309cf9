"""SecretEntry model: encrypted key/value rows backing the secret store"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from mssp_console.database import Base


class SecretEntry(Base):
    """One secret value (password hash, TOTP secret, backup code digests).

    ``value`` is Fernet ciphertext. ``version`` increases on every write and is
    the compare-and-set token used by :class:`~mssp_console.core.secret_store.SecretStore`.
    """

    __tablename__ = "secrets"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
