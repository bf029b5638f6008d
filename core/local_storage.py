# core/local_storage.py

"""
Key-value storage for sign-in flow state.

The only key in use is EMAIL_FOR_SIGN_IN: it is written when a
password setup link is sent and cleared once the link is redeemed, so
a later load on the same device can finish the flow without asking for
the address again.
"""

from typing import Dict, Optional


EMAIL_FOR_SIGN_IN = "emailForSignIn"


class MemoryStorage:
    """Process-local storage. Also used to stage values carried in cookies."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data = {k: v for k, v in (initial or {}).items() if v is not None}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value

    def remove(self, key: str):
        self._data.pop(key, None)

