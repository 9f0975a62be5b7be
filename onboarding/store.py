"""
In-memory wizard store.

Each browser session gets its own wizard, looked up by a random token kept
in the Flask session. Wizards idle for longer than the timeout are dropped;
nothing is written to disk.
"""

import secrets
import threading
import time
from typing import Dict, Optional, Tuple

from onboarding.wizard import OnboardingWizard


class WizardStore:
    """Token-keyed wizards with idle expiry."""

    def __init__(self, idle_timeout: int = 3600):
        self.idle_timeout = idle_timeout
        self._wizards: Dict[str, Tuple[OnboardingWizard, float]] = {}
        self._lock = threading.Lock()

    def create(self, **wizard_kwargs) -> Tuple[str, OnboardingWizard]:
        """Start a new wizard and return its token."""
        token = secrets.token_urlsafe(32)
        wizard = OnboardingWizard(**wizard_kwargs)
        with self._lock:
            self.cleanup_idle()
            self._wizards[token] = (wizard, time.monotonic())
        return token, wizard

    def get(self, token: Optional[str]) -> Optional[OnboardingWizard]:
        """Look up a wizard, refreshing its last-access time."""
        if not token:
            return None
        with self._lock:
            entry = self._wizards.get(token)
            if entry is None:
                return None
            wizard, last_access = entry
            now = time.monotonic()
            if now - last_access > self.idle_timeout:
                del self._wizards[token]
                return None
            self._wizards[token] = (wizard, now)
            return wizard

    def discard(self, token: Optional[str]):
        with self._lock:
            self._wizards.pop(token, None)

    def cleanup_idle(self):
        """Remove wizards idle longer than the timeout. Caller holds the lock."""
        cutoff = time.monotonic() - self.idle_timeout
        for token in list(self._wizards.keys()):
            if self._wizards[token][1] < cutoff:
                del self._wizards[token]

    def __len__(self) -> int:
        return len(self._wizards)
