"""
Identity Adapters — Implementaciones de IdentityProvider y AuthSession.

Backends disponibles:
- InMemoryIdentityProvider: Para desarrollo y tests
- FirebaseIdentityProvider: Firebase Auth vía firebase-admin
"""

from .memory import InMemoryAuthSession, InMemoryIdentityProvider


# Lazy imports para no exigir dependencias opcionales
def get_firebase_provider():
    from .firebase import FirebaseIdentityProvider
    return FirebaseIdentityProvider


__all__ = [
    "InMemoryAuthSession",
    "InMemoryIdentityProvider",
    "get_firebase_provider",
]
