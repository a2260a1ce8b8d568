from tienda.protocols import AuthSession, Identity, IdentityProvider  # noqa: F401
