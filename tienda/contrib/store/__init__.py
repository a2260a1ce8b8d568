from tienda.protocols import SERVER_TIMESTAMP, DocumentStore, Page  # noqa: F401
