from tienda.protocols import ImageCDN, UploadSignature  # noqa: F401
