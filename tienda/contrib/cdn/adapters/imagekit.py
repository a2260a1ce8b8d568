"""
ImageKit CDN — Firma de uploads directos desde el navegador.

El navegador sube el archivo a https://upload.imagekit.io/api/v1/files/upload
con (token, expire, signature, publicKey); la clave privada nunca sale del
servidor.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time

from tienda.exceptions import UpstreamFailure
from tienda.ids import generate_token
from tienda.protocols import UploadSignature

logger = logging.getLogger(__name__)


class ImageKitCDN:
    """
    Args:
        public_key: Clave pública de ImageKit
        private_key: Clave privada de ImageKit
        ttl: Validez de la firma en segundos (ImageKit acepta hasta 3600)
    """

    DEFAULT_TTL = 30 * 60

    def __init__(self, public_key: str = "", private_key: str = "", *, ttl: int = DEFAULT_TTL):
        self.public_key = public_key
        self.private_key = private_key
        self.ttl = ttl

    def sign_upload(self, *, token: str | None = None, expire: int | None = None) -> UploadSignature:
        if not self.private_key or not self.public_key:
            logger.warning("ImageKit sin claves configuradas")
            raise UpstreamFailure(
                "cdn_not_configured",
                "ImageKit keys not configured",
                status_code=500,
            )

        token = token or generate_token()
        expire = expire or int(time.time()) + self.ttl
        signature = hmac.new(
            self.private_key.encode(),
            f"{token}{expire}".encode(),
            hashlib.sha1,
        ).hexdigest()
        return UploadSignature(token=token, expire=expire, signature=signature, public_key=self.public_key)
