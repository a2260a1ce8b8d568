"""
Identity tracking — Canal explícito de eventos de identidad.

La sesión de identidad del cliente (AuthSession) publica cada cambio
(uid o None) en un IdentityChannel. El IdentityTracker consume esos
eventos:

- "identidad presente": se adopta de inmediato
- "sin identidad": se dispara un único aprovisionamiento anónimo en vuelo y
  se espera el uid resultante con un tiempo máximo (IdentityTimeout)

Cada adopción incrementa `generation`; los consumidores la usan para
descartar resultados obtenidos para una identidad ya reemplazada.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Callable

from tienda.conf import get_tienda_setting
from tienda.exceptions import IdentityTimeout

logger = logging.getLogger(__name__)


class IdentityChannel:
    """Cola FIFO thread-safe de eventos de identidad (uid o None)."""

    def __init__(self):
        self._queue: queue.Queue[str | None] = queue.Queue()

    def publish(self, uid: str | None) -> None:
        self._queue.put(uid)

    def get(self, timeout: float | None = None) -> str | None:
        """
        Espera el próximo evento.

        Raises:
            queue.Empty: Si no llega ningún evento dentro de `timeout`
        """
        return self._queue.get(timeout=timeout)

    def drain(self) -> list[str | None]:
        """Devuelve los eventos pendientes sin bloquear."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events


class IdentityTracker:
    """
    Sigue la identidad actual de una AuthSession.

    Args:
        session: Sesión de identidad del cliente (AuthSession)
        on_change: Callback `(uid, generation)` invocado en cada adopción
        timeout: Espera máxima del aprovisionamiento anónimo, en segundos
    """

    def __init__(
        self,
        session,
        *,
        on_change: Callable[[str, int], None] | None = None,
        timeout: float | None = None,
    ):
        self.session = session
        self.on_change = on_change
        self.timeout = timeout if timeout is not None else get_tienda_setting("IDENTITY_TIMEOUT")
        self.uid: str | None = None
        self.generation = 0
        self._lock = threading.Lock()
        self._provisioning = False

    def is_current(self, uid: str, generation: int) -> bool:
        """True si (uid, generation) sigue siendo la identidad vigente."""
        return generation == self.generation and uid == self.uid and self.session.current_uid() == uid

    def _adopt(self, uid: str) -> None:
        with self._lock:
            self._provisioning = False
            if uid == self.uid:
                return
            self.uid = uid
            self.generation += 1
            generation = self.generation
        logger.debug("Identidad adoptada: %s (gen %s)", uid, generation)
        if self.on_change:
            self.on_change(uid, generation)

    def _provision(self) -> None:
        with self._lock:
            if self._provisioning:
                return
            self._provisioning = True
            self.uid = None
        logger.debug("Sin identidad: aprovisionando identidad anónima")
        self.session.sign_in_anonymously()

    def handle(self, uid: str | None) -> None:
        """Procesa un evento de identidad."""
        if uid:
            self._adopt(uid)
        else:
            self._provision()

    def ensure_identity(self) -> str:
        """
        Devuelve la identidad vigente, aprovisionando una anónima si no hay.

        Raises:
            IdentityTimeout: Si el uid no llega dentro del tiempo máximo
        """
        uid = self.session.current_uid()
        if uid:
            self._adopt(uid)
            return uid
        self._provision()
        return self.wait_for_identity()

    def wait_for_identity(self) -> str:
        """Consume eventos hasta recibir un uid (espera acotada)."""
        deadline = time.monotonic() + self.timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise IdentityTimeout("identity_timeout", "No se obtuvo identidad a tiempo")
            try:
                uid = self.session.events.get(timeout=remaining)
            except queue.Empty:
                with self._lock:
                    self._provisioning = False
                raise IdentityTimeout("identity_timeout", "No se obtuvo identidad a tiempo")
            if uid:
                self._adopt(uid)
                return uid

    def pump(self) -> None:
        """Procesa los eventos pendientes sin bloquear."""
        for uid in self.session.events.drain():
            self.handle(uid)
