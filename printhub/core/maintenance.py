# -*- coding: utf-8 -*-
# Servicio de mantenimiento: orquesta la limpieza de cabezales contra la impresora
# Una sola secuencia a la vez; mantiene los últimos resultados en memoria

import logging
import threading
import time
from dataclasses import dataclass, asdict, field
from typing import Callable, Dict, List

from printhub.config.settings import settings
from printhub.core.cleaning import CLEANING_OPTIONS, CleaningType, get_option, parse_cleaning_type
from printhub.printer.web_client import MaintenanceError, PrinterAuthError, PrinterWebClient

logger = logging.getLogger(__name__)


class InvalidCleaningType(MaintenanceError):
    step = "validate"


class MaintenanceBusy(MaintenanceError):
    step = "lock"


@dataclass
class MaintenanceResult:
    success: bool
    message: str
    timestamp: int
    cleaning_type: int
    # Paso donde se cortó la secuencia; vacío si terminó bien
    step: str = ""
    # Duración estimada del ciclo en la impresora (ms), útil para el polling del cliente
    expected_duration: int = 0
    # Cookie de la impresora para devolver al navegador; no se guarda en el historial
    session_cookie: str = field(default="", repr=False)


def _public_fields(items) -> Dict[str, object]:
    return {key: value for key, value in items if key != "session_cookie"}


class MaintenanceService:
    def __init__(self, client_factory: Callable[[], PrinterWebClient] = None, password: str = None, max_history: int = None):
        self._client_factory = client_factory or self._default_client
        self._password = password
        self._max_history = max_history or settings.MAX_HISTORY
        # Lock no bloqueante: una segunda limpieza simultánea se rechaza, no se encola
        self._run_lock = threading.Lock()
        self._history_lock = threading.Lock()
        self._history: List[MaintenanceResult] = []

    @staticmethod
    def _default_client() -> PrinterWebClient:
        return PrinterWebClient(settings.PRINTER_BASE_URL, timeout=settings.PRINTER_TIMEOUT)

    @property
    def password(self) -> str:
        return self._password if self._password is not None else settings.PRINTER_PASSWORD

    def is_busy(self) -> bool:
        return self._run_lock.locked()

    def start_head_cleaning(self, value) -> MaintenanceResult:
        cleaning_type = parse_cleaning_type(value)
        if cleaning_type is None:
            raise InvalidCleaningType(f"Invalid cleaning type: {value!r}")

        if not self._run_lock.acquire(blocking=False):
            raise MaintenanceBusy("A head cleaning sequence is already running")
        try:
            return self._run(cleaning_type)
        finally:
            self._run_lock.release()

    def _run(self, cleaning_type: CleaningType) -> MaintenanceResult:
        option = get_option(cleaning_type)
        if not self.password:
            # Sin contraseña la impresora nunca entrega cookie; se falla sin ir a la red
            logger.error("PRINTER_PASSWORD no configurada")
            error = PrinterAuthError("Failed to authenticate with printer")
            self._record(cleaning_type, False, str(error), step=error.step)
            raise error

        try:
            with self._client_factory() as client:
                session_cookie = client.run_head_cleaning(self.password, int(cleaning_type))
        except MaintenanceError as e:
            logger.error(f"Limpieza tipo={cleaning_type.name} abortada en {e.step}: {e}")
            self._record(cleaning_type, False, str(e), step=e.step)
            raise

        result = self._record(
            cleaning_type,
            True,
            "Head cleaning started",
            expected_duration=option.duration,
        )
        result.session_cookie = session_cookie
        return result

    def _record(self, cleaning_type: CleaningType, success: bool, message: str, step: str = "", expected_duration: int = 0) -> MaintenanceResult:
        result = MaintenanceResult(
            success=success,
            message=message,
            timestamp=int(time.time()),
            cleaning_type=int(cleaning_type),
            step=step,
            expected_duration=expected_duration,
        )
        with self._history_lock:
            # Más reciente primero y recorte al máximo configurado
            self._history.insert(0, result)
            if len(self._history) > self._max_history:
                self._history = self._history[:self._max_history]
        return result

    def history(self) -> List[Dict[str, object]]:
        with self._history_lock:
            return [asdict(r, dict_factory=_public_fields) for r in self._history]

    def options(self) -> List[Dict[str, object]]:
        return [option.to_dict() for option in CLEANING_OPTIONS]
