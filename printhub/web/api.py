# -*- coding: utf-8 -*-
# Servidor HTTP FastAPI
# Endpoints de mantenimiento de la impresora (limpieza de cabezales) y salud

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from printhub.config.settings import settings
from printhub.core.cleaning import DEFAULT_CLEANING_TYPE
from printhub.core.maintenance import InvalidCleaningType, MaintenanceBusy, MaintenanceService
from printhub.printer.web_client import MaintenanceError, PrinterAuthError
from printhub.utils.network import get_primary_ip

logger = logging.getLogger(__name__)

app = FastAPI(title="Printer maintenance", version=settings.VERSION)

# Servicio global: garantiza una sola limpieza en curso por proceso
maintenance = MaintenanceService()

# Cookie que se devuelve al navegador con la sesión de la impresora
SESSION_COOKIE_NAME = "printerAuthCookie"


class Health(BaseModel):
    ok: bool
    version: str
    ip_local: str
    impresora_url: str
    password_configurada: bool
    limpieza_en_curso: bool


class CleaningResponse(BaseModel):
    success: bool
    message: str
    cleaning_type: int
    expected_duration: int


class CleaningOptionModel(BaseModel):
    id: int
    name: str
    label: str
    description: str
    duration: int
    ink_usage: str


class OptionsResponse(BaseModel):
    default: int
    options: List[CleaningOptionModel]


def _error(message: str, status_code: int, step: Optional[str] = None) -> JSONResponse:
    body = {"error": message}
    if step:
        body["step"] = step
    return JSONResponse(body, status_code=status_code)


def _status_for(error: MaintenanceError) -> int:
    # Un código HTTP por tipo de falla; el resto de fallas de la cadena son 500
    if isinstance(error, InvalidCleaningType):
        return 400
    if isinstance(error, PrinterAuthError):
        return 401
    if isinstance(error, MaintenanceBusy):
        return 409
    return 500


@app.post("/api/maintenance/head-cleaning")
async def head_cleaning(request: Request):
    try:
        payload = await request.json()
    except ValueError:
        return _error("Request body must be valid JSON", 400)
    if not isinstance(payload, dict) or "type" not in payload:
        return _error("Request body must be a JSON object with a 'type' field", 400)

    try:
        # La cadena bloquea en red; se ejecuta en el threadpool para no frenar el event loop
        result = await run_in_threadpool(maintenance.start_head_cleaning, payload["type"])
    except MaintenanceError as e:
        return _error(str(e), _status_for(e), step=e.step)
    except Exception as e:
        logger.exception(f"Error inesperado en limpieza de cabezales: {e}")
        return _error("Failed to start head cleaning", 500)

    response = JSONResponse(
        CleaningResponse(
            success=True,
            message=result.message,
            cleaning_type=result.cleaning_type,
            expected_duration=result.expected_duration,
        ).model_dump()
    )
    if result.session_cookie:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            result.session_cookie,
            httponly=True,
            secure=settings.is_production(),
        )
    return response


@app.get("/api/maintenance/head-cleaning/options", response_model=OptionsResponse)
async def head_cleaning_options():
    # Catálogo de tipos de limpieza con duración y consumo de tinta
    return OptionsResponse(default=int(DEFAULT_CLEANING_TYPE), options=maintenance.options())


@app.get("/api/maintenance/history")
async def maintenance_history():
    return JSONResponse({"history": maintenance.history()})


@app.get("/health")
async def health():
    health_data = Health(
        ok=not settings.validate_config(),
        version=settings.VERSION,
        ip_local=get_primary_ip(),
        impresora_url=settings.PRINTER_BASE_URL,
        password_configurada=bool(settings.PRINTER_PASSWORD),
        limpieza_en_curso=maintenance.is_busy(),
    )
    return JSONResponse(health_data.model_dump())
