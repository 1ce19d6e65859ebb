# -*- coding: utf-8 -*-
# Configuración del servicio de mantenimiento
# Todo se lee de variables de entorno (cargadas desde .env en run.py)

from urllib.parse import urlparse
import os


class MaintenanceSettings:

    # Configuración del servidor HTTP
    SERVER_HOST = os.getenv('SERVER_HOST', '0.0.0.0')
    SERVER_PORT = int(os.getenv('SERVER_PORT', 8080))

    # Consola web embebida de la impresora
    PRINTER_IP = os.getenv('PRINTER_IP', '192.168.1.100')
    PRINTER_PORT = int(os.getenv('PRINTER_PORT', 80))
    PRINTER_BASE_URL = os.getenv('PRINTER_BASE_URL') or f'http://{PRINTER_IP}:{PRINTER_PORT}'
    PRINTER_PASSWORD = os.getenv('PRINTER_PASSWORD', '')
    PRINTER_TIMEOUT = float(os.getenv('PRINTER_TIMEOUT', 30))  # Segundos por petición

    # Entorno de ejecución: en producción la cookie de sesión se marca como secure
    APP_ENV = os.getenv('APP_ENV', 'development')

    # Historial de resultados de mantenimiento en memoria
    MAX_HISTORY = int(os.getenv('MAX_HISTORY', 10))

    # Configuración de registro/logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', None)  # Ninguno = salida a consola

    # Información de la versión
    VERSION = "1.0.0"
    BUILD_DATE = "2026-10-18"

    @classmethod
    def is_production(cls) -> bool:
        return cls.APP_ENV.lower() == 'production'

    @classmethod
    def get_web_interface_url(cls, host: str = None) -> str:
        return f"http://{host or cls.SERVER_HOST}:{cls.SERVER_PORT}/"

    @classmethod
    def validate_config(cls):
        errors = []

        if cls.SERVER_PORT < 1 or cls.SERVER_PORT > 65535:
            errors.append("SERVER_PORT must be between 1 and 65535")

        parsed = urlparse(cls.PRINTER_BASE_URL)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            errors.append("PRINTER_BASE_URL must be an http(s) URL with a host")

        if cls.PRINTER_TIMEOUT <= 0:
            errors.append("PRINTER_TIMEOUT must be greater than 0")

        if cls.MAX_HISTORY < 1:
            errors.append("MAX_HISTORY must be at least 1")

        return errors

    @classmethod
    def config_warnings(cls):
        warnings = []
        if not cls.PRINTER_PASSWORD:
            warnings.append("PRINTER_PASSWORD is empty; head cleaning will fail to authenticate")
        if cls.is_production() and urlparse(cls.PRINTER_BASE_URL).scheme == "http":
            warnings.append("PRINTER_BASE_URL uses plain http; the printer password travels unencrypted")
        return warnings

# Cargar configuración por defecto
settings = MaintenanceSettings()
