#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Punto de entrada del servidor
# Usa uvicorn para iniciar FastAPI

import sys

# Cargar variables desde archivo .env antes de importar la configuración
from dotenv import load_dotenv
load_dotenv()

from printhub.config.settings import settings
from printhub.utils.logging_setup import setup_logging, validate_configuration
from printhub.utils.network import get_primary_ip


def main() -> int:
    setup_logging()
    if not validate_configuration():
        return 1

    host = settings.SERVER_HOST
    port = settings.SERVER_PORT

    # Banner informativo
    print("=" * 60)
    print("    SERVIDOR DE MANTENIMIENTO DE IMPRESORA")
    print("=" * 60)
    print(f"  Host: {host}")
    print(f"  Puerto: {port}")
    print(f"  Acceso local: {settings.get_web_interface_url(get_primary_ip())}")
    print(f"  Impresora: {settings.PRINTER_BASE_URL}")
    print(f"  Presiona Ctrl+C para detener el servidor")
    print("=" * 60)
    print()

    # Import diferido para evitar costos al inspeccionar
    import uvicorn
    uvicorn.run("printhub.web.api:app", host=host, port=port, reload=False, workers=1, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
