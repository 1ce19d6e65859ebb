# -*- coding: utf-8 -*-
# Utilidades de red para obtener la IP local y armar URLs de la impresora

import socket
from urllib.parse import urljoin

def get_primary_ip() -> str:
    # Obtiene la IP local primaria intentando conectar a un destino público
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.settimeout(1)
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError:
        try:
            return socket.gethostbyname(socket.gethostname())
        except OSError:
            return "0.0.0.0"

def printer_url(base_url: str, path: str) -> str:
    # Une la URL base configurada con una ruta absoluta de la consola de la impresora
    # (conserva el query string, p.ej. "?pc=12")
    return urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))
