# -*- coding: utf-8 -*-
# Cliente de la consola web embebida de la impresora
# Ejecuta la secuencia de limpieza de cabezales: login + cadena de formularios con token CSRF

import logging
import re
from typing import List, Optional
from urllib.parse import quote, urlencode

import requests
from requests.exceptions import RequestException

from printhub.core.cleaning import REFRESH_BUTTON
from printhub.printer.html_tokens import default_extractor
from printhub.utils.logging_setup import mask_secret
from printhub.utils.network import printer_url

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_AUTH_COOKIE_RE = re.compile(r"AuthCookie=([^;,\s]+)")


class MaintenanceError(Exception):
    # Falla terminal de la secuencia; step indica el paso donde se cortó
    step = ""

    def __init__(self, message: str, step: str = None):
        super().__init__(message)
        if step:
            self.step = step


class PrinterAuthError(MaintenanceError):
    step = "authenticate"


class TokenNotFoundError(MaintenanceError):
    step = "fetch_token"


class ActionRejectedError(MaintenanceError):
    step = "finalize_cleaning"


class PrinterWebClient:
    """Cliente de la consola web de la impresora para la limpieza de cabezales.

    Cada paso es un único intercambio petición/respuesta sin reintentos. Un error
    de red dentro de un paso se registra y se devuelve como resultado vacío
    (None/False); quien llama decide abortar. La cookie de sesión la conserva
    quien llama y se adjunta explícitamente en cada petición.
    """

    LOGIN_PATH = "/home/status.html"
    CLEANING_PAGE = "/general/head_cleaning.html"
    CONFIRM_PAGE = "/general/head_cleaning_confirm.html"
    CONFIRM_REFRESH_PAGE = "/general/head_cleaning_confirm.html?pc=12"

    # Ids fijos de los tokens que el firmware devuelve en cada página de confirmación
    CONFIRM_TOKEN_ID = "CSRFToken3"
    REFRESH_TOKEN_ID = "CSRFToken2"

    SUCCESS_MARKER = '<div class="postSuccess">Accepted.</div>'

    def __init__(self, base_url: str, timeout: float = 30, session: requests.Session = None, extractor=None):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.extractor = extractor or default_extractor

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.session.close()

    def _url(self, path: str) -> str:
        return printer_url(self.base_url, path)

    @staticmethod
    def _cookie_header(session_cookie: str) -> str:
        return f"AuthCookie={session_cookie}"

    @staticmethod
    def _form(**fields) -> str:
        # Codificación equivalente a encodeURIComponent: "/" y espacios van escapados
        return urlencode(fields, quote_via=quote)

    def _post_form(self, path: str, session_cookie: str, body: str) -> requests.Response:
        return self.session.post(
            self._url(path),
            data=body,
            headers={
                "Content-Type": FORM_CONTENT_TYPE,
                "Cookie": self._cookie_header(session_cookie),
            },
            timeout=self.timeout,
        )

    @staticmethod
    def _set_cookie_values(response: requests.Response) -> List[str]:
        # requests une varias cabeceras Set-Cookie en una sola; urllib3 las conserva por separado
        raw_headers = getattr(response.raw, "headers", None)
        if raw_headers is not None and hasattr(raw_headers, "getlist"):
            values = raw_headers.getlist("Set-Cookie")
            if values:
                return list(values)
        header = response.headers.get("Set-Cookie")
        return [header] if header else []

    def authenticate(self, password: str) -> Optional[str]:
        body = self._form(B16f=password, loginurl=self.LOGIN_PATH)
        try:
            response = self.session.post(
                self._url(self.LOGIN_PATH),
                data=body,
                headers={"Content-Type": FORM_CONTENT_TYPE},
                allow_redirects=False,
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"Error de red autenticando con la impresora: {e}")
            return None

        # El login exitoso responde con redirección (3xx); 4xx/5xx se tratan como rechazo
        if not 200 <= response.status_code < 400:
            logger.warning(f"Login rechazado por la impresora: HTTP {response.status_code}")
            return None

        for value in self._set_cookie_values(response):
            match = _AUTH_COOKIE_RE.search(value)
            if match:
                logger.info(f"Sesión iniciada en la impresora (cookie {mask_secret(match.group(1))})")
                return match.group(1)

        logger.warning("La impresora no devolvió AuthCookie (¿contraseña incorrecta?)")
        return None

    def fetch_token(self, session_cookie: str, page_path: str, element_id: str) -> Optional[str]:
        try:
            response = self.session.get(
                self._url(page_path),
                headers={"Cookie": self._cookie_header(session_cookie)},
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"Error de red obteniendo token CSRF de {page_path}: {e}")
            return None

        token = self.extractor.extract(response.text, element_id)
        if token is None:
            logger.warning(f"Token {element_id} no encontrado en {page_path} (HTTP {response.status_code})")
        return token

    def initiate_cleaning(self, session_cookie: str, token: str, cleaning_type: int) -> Optional[str]:
        return self._submit_and_scrape(
            self.CONFIRM_PAGE, session_cookie, token, cleaning_type, self.CONFIRM_TOKEN_ID
        )

    def confirm_cleaning(self, session_cookie: str, token: str, cleaning_type: int) -> Optional[str]:
        return self._submit_and_scrape(
            self.CONFIRM_REFRESH_PAGE, session_cookie, token, cleaning_type, self.REFRESH_TOKEN_ID
        )

    def _submit_and_scrape(self, path: str, session_cookie: str, token: str, cleaning_type: int, next_token_id: str) -> Optional[str]:
        body = self._form(CSRFToken=token, btn_def=int(cleaning_type))
        try:
            response = self._post_form(path, session_cookie, body)
        except RequestException as e:
            logger.error(f"Error de red enviando formulario a {path}: {e}")
            return None

        next_token = self.extractor.extract(response.text, next_token_id)
        if next_token is None:
            logger.warning(f"Token {next_token_id} no encontrado tras POST {path} (HTTP {response.status_code})")
        return next_token

    def finalize_cleaning(self, session_cookie: str, token: str) -> bool:
        body = self._form(CSRFToken=token, btn_def=REFRESH_BUTTON)
        try:
            response = self._post_form(self.CLEANING_PAGE, session_cookie, body)
        except RequestException as e:
            logger.error(f"Error de red confirmando la limpieza: {e}")
            return False

        accepted = self.SUCCESS_MARKER in response.text
        if not accepted:
            logger.warning(f"La impresora no aceptó la limpieza (HTTP {response.status_code})")
        return accepted

    def run_head_cleaning(self, password: str, cleaning_type: int) -> str:
        # Secuencia completa; el token de cada paso es la entrada del siguiente.
        # Devuelve la cookie de sesión usada, o lanza el error del primer paso que falle.
        cleaning_type = int(cleaning_type)
        logger.info(f"Iniciando limpieza de cabezales tipo={cleaning_type} en {self.base_url}")

        session_cookie = self.authenticate(password)
        if not session_cookie:
            raise PrinterAuthError("Failed to authenticate with printer")

        initial_token = self.fetch_token(session_cookie, self.CLEANING_PAGE, f"CSRFToken{cleaning_type}")
        if not initial_token:
            raise TokenNotFoundError("Failed to get initial CSRF token", step="fetch_token")

        confirm_token = self.initiate_cleaning(session_cookie, initial_token, cleaning_type)
        if not confirm_token:
            raise TokenNotFoundError("Failed to initiate head cleaning", step="initiate_cleaning")

        refresh_token = self.confirm_cleaning(session_cookie, confirm_token, cleaning_type)
        if not refresh_token:
            raise TokenNotFoundError(
                "Failed to get the refresh CSRF token after confirming head cleaning",
                step="confirm_cleaning",
            )

        if not self.finalize_cleaning(session_cookie, refresh_token):
            raise ActionRejectedError("Failed to confirm head cleaning")

        logger.info(f"Limpieza de cabezales tipo={cleaning_type} aceptada por la impresora")
        return session_cookie
