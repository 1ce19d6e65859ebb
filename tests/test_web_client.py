# -*- coding: utf-8 -*-
# Pruebas del cliente de la consola web de la impresora

import pytest
import requests

from printhub.printer.web_client import (
    ActionRejectedError,
    PrinterAuthError,
    PrinterWebClient,
    TokenNotFoundError,
)
from fake_printer import FakePrinterSession, make_response, token_input

BASE_URL = "http://printer.local"


def make_client(session) -> PrinterWebClient:
    return PrinterWebClient(BASE_URL, timeout=5, session=session)


class TestAuthenticate:

    # Devuelve el valor de AuthCookie presente en Set-Cookie
    def test_returns_cookie_value(self):
        session = FakePrinterSession(password="secret", cookie="X")
        assert make_client(session).authenticate("secret") == "X"

    # Sin AuthCookie en la respuesta no hay sesión
    def test_missing_cookie_returns_none(self):
        session = FakePrinterSession(password="secret")
        assert make_client(session).authenticate("wrong") is None

    # Formulario de login codificado como la consola lo espera y sin seguir redirecciones
    def test_login_request_shape(self):
        session = FakePrinterSession(password="p@ss word")
        assert make_client(session).authenticate("p@ss word") == "sess42"
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["target"] == "/home/status.html"
        assert call["data"] == "B16f=p%40ss%20word&loginurl=%2Fhome%2Fstatus.html"
        assert call["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        assert call["allow_redirects"] is False

    # AuthCookie puede venir detrás de otras cookies en la misma cabecera
    def test_cookie_among_other_cookies(self):
        class Session(FakePrinterSession):
            def post(self, url, **kwargs):
                return make_response("", status=302, headers={
                    "Set-Cookie": "lang=es; Path=/, AuthCookie=abc123; Path=/; HttpOnly",
                })
        assert make_client(Session()).authenticate("secret") == "abc123"

    # Un código de error HTTP se trata como login rechazado
    def test_error_status_returns_none(self):
        class Session(FakePrinterSession):
            def post(self, url, **kwargs):
                return make_response("denied", status=401, headers={"Set-Cookie": "AuthCookie=zzz"})
        assert make_client(Session()).authenticate("secret") is None

    # Error de red: se registra y se devuelve None, sin reintentos
    def test_network_error_returns_none(self):
        session = FakePrinterSession(fail_on="/home/status.html")
        assert make_client(session).authenticate("secret") is None
        assert len(session.calls) == 1


class TestFetchToken:

    # Extrae el token del elemento pedido y envía la cookie de sesión
    def test_extracts_token(self):
        session = FakePrinterSession()
        token = make_client(session).fetch_token("sess42", "/general/head_cleaning.html", "CSRFToken7")
        assert token == "initial-7"
        assert session.calls[0]["headers"]["Cookie"] == "AuthCookie=sess42"

    # Sin el patrón en el HTML el resultado es None
    def test_absent_token_returns_none(self):
        session = FakePrinterSession()
        assert make_client(session).fetch_token("bad-cookie", "/general/head_cleaning.html", "CSRFToken7") is None

    # La estrategia de extracción es intercambiable
    def test_custom_extractor(self):
        class FixedExtractor:
            def __init__(self):
                self.seen = []

            def extract(self, html, element_id):
                self.seen.append(element_id)
                return "fixed"

        extractor = FixedExtractor()
        client = PrinterWebClient(BASE_URL, session=FakePrinterSession(), extractor=extractor)
        assert client.fetch_token("sess42", "/general/head_cleaning.html", "CSRFToken1") == "fixed"
        assert extractor.seen == ["CSRFToken1"]


class TestCleaningSteps:

    # initiate_cleaning busca el token fijo CSRFToken3
    def test_initiate_returns_confirm_token(self):
        session = FakePrinterSession()
        token = make_client(session).initiate_cleaning("sess42", "initial-4", 4)
        assert token == "confirm-tok"
        assert session.calls[0]["target"] == "/general/head_cleaning_confirm.html"
        assert session.calls[0]["form"] == {"CSRFToken": "initial-4", "btn_def": "4"}

    # confirm_cleaning usa la variante ?pc=12 y busca CSRFToken2
    def test_confirm_returns_refresh_token(self):
        session = FakePrinterSession()
        token = make_client(session).confirm_cleaning("sess42", "confirm-tok", 4)
        assert token == "refresh-tok"
        assert session.calls[0]["target"] == "/general/head_cleaning_confirm.html?pc=12"

    # finalize_cleaning solo es exitoso con el marcador literal
    def test_finalize_requires_marker(self):
        assert make_client(FakePrinterSession()).finalize_cleaning("sess42", "refresh-tok") is True
        assert make_client(FakePrinterSession(accept=False)).finalize_cleaning("sess42", "refresh-tok") is False

    # El token se codifica en el cuerpo del formulario
    def test_token_is_url_encoded(self):
        class Session(FakePrinterSession):
            def post(self, url, data=None, **kwargs):
                self.calls.append({"data": data})
                return make_response(token_input("CSRFToken3", "next"))
        session = Session()
        make_client(session).initiate_cleaning("sess42", "a+b/c=", 2)
        assert session.calls[0]["data"] == "CSRFToken=a%2Bb%2Fc%3D&btn_def=2"


class TestRunHeadCleaning:

    # Cadena completa contra la consola simulada
    def test_full_chain_succeeds(self):
        session = FakePrinterSession()
        cookie = make_client(session).run_head_cleaning("secret", 7)
        assert cookie == "sess42"
        assert session.targets() == [
            "POST /home/status.html",
            "GET /general/head_cleaning.html",
            "POST /general/head_cleaning_confirm.html",
            "POST /general/head_cleaning_confirm.html?pc=12",
            "POST /general/head_cleaning.html",
        ]
        assert session.calls[-1]["form"] == {"CSRFToken": "refresh-tok", "btn_def": "14"}

    # El tipo de limpieza llega sin cambios como btn_def en los pasos 3 y 4
    @pytest.mark.parametrize("cleaning_type", [1, 9, 10])
    def test_cleaning_type_forwarded(self, cleaning_type):
        session = FakePrinterSession()
        make_client(session).run_head_cleaning("secret", cleaning_type)
        assert session.calls[2]["form"]["btn_def"] == str(cleaning_type)
        assert session.calls[3]["form"]["btn_def"] == str(cleaning_type)

    # Todas las peticiones posteriores al login llevan la cookie de sesión
    def test_cookie_attached_to_every_step(self):
        session = FakePrinterSession(cookie="abc")
        make_client(session).run_head_cleaning("secret", 7)
        for call in session.calls[1:]:
            assert call["headers"]["Cookie"] == "AuthCookie=abc"

    # Contraseña incorrecta: se aborta en el primer paso
    def test_auth_failure_aborts(self):
        session = FakePrinterSession()
        with pytest.raises(PrinterAuthError) as info:
            make_client(session).run_head_cleaning("wrong", 7)
        assert info.value.step == "authenticate"
        assert len(session.calls) == 1

    # Sin CSRFToken3 la cadena se corta antes de los pasos 4 y 5
    def test_missing_confirm_token_aborts_before_confirm(self):
        session = FakePrinterSession(omit=("CSRFToken3",))
        with pytest.raises(TokenNotFoundError) as info:
            make_client(session).run_head_cleaning("secret", 7)
        assert info.value.step == "initiate_cleaning"
        assert len(session.calls) == 3
        assert "POST /general/head_cleaning_confirm.html?pc=12" not in session.targets()

    # Sin CSRFToken2 no se envía el formulario final
    def test_missing_refresh_token_aborts(self):
        session = FakePrinterSession(omit=("CSRFToken2",))
        with pytest.raises(TokenNotFoundError) as info:
            make_client(session).run_head_cleaning("secret", 7)
        assert info.value.step == "confirm_cleaning"
        assert len(session.calls) == 4

    # Marcador de éxito ausente en la respuesta final
    def test_rejected_action(self):
        with pytest.raises(ActionRejectedError) as info:
            make_client(FakePrinterSession(accept=False)).run_head_cleaning("secret", 7)
        assert info.value.step == "finalize_cleaning"

    # Error de red a mitad de la cadena se reporta como falla de ese paso
    def test_network_error_mid_chain(self):
        session = FakePrinterSession(fail_on="/general/head_cleaning.html")
        with pytest.raises(TokenNotFoundError) as info:
            make_client(session).run_head_cleaning("secret", 7)
        assert info.value.step == "fetch_token"
        assert len(session.calls) == 2

    # El cliente cierra su sesión HTTP al salir del contexto
    def test_context_manager_closes_session(self):
        session = FakePrinterSession()
        with make_client(session):
            pass
        assert session.closed is True


# La URL base puede incluir un prefijo de ruta
def test_base_url_with_prefix():
    session = FakePrinterSession()
    client = PrinterWebClient("http://printer.local/console/", session=session)
    client.authenticate("secret")
    assert session.calls[0]["target"] == "/console/home/status.html"
    assert isinstance(client.session, FakePrinterSession)


# Por defecto se crea una requests.Session propia
def test_default_session():
    client = PrinterWebClient(BASE_URL)
    assert isinstance(client.session, requests.Session)
    client.close()
