# -*- coding: utf-8 -*-
# Extracción de tokens CSRF desde el HTML de la consola web de la impresora
# El marcado depende del firmware; la estrategia de parseo vive aislada aquí

import re
from typing import Optional

# Nombre del campo oculto que el firmware usa para todos sus tokens
CSRF_FIELD_NAME = "CSRFToken"

class RegexTokenExtractor:
    # Busca el atributo literal id="<elemento>" name="CSRFToken" value="<token>"
    # tal como lo escribe el firmware (mismo orden de atributos, comillas dobles)

    def __init__(self, field_name: str = CSRF_FIELD_NAME):
        self.field_name = field_name

    def pattern_for(self, element_id: str) -> "re.Pattern":
        return re.compile(
            f'id="{re.escape(element_id)}" name="{re.escape(self.field_name)}" value="([^"]+)"'
        )

    def extract(self, html: str, element_id: str) -> Optional[str]:
        if not html:
            return None
        match = self.pattern_for(element_id).search(html)
        return match.group(1) if match else None

default_extractor = RegexTokenExtractor()

def extract_token(html: str, element_id: str) -> Optional[str]:
    return default_extractor.extract(html, element_id)
