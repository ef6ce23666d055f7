"""
Bundle de traductions (locales/<langue>.toml) utilisé par le rapport PDF et l'email.
Les clés sont aplaties en notation pointée : "control.warning_lights", "report.title"...
"""

import tomllib
from functools import lru_cache
from pathlib import Path

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"
DEFAULT_LANGUAGE = "fr"


def _flatten(data: dict, prefix: str = "") -> dict[str, str]:
    flat = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{full_key}."))
        else:
            flat[full_key] = str(value)
    return flat


@lru_cache(maxsize=None)
def load_messages(language: str = DEFAULT_LANGUAGE) -> dict[str, str]:
    """Charge et aplatit le fichier de traductions d'une langue (une seule lecture par langue)."""
    with open(LOCALES_DIR / f"{language}.toml", "rb") as f:
        return _flatten(tomllib.load(f))


def translate(key: str, language: str = DEFAULT_LANGUAGE, **params) -> str:
    """
    Retourne le libellé traduit, interpolé avec params ("{id}" → params["id"]).
    Une clé absente du bundle est renvoyée telle quelle.
    """
    message = load_messages(language).get(key)
    if message is None:
        return key
    return message.format(**params) if params else message
