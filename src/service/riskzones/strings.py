"""Localized message bundles."""

from dataclasses import dataclass

DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class Strings:
    """User-facing messages for one locale."""

    locale: str
    wrong_data_format: str
    no_risk_point: str
    inside_risk_point: str
    points_loaded: str
    points_truncated: str
    collection_ready: str


BUNDLES: dict[str, Strings] = {
    "en": Strings(
        locale="en",
        wrong_data_format="Wrong data format",
        no_risk_point="No risk point covers this location",
        inside_risk_point="Location is inside risk point",
        points_loaded="Loaded {count} risk points",
        points_truncated="Removed all risk points",
        collection_ready="Risk point collection is ready",
    ),
    "pt-BR": Strings(
        locale="pt-BR",
        wrong_data_format="Formato de dados incorreto",
        no_risk_point="Nenhum ponto de risco cobre esta localização",
        inside_risk_point="Localização dentro do ponto de risco",
        points_loaded="{count} pontos de risco carregados",
        points_truncated="Todos os pontos de risco foram removidos",
        collection_ready="Coleção de pontos de risco pronta",
    ),
}


def get_strings(locale: str | None = None) -> Strings:
    """Return the bundle for a locale.

    Falls back to the bundle for the language part of the tag (``pt`` for
    ``pt-PT``) and then to English.
    """
    if not locale:
        return BUNDLES[DEFAULT_LOCALE]
    if locale in BUNDLES:
        return BUNDLES[locale]
    language = locale.replace("_", "-").split("-")[0].lower()
    for tag, bundle in BUNDLES.items():
        if tag.split("-")[0].lower() == language:
            return bundle
    return BUNDLES[DEFAULT_LOCALE]
