"""
Jerarquía de excepciones de acematch.
"""


class AcematchError(Exception):
    """Base de todos los errores del servicio."""


class CandidateFetchError(AcematchError):
    """
    No se pudo obtener el set completo de candidatos desde la base.

    Es reintentable: el caller puede volver a invocar la operación.
    Nunca se devuelven resultados parciales.
    """


class DispatchError(AcematchError):
    """El servicio de notificaciones no pudo entregar un aviso."""


class ConfigurationError(AcematchError):
    """Configuración inválida (ej: pesos que no suman 100)."""
