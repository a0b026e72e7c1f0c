"""
Cliente de Supabase del motor de matching.

El motor corre como proceso de servidor (cron, triggers, scripts) y no como
sesión de un usuario: no hay login, así que el cliente se crea sin refresco de
token ni persistencia de sesión, y con la service key cuando está disponible
para poder leer las preferencias de todos los inversores.
"""

from functools import lru_cache

import structlog
from supabase import Client, ClientOptions, create_client

from acematch.config import Settings, get_settings

logger = structlog.get_logger()


def admin_client_options() -> ClientOptions:
    """Opciones para un cliente sin sesión de usuario."""
    return ClientOptions(auto_refresh_token=False, persist_session=False)


class SupabaseClient:
    """Cliente de Supabase junto con el tipo de credencial con que se creó."""

    def __init__(self, client: Client, service_role: bool = False):
        self._client = client
        self.service_role = service_role

    @property
    def client(self) -> Client:
        return self._client

    def table(self, name: str):
        return self._client.table(name)


def create_admin_client(settings: Settings) -> SupabaseClient:
    """
    Crea el cliente con la service key o, si falta, con la anon key.

    Raises:
        ValueError: Si la URL o la anon key no están configuradas
    """
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos. "
            "Configura las variables de entorno."
        )

    service_role = bool(settings.supabase_service_key)
    key = settings.supabase_service_key if service_role else settings.supabase_key

    if not service_role:
        # Con la anon key, RLS solo deja ver las filas públicas
        logger.warning(
            "SUPABASE_SERVICE_KEY no configurada, usando anon key",
            url=settings.supabase_url,
        )

    client = create_client(settings.supabase_url, key, options=admin_client_options())
    logger.info(
        "Cliente de Supabase inicializado",
        url=settings.supabase_url,
        service_role=service_role,
    )
    return SupabaseClient(client, service_role=service_role)


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Cliente compartido por los repositorios (se crea una sola vez)."""
    return create_admin_client(get_settings())
