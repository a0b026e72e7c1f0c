"""
Notificaciones de nuevos matches.

- Ledger: historial de envíos y claims por par (inversor, propiedad)
- Dispatcher: frontera con el servicio de emails
"""

from acematch.notifications.ledger import (
    InMemoryNotificationLedger,
    NotificationLedger,
    RenotifyPolicy,
)
from acematch.notifications.dispatcher import (
    NEW_PROPERTY_MATCH,
    PROPERTY_MATCHES,
    NotificationDispatcher,
    WebhookEmailDispatcher,
    build_payload,
)

__all__ = [
    # Ledger
    "NotificationLedger",
    "InMemoryNotificationLedger",
    "RenotifyPolicy",
    # Dispatcher
    "NotificationDispatcher",
    "WebhookEmailDispatcher",
    "build_payload",
    "NEW_PROPERTY_MATCH",
    "PROPERTY_MATCHES",
]
