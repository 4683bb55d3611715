"""
Notification Templates

Single mapping from notification kind to the content emitted to the user.
Messages are ``str.format`` templates rendered against an order context
(``reference``, ``address``, ``total``, ``minutes``).
"""

from dataclasses import dataclass
from typing import Any

from ..value_objects import NotificationChannel, NotificationKind, Urgency


@dataclass(frozen=True)
class NotificationTemplate:
    title: str
    message: str
    urgency: Urgency

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.PUSH if self.urgency == Urgency.HIGH else NotificationChannel.IN_APP

    def render(self, context: dict[str, Any]) -> tuple[str, str]:
        """
        Render title and message.

        Raises:
            KeyError: A placeholder is missing from ``context``
        """
        return self.title.format(**context), self.message.format(**context)


NOTIFICATION_TEMPLATES: dict[NotificationKind, NotificationTemplate] = {
    NotificationKind.ORDER_PLACED: NotificationTemplate(
        "🔄 Commande en attente",
        "Votre commande #{reference} est en cours de traitement",
        Urgency.LOW,
    ),
    NotificationKind.ORDER_CONFIRMED: NotificationTemplate(
        "✅ Commande confirmée",
        "Votre commande #{reference} a été confirmée par la pharmacie. Montant total : {total}",
        Urgency.MEDIUM,
    ),
    NotificationKind.ORDER_TOTAL_UPDATED: NotificationTemplate(
        "Montant mis à jour",
        "La pharmacie a modifié votre commande #{reference}. Nouveau montant total : {total}",
        Urgency.MEDIUM,
    ),
    NotificationKind.ORDER_REJECTED: NotificationTemplate(
        "❌ Commande refusée",
        "La pharmacie n'a pas pu donner suite à votre commande #{reference}",
        Urgency.MEDIUM,
    ),
    NotificationKind.ORDER_PREPARING: NotificationTemplate(
        "🔄 En préparation",
        "Votre commande #{reference} est en cours de préparation",
        Urgency.MEDIUM,
    ),
    NotificationKind.ORDER_READY: NotificationTemplate(
        "📦 Prête pour livraison",
        "Votre commande #{reference} est prête et en attente du livreur",
        Urgency.MEDIUM,
    ),
    NotificationKind.DELIVERY_ASSIGNED: NotificationTemplate(
        "Nouvelle livraison assignée",
        "Commande #{reference} - {address}. Vous avez {minutes} minutes pour accepter.",
        Urgency.HIGH,
    ),
    NotificationKind.DELIVERY_ACCEPTED: NotificationTemplate(
        "Livreur en route",
        "Votre livreur a accepté la livraison et est en route vers votre adresse.",
        Urgency.HIGH,
    ),
    NotificationKind.DELIVERY_REJECTED: NotificationTemplate(
        "Livraison refusée",
        "Vous avez refusé la commande #{reference}. Elle sera réassignée à un autre livreur.",
        Urgency.LOW,
    ),
    NotificationKind.ASSIGNMENT_EXPIRED: NotificationTemplate(
        "Assignation expirée",
        "La commande #{reference} a été réassignée car vous n'avez pas répondu dans les {minutes} minutes.",
        Urgency.LOW,
    ),
    NotificationKind.COURIER_ARRIVED: NotificationTemplate(
        "Livreur arrivé",
        "Votre livreur est arrivé ! Confirmez la réception de votre commande.",
        Urgency.HIGH,
    ),
    NotificationKind.ORDER_DELIVERED: NotificationTemplate(
        "🎉 Livraison terminée",
        "Votre commande #{reference} a été livrée avec succès",
        Urgency.MEDIUM,
    ),
    NotificationKind.DELIVERY_COMPLETED: NotificationTemplate(
        "Livraison confirmée",
        "Le patient a confirmé la réception. Livraison terminée avec succès !",
        Urgency.MEDIUM,
    ),
    NotificationKind.ORDER_FORCE_CONFIRMED: NotificationTemplate(
        "Livraison clôturée par le livreur",
        "Votre livreur a clôturé la livraison de la commande #{reference} sans votre confirmation. "
        "Si vous n'avez pas reçu votre commande, signalez un problème.",
        Urgency.HIGH,
    ),
    NotificationKind.DELIVERY_FORCE_CONFIRMED: NotificationTemplate(
        "Livraison clôturée",
        "Vous avez clôturé la commande #{reference} sans confirmation du patient. Vous êtes de nouveau disponible.",
        Urgency.MEDIUM,
    ),
    NotificationKind.ORDER_CANCELLED: NotificationTemplate(
        "❌ Commande annulée",
        "Votre commande #{reference} a été annulée",
        Urgency.LOW,
    ),
    NotificationKind.DELIVERY_CANCELLED: NotificationTemplate(
        "Livraison annulée",
        "La commande #{reference} a été annulée. Vous êtes de nouveau disponible.",
        Urgency.MEDIUM,
    ),
}

_missing = set(NotificationKind) - set(NOTIFICATION_TEMPLATES)
if _missing:
    raise RuntimeError(f"Missing notification templates: {sorted(k.value for k in _missing)}")


def template_for(kind: NotificationKind) -> NotificationTemplate:
    return NOTIFICATION_TEMPLATES[kind]
