"""Enum definitions for storefront models.

``OrderStatus`` is a closed lifecycle: every member carries its display
metadata, its successor and the notification sent when an order enters it.
"""

import enum
from dataclasses import dataclass
from typing import Optional


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


@dataclass(frozen=True)
class NotificationTemplate:
    title: str
    # Formatted with ``ref`` (short order reference) and ``total``.
    message: str

    def render(self, ref: str, total: str) -> tuple[str, str]:
        return self.title, self.message.format(ref=ref, total=total)


@dataclass(frozen=True)
class StatusInfo:
    label: str
    description: str
    icon: str
    next_status: Optional["OrderStatus"]
    notification: Optional[NotificationTemplate]


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    READY_FOR_PICKUP = "ready_for_pickup"
    COMPLETED = "completed"

    @property
    def info(self) -> StatusInfo:
        return _STATUS_INFO[self]

    @property
    def label(self) -> str:
        return self.info.label

    @property
    def next_status(self) -> Optional["OrderStatus"]:
        return self.info.next_status

    @property
    def is_terminal(self) -> bool:
        return self.info.next_status is None

    @classmethod
    def lifecycle(cls) -> list["OrderStatus"]:
        """Statuses in lifecycle order, starting at the creation state."""
        ordered = [cls.PENDING]
        while ordered[-1].next_status is not None:
            ordered.append(ordered[-1].next_status)
        return ordered


ORDER_CONFIRMED = NotificationTemplate(
    title="Commande confirmée",
    message=(
        "Votre commande #{ref} d'un montant de {total} a été reçue. "
        "Nous vous tiendrons informé de son avancement."
    ),
)

_STATUS_INFO: dict[OrderStatus, StatusInfo] = {
    OrderStatus.PENDING: StatusInfo(
        label="En attente",
        description="Votre commande a été reçue",
        icon="clock",
        next_status=OrderStatus.PROCESSING,
        # Creation sends ORDER_CONFIRMED; nothing transitions *into* pending.
        notification=None,
    ),
    OrderStatus.PROCESSING: StatusInfo(
        label="En préparation",
        description="Nous préparons votre commande",
        icon="package",
        next_status=OrderStatus.READY_FOR_PICKUP,
        notification=NotificationTemplate(
            title="Commande en préparation",
            message=(
                "Votre commande #{ref} est en cours de préparation. "
                "Nous vous préviendrons quand elle sera prête."
            ),
        ),
    ),
    OrderStatus.READY_FOR_PICKUP: StatusInfo(
        label="Prêt à retirer",
        description="Venez récupérer votre commande en magasin",
        icon="truck",
        next_status=OrderStatus.COMPLETED,
        notification=NotificationTemplate(
            title="🎉 Commande prête !",
            message=(
                "Votre commande #{ref} est prête ! Venez la récupérer en magasin "
                "et procéder au paiement."
            ),
        ),
    ),
    OrderStatus.COMPLETED: StatusInfo(
        label="Terminée",
        description="Commande récupérée",
        icon="check-circle",
        next_status=None,
        notification=NotificationTemplate(
            title="Commande terminée",
            message=(
                "Merci pour votre achat ! Votre commande #{ref} a été récupérée. "
                "À bientôt chez Cabella KC !"
            ),
        ),
    ),
}

_missing = set(OrderStatus) - set(_STATUS_INFO)
if _missing:
    raise RuntimeError(f"Order statuses without metadata: {sorted(s.value for s in _missing)}")
