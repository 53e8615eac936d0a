from deliveryapp.notifications.events import Audience, OrderTrigger


def toast_for(audience: Audience, trigger: OrderTrigger, order) -> tuple:
    """(title, description, variant) shown for a trigger."""

    if audience == Audience.ADMIN and trigger == OrderTrigger.NEW_ORDER:
        return (
            "🎉 Novo Pedido Recebido!",
            f"Pedido de {order.customer_name} - R$ {order.total:.2f}",
            "default",
        )

    if trigger == OrderTrigger.PREPARING:
        return ("Pedido Aceito! 🎉", "Seu pedido está sendo preparado.", "default")

    if trigger == OrderTrigger.DELIVERING:
        return ("Pedido Saiu para Entrega! 🚚", "Seu pedido está a caminho.", "default")

    if trigger == OrderTrigger.DELIVERED:
        return ("Pedido Entregue! ✓", "Obrigado pela preferência!", "default")

    if trigger == OrderTrigger.REJECTED:
        return (
            "Pedido Rejeitado 😔",
            order.rejection_reason or "Entre em contato para mais informações.",
            "destructive",
        )

    return ("Pedido atualizado", "", "default")
