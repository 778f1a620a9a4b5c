"""
Textos (HTML) dos e-mails transacionais do pedido.
"""
from __future__ import annotations

from dataclasses import dataclass
from html import escape

from storefront.domain.core.money import format_brl

SUBJECT_ORDER_RECEIVED = "Pedido Recebido! Finalize o Pagamento 💠"
SUBJECT_PAYMENT_APPROVED = "Pagamento Aprovado! Seu pedido está sendo preparado 🚀"
SUBJECT_ORDER_SHIPPED = "Seu Pedido foi Enviado! 🚚"


@dataclass(frozen=True)
class OrderNoticeItem:
    name: str
    quantity: int


@dataclass(frozen=True)
class OrderNotice:
    """Retrato do pedido para notificação; não depende da sessão do banco."""

    order_id: str
    customer_name: str
    customer_email: str
    customer_address: str | None
    total_cents: int
    items: tuple[OrderNoticeItem, ...] = ()
    payment_url: str | None = None
    tracking_code: str | None = None

    @property
    def short_code(self) -> str:
        return self.order_id[-6:].upper()


def order_received_html(notice: OrderNotice) -> str:
    items = "".join(f"<li>{item.quantity}x {escape(item.name)}</li>" for item in notice.items)
    return (
        '<div style="background:#111; color:#fff; padding:20px; font-family:sans-serif;">'
        '<h2 style="color:#00bfff;">Pedido Recebido!</h2>'
        f"<p>Olá {escape(notice.customer_name)}, clique no link abaixo para pagar.</p>"
        f'<a href="{escape(notice.payment_url or "", quote=True)}" style="background:#00bfff; color:white; '
        'padding:10px 20px; text-decoration:none; display:inline-block; margin:20px 0;">PAGAR AGORA</a>'
        '<hr style="border:1px solid #333;">'
        f"<ul>{items}</ul>"
        f"<p><strong>Total: {format_brl(notice.total_cents)}</strong></p>"
        f"<p>Código do pedido: <strong>#{notice.short_code}</strong></p>"
        "</div>"
    )


def payment_approved_html(notice: OrderNotice) -> str:
    return (
        '<div style="background:#111; color:#fff; padding:20px; font-family:sans-serif;">'
        '<h2 style="color:#00ff00;">Pagamento Confirmado!</h2>'
        f"<p>Olá <strong>{escape(notice.customer_name)}</strong>, recebemos seu pagamento.</p>"
        f"<p>Seu pedido <strong>#{notice.short_code}</strong> já entrou para a fila de envio.</p>"
        '<hr style="border:1px solid #333;">'
        "<p>Você receberá outro e-mail com o código de rastreio assim que enviarmos.</p>"
        "</div>"
    )


def order_shipped_html(notice: OrderNotice) -> str:
    if notice.tracking_code:
        tracking = (
            '<p style="font-size:1.2rem; background:#222; padding:10px; display:inline-block; '
            f'border:1px dashed #fff;">Código de Rastreio: <strong>{escape(notice.tracking_code)}</strong></p>'
        )
    else:
        tracking = "<p>Seu pedido saiu para entrega!</p>"
    address = escape(notice.customer_address or "cadastrado no pedido")
    return (
        '<div style="background:#050505; color:#fff; padding:30px; font-family:sans-serif; text-align:center;">'
        '<h2 style="color:#00bfff; margin-bottom:10px;">PEDIDO ENVIADO</h2>'
        f"<p>Olá <strong>{escape(notice.customer_name)}</strong>,</p>"
        "<p>Temos ótimas notícias! Seus itens já estão com a transportadora.</p>"
        f"<br>{tracking}<br><br>"
        f'<p style="color:#888;">Em breve chegará no endereço: {address}</p>'
        '<hr style="border-color:#333; margin: 30px 0;">'
        "<small>Obrigado por comprar na Fatal Company.</small>"
        "</div>"
    )
