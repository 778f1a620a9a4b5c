import enum


class OrderStatus(enum.Enum):
    awaiting_payment = "Aguardando Pagamento (MP)"
    approved = "Aprovado"
    rejected = "Recusado"
    shipped = "Enviado"
    delivered = "Entregue"
    canceled = "Cancelado"


class GatewayPaymentStatus(enum.Enum):
    pending = "pending"
    approved = "approved"
    authorized = "authorized"
    in_process = "in_process"
    in_mediation = "in_mediation"
    rejected = "rejected"
    cancelled = "cancelled"
    refunded = "refunded"
    charged_back = "charged_back"
