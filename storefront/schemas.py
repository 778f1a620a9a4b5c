from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from storefront import models
from storefront.domain.core.money import from_cents


# Checkout


class CustomerIn(BaseModel):
    nome: str = Field(min_length=1, max_length=200)
    email: EmailStr
    endereco: Optional[str] = None
    cep: Optional[str] = None
    telefone: Optional[str] = None

    @field_validator("nome")
    @classmethod
    def strip_nome(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("nome obrigatório")
        return value


class CartItemIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(default=None, alias="_id")
    nome: str = Field(min_length=1, max_length=200)
    preco: float = Field(ge=0, allow_inf_nan=False)
    qty: int
    size: Optional[str] = None
    color: Optional[str] = None
    imagem: Optional[str] = None


class CheckoutIn(BaseModel):
    cliente: CustomerIn
    itens: List[CartItemIn]
    total: float = Field(ge=0, allow_inf_nan=False)
    frete: float = Field(default=0, ge=0, allow_inf_nan=False)
    desconto: float = Field(default=0, ge=0, allow_inf_nan=False)


class CheckoutOut(BaseModel):
    success: bool = True
    url: str
    orderId: str


# Webhook


class WebhookData(BaseModel):
    id: Optional[Union[str, int]] = None


class WebhookIn(BaseModel):
    action: Optional[str] = None
    type: Optional[str] = None
    data: Optional[WebhookData] = None


# Orders


class PublicOrderCustomerOut(BaseModel):
    nome: str


class PublicOrderItemOut(BaseModel):
    nome: str
    qty: int
    size: Optional[str] = None
    color: Optional[str] = None


class PublicOrderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(serialization_alias="_id")
    status: str
    data: datetime
    cliente: PublicOrderCustomerOut
    itens: List[PublicOrderItemOut]
    total: float
    trackingCode: Optional[str] = None

    @classmethod
    def from_order(cls, order: models.Order) -> "PublicOrderOut":
        return cls(
            id=order.id,
            status=order.status,
            data=order.created_at,
            cliente=PublicOrderCustomerOut(nome=order.customer_name),
            itens=[
                PublicOrderItemOut(nome=i.name, qty=i.quantity, size=i.size, color=i.color)
                for i in order.items
            ],
            total=from_cents(order.total_cents),
            trackingCode=order.tracking_code or None,
        )


class OrderCustomerOut(BaseModel):
    nome: str
    email: str
    endereco: Optional[str] = None
    cep: Optional[str] = None
    telefone: Optional[str] = None


class OrderItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(default=None, serialization_alias="_id")
    nome: str
    preco: float
    precoComDesconto: float
    qty: int
    size: Optional[str] = None
    color: Optional[str] = None
    imagem: Optional[str] = None


class OrderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(serialization_alias="_id")
    cliente: OrderCustomerOut
    itens: List[OrderItemOut]
    subtotal: float
    frete: float
    desconto: float
    total: float
    data: datetime
    status: str
    trackingCode: Optional[str] = None
    paymentId: Optional[str] = None

    @classmethod
    def from_order(cls, order: models.Order) -> "OrderOut":
        return cls(
            id=order.id,
            cliente=OrderCustomerOut(
                nome=order.customer_name,
                email=order.customer_email,
                endereco=order.customer_address,
                cep=order.customer_postal_code,
                telefone=order.customer_phone,
            ),
            itens=[
                OrderItemOut(
                    product_id=i.product_id,
                    nome=i.name,
                    preco=from_cents(i.unit_price_cents),
                    precoComDesconto=from_cents(i.discounted_unit_price_cents),
                    qty=i.quantity,
                    size=i.size,
                    color=i.color,
                    imagem=i.image_url,
                )
                for i in order.items
            ],
            subtotal=from_cents(order.subtotal_cents),
            frete=from_cents(order.shipping_cents),
            desconto=from_cents(order.discount_cents),
            total=from_cents(order.total_cents),
            data=order.created_at,
            status=order.status,
            trackingCode=order.tracking_code or None,
            paymentId=order.payment_id,
        )


class OrderStatusIn(BaseModel):
    status: str = Field(min_length=1)
    trackingCode: Optional[str] = Field(default=None, max_length=64)


class OrderStatusOut(BaseModel):
    success: bool = True
    status: str
    trackingCode: Optional[str] = None


# Catalog


class ProductOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(serialization_alias="_id")
    name: str
    price: float
    image: str
    images: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    material: Optional[str] = None
    categoria: Optional[str] = None
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    createdAt: datetime

    @classmethod
    def from_product(cls, product: models.Product) -> "ProductOut":
        return cls(
            id=product.id,
            name=product.name,
            price=from_cents(product.price_cents),
            image=product.image_url or "",
            images=product.images,
            description=product.description,
            material=product.material,
            categoria=product.category,
            sizes=product.sizes,
            colors=product.colors,
            createdAt=product.created_at,
        )


class CategoryIn(BaseModel):
    title: str = Field(min_length=1, max_length=120)
    categoria: Optional[str] = Field(default=None, max_length=120)
    order: int = 0


class CategoryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(serialization_alias="_id")
    title: str
    categoria: Optional[str] = None
    order: int

    @classmethod
    def from_category(cls, category: models.Category) -> "CategoryOut":
        return cls(id=category.id, title=category.title, categoria=category.slug, order=category.display_order)


# Coupons & shipping


class CouponIn(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    discount: float = Field(default=0, ge=0, allow_inf_nan=False)
    freeShipping: bool = False


class CouponOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(serialization_alias="_id")
    code: str
    discount: float
    freeShipping: bool

    @classmethod
    def from_coupon(cls, coupon: models.Coupon) -> "CouponOut":
        return cls(
            id=coupon.id,
            code=coupon.code,
            discount=from_cents(coupon.discount_cents),
            freeShipping=coupon.free_shipping,
        )


class CouponValidateIn(BaseModel):
    code: Optional[str] = None


class CouponValidateOut(BaseModel):
    valid: bool
    discount: Optional[float] = None
    freeShipping: Optional[bool] = None


class ShippingQuoteIn(BaseModel):
    cep: Optional[str] = None


class ShippingQuoteOut(BaseModel):
    price: float


# Auth


class RegisterIn(BaseModel):
    nome: str = Field(min_length=1, max_length=200)
    email: EmailStr
    senha: str = Field(min_length=6, max_length=256)


class LoginIn(BaseModel):
    email: EmailStr
    senha: str = Field(min_length=1)


class LoginOut(BaseModel):
    token: str
    nome: Optional[str] = None
    isAdmin: bool


class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(serialization_alias="_id")
    nome: Optional[str] = None
    email: str
    isAdmin: bool

    @classmethod
    def from_user(cls, user: models.User) -> "UserOut":
        return cls(id=user.id, nome=user.name, email=user.email, isAdmin=user.is_admin)


class MessageOut(BaseModel):
    message: str
