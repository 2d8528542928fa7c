"""Callable function request and response type definitions."""

from typing import Optional, List, Dict, Any, TypedDict


class SetCustomClaimsRequest(TypedDict):
    uid: str
    role: str


class SetCustomClaimsResponse(TypedDict):
    success: bool
    message: str


class DeleteUserRequest(TypedDict):
    uid: str


class StockItem(TypedDict):
    id: str
    quantity: int


class VerifyStockRequest(TypedDict):
    items: List[StockItem]


class PaymentMethodRequest(TypedDict, total=False):
    paymentMethodId: str


class SavePaymentMethodRequest(TypedDict, total=False):
    """Card details are read from Stripe, not from the request."""
    stripePaymentMethodId: str
    stripeCustomerId: str
    isDefault: bool


class CreatePaymentIntentRequest(TypedDict, total=False):
    amount: int
    paymentMethodId: str
    description: str
    savePaymentMethod: bool
    orderId: str


class CreateOxxoPaymentIntentRequest(TypedDict, total=False):
    amount: int
    orderId: str
    customerEmail: str
    description: str


class OrderPaymentRequest(TypedDict):
    orderId: str
    paymentIntentId: str


class CapturePaymentIntentRequest(TypedDict):
    paymentIntentId: str


class ContactEmailRequest(TypedDict, total=False):
    name: str
    email: str
    message: str
    phone: str
    subject: str
    messageId: str


class SimulateOxxoPaymentRequest(TypedDict):
    orderId: str
    paymentIntentId: str


class OrderEmailRequest(TypedDict, total=False):
    orderId: str
    shippingInfo: Dict[str, Any]
    resendOnly: bool


class ActionRequest(TypedDict, total=False):
    """Payload of the admin dispatch callables: an action name plus its arguments."""
    action: str
    params: Dict[str, Any]


class SuccessResponse(TypedDict, total=False):
    success: bool
    message: Optional[str]
    data: Any
