"""Firestore document type definitions using Pydantic.

Firestore does not enforce a schema, so every model accepts unknown fields
and keeps them on round trips.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class BaseDoc(BaseModel):
    """Base document type for all Firestore documents."""

    model_config = ConfigDict(extra="allow")

    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ProductDoc(BaseDoc):
    name: str
    sku: Optional[str] = None
    description: Optional[str] = None
    price: float = 0
    stock: int = 0
    images: List[str] = Field(default_factory=list)
    categoryId: Optional[str] = None
    active: bool = True
    featured: bool = False
    shippingRuleIds: List[str] = Field(default_factory=list)


class CategoryDoc(BaseDoc):
    name: str
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    active: bool = True
    featured: bool = False


class ShippingRuleDoc(BaseDoc):
    zone: Optional[str] = None
    active: bool = True


class UserDoc(BaseDoc):
    """User profile stored under users/{uid}. The role is mirrored into Auth custom claims."""

    uid: Optional[str] = None
    email: Optional[str] = None
    displayName: Optional[str] = None
    photoURL: Optional[str] = None
    role: str = "user"
    stripeCustomerId: Optional[str] = None


class PageContentDoc(BaseDoc):
    """Draft page stored under content/{pageId}; blocks keep their order."""

    blocks: List[Dict[str, Any]] = Field(default_factory=list)


class PublishedPageContentDoc(PageContentDoc):
    publishedAt: Optional[datetime] = None


class MediaDoc(BaseDoc):
    filename: str
    url: str
    storageRef: str
    size: int = 0
    type: Optional[str] = None
    category: str = "uncategorized"
    tags: List[str] = Field(default_factory=list)
    alt: Optional[str] = None
    collectionId: Optional[str] = None
    uploadedAt: Optional[datetime] = None
    resizedUrls: Dict[str, str] = Field(default_factory=dict)


class MediaCollectionDoc(BaseDoc):
    name: str
    description: Optional[str] = None


class PaymentMethodDoc(BaseDoc):
    userId: str
    stripePaymentMethodId: str
    stripeCustomerId: Optional[str] = None
    type: str = "card"
    brand: Optional[str] = None
    last4: Optional[str] = None
    expMonth: Optional[int] = None
    expYear: Optional[int] = None
    expiryDate: Optional[str] = None
    cardholderName: Optional[str] = None
    isDefault: bool = False


class OrderItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    price: float = 0
    quantity: int = 1


class OrderTotals(BaseModel):
    model_config = ConfigDict(extra="allow")

    subtotal: float = 0
    shipping: float = 0
    tax: float = 0
    total: float = 0


class StatusChange(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    from_status: Optional[str] = Field(default=None, alias="from")
    to: str
    changedAt: datetime
    changedBy: str
    notes: str = ""


class AdminNote(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str
    createdAt: datetime
    createdBy: str


class EmailRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    sentAt: datetime
    sentBy: str
    success: bool
    error: Optional[str] = None


class BillingInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    invoicePdfUrl: Optional[str] = None
    invoicePdfName: Optional[str] = None
    invoiceXmlUrl: Optional[str] = None
    invoiceXmlName: Optional[str] = None
    invoiceUrl: Optional[str] = None
    invoiceFileName: Optional[str] = None
    invoiceUploadedAt: Optional[datetime] = None
    invoiceUploadedBy: Optional[str] = None


class PaymentInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    status: Optional[str] = None
    paymentIntentId: Optional[str] = None


class OrderDoc(BaseDoc):
    userId: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    totals: OrderTotals = Field(default_factory=OrderTotals)
    status: str = "pending"
    statusHistory: List[StatusChange] = Field(default_factory=list)
    adminNotes: List[AdminNote] = Field(default_factory=list)
    billing: BillingInfo = Field(default_factory=BillingInfo)
    payment: PaymentInfo = Field(default_factory=PaymentInfo)
    shipping: Dict[str, Any] = Field(default_factory=dict)
    emailHistory: List[EmailRecord] = Field(default_factory=list)
