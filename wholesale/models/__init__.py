"""Database models — re-exports every model.

Import from here:  from wholesale.models import User, Quote, ...
Or from submodules: from wholesale.models.quotes import Quote
"""

from .base import Base  # noqa: F401

# Accounts
from .auth import BuyerProfile, User  # noqa: F401

# Catalog
from .catalog import (  # noqa: F401
    Category,
    Certification,
    ConditionGrade,
    PricingTier,
    Product,
    ProductCertification,
)

# RFQ & Quotes
from .rfq import InquiryNotification, RfqInquiry  # noqa: F401
from .quotes import Quote, QuoteHistory, QuoteItem  # noqa: F401

# Orders
from .orders import Order, OrderItem  # noqa: F401

# Membership
from .membership import MembershipDiscount, MembershipTier, UserMembership  # noqa: F401

# Support chat
from .chat import ChatMessage, ChatSession, SupportAgent  # noqa: F401

# FAQ & Cart
from .faq import FaqCategory, FaqItem  # noqa: F401
from .cart import CartItem  # noqa: F401
