"""Role-scoped intent taxonomy and the ordered rule tables that decode it.

Each role has its own enum with an explicit UNKNOWN member. A rule table is
an ordered tuple of ``IntentRule``; the first rule with a matching pattern
wins, so precedence is read top to bottom.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern, Tuple

from stockpulse.core.config import get_settings

settings = get_settings()


class CustomerIntent(str, Enum):
    CONNECT_TO_CASHIER = "connect_to_cashier"
    ORDER_STATUS = "order_status"
    PRODUCT_PRICE = "product_price"
    PRODUCT_STOCK = "product_stock"
    SHIPPING_INFO = "shipping_info"
    PAYMENT_OPTIONS = "payment_options"
    HELP = "customer_help"
    UNKNOWN = "unknown"


class CashierIntent(str, Enum):
    STOCK_PRODUCT = "stock_product"
    PRICE_PRODUCT = "price_product"
    ADD_ITEM = "add_item"
    DISCOUNT = "discount"
    RECEIPT = "receipt"
    RETURN = "return"
    HELP = "help"
    UNKNOWN = "unknown"


class AdminIntent(str, Enum):
    LOW_STOCK = "low_stock"
    REORDER_WHAT = "reorder_what"
    SALES_FORECAST = "sales_forecast"
    INVENTORY_SUMMARY = "inventory_summary"
    SALES_SUMMARY = "sales_summary"
    DEMAND_PREDICTION = "demand_prediction"
    BEST_SELLING = "best_selling"
    PRODUCT_SUGGESTIONS = "product_suggestions"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IntentMatch:
    intent: Enum
    product_query: Optional[str] = None


@dataclass(frozen=True)
class IntentRule:
    """Matches when any of ``patterns`` is found and none of ``unless`` is.

    With ``capture`` set, the first group of the matching pattern becomes the
    product query.
    """
    intent: Enum
    patterns: Tuple[Pattern, ...]
    capture: bool = False
    require: Tuple[Pattern, ...] = ()
    unless: Tuple[Pattern, ...] = ()

    def match(self, text: str) -> Optional[IntentMatch]:
        if any(p.search(text) for p in self.unless):
            return None
        if self.require and not any(p.search(text) for p in self.require):
            return None
        for pattern in self.patterns:
            found = pattern.search(text)
            if found:
                query = found.group(1).strip() if self.capture else None
                return IntentMatch(self.intent, query)
        return None


def _compile(*patterns: str) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p) for p in patterns)


CUSTOMER_RULES: Tuple[IntentRule, ...] = (
    IntentRule(CustomerIntent.CONNECT_TO_CASHIER, _compile(
        r"connect\s+to\s+(?:cashier|staff|agent)",
        r"talk\s+to\s+(?:a\s+)?cashier",
        r"speak\s+to\s+(?:cashier|staff)",
        r"(?:need|want)\s+(?:to\s+)?(?:talk|speak)\s+to",
        r"customer\s+support|live\s+agent|real\s+person|human\s+help",
    )),
    IntentRule(CustomerIntent.ORDER_STATUS, _compile(
        r"\b(?:where is|status of|track)\s+my\s+order",
        r"\bmy\s+orders?\b",
        r"\border\s+status\b",
    )),
    IntentRule(CustomerIntent.PRODUCT_PRICE, _compile(r"(?:price|how much|cost)\s+(?:of\s+)?(.+)"), capture=True),
    IntentRule(
        CustomerIntent.PRODUCT_STOCK,
        _compile(r"(?:stock|availability|in stock|do you have)\s+(?:for\s+)?(.+)"),
        capture=True
    ),
    IntentRule(CustomerIntent.SHIPPING_INFO, _compile(r"\bshipping\b|\bdelivery\b|\bdeliver\b")),
    IntentRule(CustomerIntent.PAYMENT_OPTIONS, _compile(r"\bpayment\b|\bpay\b|\bgcash\b|\bcod\b|\bdebit\b")),
    IntentRule(CustomerIntent.HELP, _compile(r"\bhelp\b", r"\bwhat\s+can\s+you\b")),
)

CASHIER_RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        CashierIntent.STOCK_PRODUCT,
        _compile(r"(?:stock|check stock|how many)\s+(?:for\s+)?(.+)"),
        capture=True
    ),
    IntentRule(CashierIntent.PRICE_PRODUCT, _compile(r"(?:price|how much|cost)\s+(?:of\s+)?(.+)"), capture=True),
    IntentRule(CashierIntent.ADD_ITEM, _compile(
        r"\b(?:add|put)\s+(?:item|product|\d+)",
        r"\badd\s+to\s+(?:sale|transaction|cart)",
    )),
    IntentRule(CashierIntent.DISCOUNT, _compile(r"\b(?:apply|give|add)\s*(?:\d+%?)?\s*discount", r"\bdiscount\b")),
    IntentRule(CashierIntent.RECEIPT, _compile(r"\b(?:print\s+)?receipt\b")),
    IntentRule(CashierIntent.RETURN, _compile(r"\breturn(s)?\b", r"\bprocess\s+return")),
    IntentRule(CashierIntent.HELP, _compile(r"\bhelp\b", r"\bwhat\s+can\s+you\b")),
)

ADMIN_RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        AdminIntent.LOW_STOCK,
        _compile(r"\b(low|alert|threshold)\b", r"\bhow many\b"),
        require=_compile(r"\b(inventory|stock|products?)\b")
    ),
    IntentRule(AdminIntent.REORDER_WHAT, _compile(r"\b(reorder|what (should|to) reorder|what to order|reorder list)\b")),
    IntentRule(
        AdminIntent.SALES_FORECAST,
        _compile(r"\b(sales? ?forecast|demand forecast|forecast sales|sales prediction)\b")
    ),
    IntentRule(
        AdminIntent.INVENTORY_SUMMARY,
        _compile(r"\b(inventory|stock)\b"),
        unless=_compile(r"\b(low|alert)\b")
    ),
    IntentRule(AdminIntent.SALES_SUMMARY, _compile(r"\b(sales?|revenue)\b")),
    IntentRule(AdminIntent.DEMAND_PREDICTION, _compile(r"\b(demand|predict|forecast|restock)\b")),
    IntentRule(AdminIntent.BEST_SELLING, _compile(r"\b(best selling|top products?)\b")),
    IntentRule(AdminIntent.PRODUCT_SUGGESTIONS, _compile(r"\b(suggest|recommend|what (to )?buy)\b")),
)


def _first_match(rules: Tuple[IntentRule, ...], text: str) -> Optional[IntentMatch]:
    for rule in rules:
        matched = rule.match(text)
        if matched:
            return matched
    return None


def classify_customer(message: str) -> IntentMatch:
    """Customer intent; short unmatched messages are treated as a price lookup."""
    trimmed = message.strip()
    matched = _first_match(CUSTOMER_RULES, trimmed.lower())
    if matched:
        return matched
    if 0 < len(trimmed) < settings.CHAT_QUERY_MAX_LENGTH:
        return IntentMatch(CustomerIntent.PRODUCT_PRICE, trimmed)
    return IntentMatch(CustomerIntent.UNKNOWN)


def classify_cashier(message: str) -> IntentMatch:
    return _first_match(CASHIER_RULES, message.strip().lower()) or IntentMatch(CashierIntent.UNKNOWN)


def classify_admin(message: str) -> IntentMatch:
    return _first_match(ADMIN_RULES, message.strip().lower()) or IntentMatch(AdminIntent.UNKNOWN)
