"""Role-scoped chat assistant replying from the ledger and forecasting signals."""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from stockpulse.core.config import get_settings
from stockpulse.schemas.ledger import DemandPredictionRecord, InventoryRecord, StockoutRisk, UserRole
from stockpulse.services.assistant.intents import (
    AdminIntent,
    CashierIntent,
    CustomerIntent,
    classify_admin,
    classify_cashier,
    classify_customer,
)
from stockpulse.services.forecasting.aggregator import units_sold_by_product
from stockpulse.services.forecasting.dates import utc_now
from stockpulse.services.forecasting.demand_predictor import ADMIN_ROLES, DemandPredictionService
from stockpulse.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()

NOT_FOUND_REPLY = "Product not found. Please check the name or try another search."
NO_ACCESS_REPLY = "I don't have access to that data for your role. Try asking about product suggestions or general info."
ADMIN_HELP_REPLY = (
    "I can help with: demand forecasting, sales forecast, what to reorder, low stock alerts, inventory summary, "
    "sales summary, best-selling products, and product suggestions. Try: 'What should I reorder?', "
    "'Demand forecast', 'Sales forecast', or 'Which items are low stock?'"
)
OPEN_ADMIN_INTENTS = (AdminIntent.INVENTORY_SUMMARY, AdminIntent.PRODUCT_SUGGESTIONS, AdminIntent.UNKNOWN)

CASHIER_REPLIES = {
    CashierIntent.ADD_ITEM: "Add items from the product list on the left, then tap Complete sale.",
    CashierIntent.DISCOUNT: (
        "Use the discount option in the current sale panel when available. I can't apply discounts from here."
    ),
    CashierIntent.RECEIPT: "After completing the sale, use the receipt option if enabled on your device.",
    CashierIntent.RETURN: "Process returns via Approve Order or contact a manager.",
    CashierIntent.HELP: (
        "I can help with: check stock for a product, get price, and short guidance. "
        "Try: \"Check stock for Hammer\", \"Price of Common Nails\"."
    ),
    CashierIntent.UNKNOWN: (
        "I can help with: check stock, get price, and quick guidance. "
        "Try \"Check stock for [product]\" or \"Price of [product]\"."
    ),
}


def money(value: float) -> str:
    return f"{settings.CURRENCY_SYMBOL}{value:.2f}"


def _threshold(record: InventoryRecord) -> int:
    if record.low_stock_threshold is None:
        return settings.DEFAULT_LOW_STOCK_THRESHOLD
    return record.low_stock_threshold


def stock_status(record: InventoryRecord) -> str:
    if record.quantity <= 0:
        return "Out of Stock"
    if record.quantity <= _threshold(record):
        return "Low Stock"
    return "In Stock"


def price_line(record: InventoryRecord) -> str:
    return f"{record.product_name} – {money(record.unit_price)}"


def _prediction_name(prediction: DemandPredictionRecord) -> str:
    return prediction.product_name or f"Product #{prediction.product_id}"


def _low_stock(inventory: List[InventoryRecord]) -> List[InventoryRecord]:
    return [record for record in inventory if record.quantity <= _threshold(record)]


class ChatService:
    """Service answering free-text assistant messages for each caller role."""

    @staticmethod
    async def chat(
        store: LedgerStore,
        message: str,
        role: Optional[UserRole],
        user_id: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> str:
        """
        Classify a message for the caller's role and build the reply.

        Args:
            store: Ledger store
            message: Free-text message
            role: Caller role; CUSTOMER and CASHIER get their own assistants
            user_id: Caller id, used for order lookups and cashier hand-off
            now: Reference instant (defaults to the current UTC time)

        Returns:
            Reply text
        """
        if role == UserRole.CASHIER:
            return await ChatService.cashier_reply(store, message)
        if role == UserRole.CUSTOMER:
            return await ChatService.customer_reply(store, message, user_id)
        return await ChatService.admin_reply(store, message, role, now or utc_now())

    @staticmethod
    async def cashier_reply(store: LedgerStore, message: str) -> str:
        matched = classify_cashier(message)

        if matched.intent == CashierIntent.STOCK_PRODUCT and matched.product_query:
            products = await store.search_inventory(matched.product_query, settings.CHAT_LOOKUP_LIMIT)
            if not products:
                return NOT_FOUND_REPLY
            return "\n".join(
                f"{p.product_name} – {p.quantity} units available. Status: {stock_status(p)}." for p in products
            )

        if matched.intent == CashierIntent.PRICE_PRODUCT and matched.product_query:
            products = await store.search_inventory(matched.product_query, settings.CHAT_LOOKUP_LIMIT)
            if not products:
                return NOT_FOUND_REPLY
            return "\n".join(price_line(p) for p in products)

        if matched.intent in CASHIER_REPLIES and matched.intent != CashierIntent.UNKNOWN:
            return CASHIER_REPLIES[matched.intent]

        # Unmatched short messages are tried as a product name
        trimmed = message.strip()
        if 0 < len(trimmed) < settings.CHAT_QUERY_MAX_LENGTH:
            products = await store.search_inventory(trimmed, 3)
            if len(products) == 1:
                p = products[0]
                return (
                    f"{p.product_name} – {p.quantity} units available. Status: {stock_status(p)}. "
                    f"Price: {money(p.unit_price)}."
                )
            if products:
                return "\n".join(
                    f"{p.product_name} – {p.quantity} units. {money(p.unit_price)}." for p in products
                )
        return CASHIER_REPLIES[CashierIntent.UNKNOWN]

    @staticmethod
    async def customer_reply(store: LedgerStore, message: str, user_id: Optional[int]) -> str:
        matched = classify_customer(message)
        intent = matched.intent

        if intent == CustomerIntent.CONNECT_TO_CASHIER:
            user = await store.get_user(user_id) if user_id is not None else None
            name = (user.full_name if user else None) or "A customer"
            email = user.email if user else ""
            await store.create_notification_for_roles(
                (UserRole.CASHIER,),
                "Customer inquiry",
                f"{name} ({email}) is requesting to connect to a cashier for assistance.",
                "CUSTOMER_INQUIRY"
            )
            logger.info(f"Customer {user_id} asked to be connected to a cashier")
            return (
                "Your request has been sent. A cashier will assist you shortly. "
                "You can also visit our store or call us for immediate help."
            )

        if intent == CustomerIntent.ORDER_STATUS:
            orders = await store.list_recent_orders(user_id, 5) if user_id is not None else []
            if not orders:
                return "You don't have any orders yet. Place an order from your cart to see status here."
            lines = [
                f"Order #{o.id}: {o.status} – Total {money(o.total)} ({o.created_at.date().isoformat()})."
                for o in orders
            ]
            return "Your recent orders:\n" + "\n".join(lines) + "\n\nCheck \"My Orders\" in the menu for full details."

        if intent in (CustomerIntent.PRODUCT_PRICE, CustomerIntent.PRODUCT_STOCK) and matched.product_query:
            products = await store.search_inventory(matched.product_query, settings.CHAT_LOOKUP_LIMIT)
            if not products:
                return f"No product found for \"{matched.product_query}\". Try browsing our Products page."
            if intent == CustomerIntent.PRODUCT_PRICE:
                return "\n".join(price_line(p) for p in products)
            return "\n".join(
                f"{p.product_name} – {stock_status(p).capitalize()} ({p.quantity} available). {money(p.unit_price)}"
                for p in products
            )

        if intent == CustomerIntent.SHIPPING_INFO:
            return (
                f"We offer delivery. Shipping is {settings.CURRENCY_SYMBOL}{settings.SHIPPING_FEE:,.0f} per order; "
                f"free shipping on orders {settings.CURRENCY_SYMBOL}{settings.FREE_SHIPPING_MINIMUM:,.0f} and above. "
                f"Enter your address at checkout. For bulk or special delivery, connect to a cashier."
            )

        if intent == CustomerIntent.PAYMENT_OPTIONS:
            return (
                "We accept: GCash, Debit Card, and Cash on Delivery. Choose your preferred method at checkout. "
                "For other options, connect to a cashier."
            )

        if intent == CustomerIntent.HELP:
            return (
                "I can help with: order status, product price and availability, shipping and payment info. "
                "You can also request to connect to a cashier for personal assistance. "
                "Try: \"Where is my order?\", \"Price of Hammer\", \"Connect to cashier\"."
            )

        return (
            "I can help with: order status, product price and availability, shipping and payment. "
            "Say \"Connect to cashier\" to get help from our staff. "
            "Try: \"Where is my order?\", \"Price of Common Nails\", \"Shipping info\"."
        )

    @staticmethod
    async def admin_reply(store: LedgerStore, message: str, role: Optional[UserRole], now: datetime) -> str:
        intent = classify_admin(message).intent
        if intent not in OPEN_ADMIN_INTENTS and role not in ADMIN_ROLES:
            return NO_ACCESS_REPLY

        if intent == AdminIntent.INVENTORY_SUMMARY:
            inventory = await store.list_inventory()
            total = sum(record.quantity for record in inventory)
            return f"We have {len(inventory)} products in inventory with a total of {total} units."

        if intent == AdminIntent.LOW_STOCK:
            low = _low_stock(await store.list_inventory())
            if not low:
                return "No products are currently below the low stock threshold."
            items = ", ".join(f"{r.product_name} ({r.quantity} left)" for r in low)
            return f"Low stock alert: {len(low)} product(s) below threshold: {items}."

        if intent == AdminIntent.SALES_SUMMARY:
            sales = await store.list_sales(now - timedelta(days=settings.TRAILING_WINDOW_DAYS), now)
            total = sum(sale.total for sale in sales)
            return (
                f"Last {settings.TRAILING_WINDOW_DAYS} days: {len(sales)} transactions, "
                f"total revenue {money(total)}."
            )

        if intent == AdminIntent.DEMAND_PREDICTION:
            predictions = await DemandPredictionService.get_latest_predictions(store)
            if not predictions:
                return (
                    "No demand predictions available yet. Go to Reports → Demand forecasting & reorder and click "
                    "\"Generate predictions\", or use the AI page to run predictive analytics."
                )
            listing = "; ".join(
                f"{_prediction_name(p)}: predicted demand {p.predicted_demand:.2f} over {p.horizon_days} days, "
                f"suggested restock {p.suggested_restock}, risk {p.risk_of_stockout.value}"
                for p in predictions[:5]
            )
            return f"Demand forecast (latest): {listing}."

        if intent == AdminIntent.REORDER_WHAT:
            inventory, predictions = await asyncio.gather(
                store.list_inventory(),
                DemandPredictionService.get_latest_predictions(store)
            )
            low = _low_stock(inventory)
            if not low:
                return (
                    "No items are below the low-stock threshold. You can still check Reports → Demand "
                    "forecasting for suggested restock quantities."
                )
            by_product = {p.product_id: p for p in predictions}
            lines = []
            for record in low:
                prediction = by_product.get(record.product_id)
                if prediction:
                    suggestion = f"suggested restock {prediction.suggested_restock}"
                else:
                    suggestion = f"restock to at least {_threshold(record)}"
                lines.append(
                    f"{record.product_name} ({record.quantity} left, threshold {_threshold(record)}): {suggestion}"
                )
            return (
                f"Items to reorder (low stock): {'. '.join(lines)}. "
                f"View Inventory with \"Low stock\" filter or Reports for full demand forecast."
            )

        if intent == AdminIntent.SALES_FORECAST:
            predictions, sales = await asyncio.gather(
                DemandPredictionService.get_latest_predictions(store),
                store.list_sales(now - timedelta(days=settings.TRAILING_WINDOW_DAYS), now)
            )
            revenue = money(sum(sale.total for sale in sales))
            if not predictions:
                return (
                    f"Sales summary (last {settings.TRAILING_WINDOW_DAYS} days): {len(sales)} transactions, "
                    f"{revenue} total revenue. Run \"Generate predictions\" in Reports or AI page for "
                    f"demand-based sales forecasting."
                )
            high_demand = sorted(
                (p for p in predictions if p.predicted_demand > 0),
                key=lambda p: p.predicted_demand,
                reverse=True
            )[:5]
            listing = ", ".join(
                f"{_prediction_name(p)} ~{p.predicted_demand:.2f} units in {p.horizon_days} days"
                for p in high_demand
            )
            return (
                f"Sales forecast: Last {settings.TRAILING_WINDOW_DAYS} days had {len(sales)} transactions "
                f"({revenue} revenue). Demand-based forecast: "
                f"{listing}. See Reports for charts."
            )

        if intent == AdminIntent.BEST_SELLING:
            lines, inventory = await asyncio.gather(store.list_sale_lines(), store.list_inventory())
            names = {record.product_id: record.product_name for record in inventory}
            sold = units_sold_by_product(lines)
            if not sold:
                return "No sales recorded yet."
            top = sorted(sold.items(), key=lambda item: item[1], reverse=True)[:5]
            listing = ", ".join(f"{names.get(pid, f'Product #{pid}')}: {qty} sold" for pid, qty in top)
            return f"Best selling products: {listing}."

        if intent == AdminIntent.PRODUCT_SUGGESTIONS:
            predictions = await DemandPredictionService.get_latest_predictions(store)
            popular = [
                p for p in predictions if p.risk_of_stockout == StockoutRisk.LOW and p.predicted_demand > 0
            ][:5]
            if not popular:
                inventory = await store.list_inventory()
                names = ", ".join(record.product_name for record in inventory[:5])
                return f"Product suggestions: {names}. All in stock."
            return f"Suggested products (based on demand): {', '.join(_prediction_name(p) for p in popular)}."

        return ADMIN_HELP_REPLY
