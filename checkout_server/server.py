"""MCP Server for the checkout."""

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Resource, Tool, TextContent
from pydantic import AnyUrl

from .checkout import CheckoutSession
from .config import Settings
from .errors import CheckoutError, CheckoutStateError, NotFoundError
from .models import ApplyResult, CheckoutOutcome

logger = logging.getLogger("checkout-mcp-server")

# Quantity selector bounds of the shopping UI; the cart itself is unbounded.
MIN_QUANTITY = 1
MAX_QUANTITY = 5

# Initialize server
app = Server("checkout-mcp-server")

# Global state of the presentation layer; core operations take the session explicitly
session: CheckoutSession
settings: Optional[Settings] = None


def _quantity_schema(description: str) -> dict[str, Any]:
    return {
        "type": "integer",
        "description": description,
        "minimum": MIN_QUANTITY,
        "maximum": MAX_QUANTITY,
        "default": 1,
    }


TOOLS = [
    Tool(
        name="checkout_list_products",
        description="List all products in the catalog with price and unit",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_get_product",
        description="Show description, price and unit of one product",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Product name as listed in the catalog"},
            },
            "required": ["name"],
        },
    ),
    Tool(
        name="checkout_get_cart",
        description="Get current shopping cart contents",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_add_to_cart",
        description="Add a product to the cart",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Product name"},
                "quantity": _quantity_schema("Quantity to add (1-5, default: 1)"),
            },
            "required": ["name"],
        },
    ),
    Tool(
        name="checkout_remove_from_cart",
        description="Remove a quantity of a product from the cart",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Product name"},
                "quantity": _quantity_schema("Quantity to remove (1-5, default: 1)"),
            },
            "required": ["name"],
        },
    ),
    Tool(
        name="checkout_clear_cart",
        description="Remove everything from the cart",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_save_cart",
        description="Save the cart so it is restored next time the server starts",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_load_cart",
        description="Add the saved cart to the current cart",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_apply_discount",
        description="Apply a discount code (10% off, one code per purchase)",
        inputSchema={
            "type": "object",
            "properties": {
                "code": {"type": "string", "description": "Discount code, e.g. A1B2"},
            },
            "required": ["code"],
        },
    ),
    Tool(
        name="checkout_begin",
        description="Go to checkout and show the receipt preview",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_resume_shopping",
        description="Leave checkout and continue shopping",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_get_receipt",
        description="Show the receipt for the current cart",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="checkout_pay",
        description="Pay for the cart and get the final receipt",
        inputSchema={"type": "object", "properties": {}},
    ),
]


def _get_quantity(arguments: dict[str, Any]) -> int:
    quantity = arguments.get("quantity", 1)
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValueError(f"Quantity must be an integer, got {quantity!r}")
    if not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        raise ValueError(f"Quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}")
    return quantity


def _ensure_shopping(session: CheckoutSession) -> None:
    if session.is_checking_out:
        raise CheckoutStateError("Cart is locked during checkout. Use checkout_resume_shopping first.")


def format_cart(session: CheckoutSession) -> str:
    if session.cart.is_empty:
        return "Your cart is empty"

    result_lines = [f"Shopping Cart ({len(session.cart)} products):"]
    for name, quantity in session.cart.items():
        result_lines.append(f"  - {name}, {quantity}")
    return "\n".join(result_lines)


def format_products(session: CheckoutSession) -> str:
    result_lines = [f"{len(session.catalog)} product(s):\n"]
    for i, product in enumerate(session.catalog, 1):
        result_lines.append(f"{i}. {product.name} - {product.price_label}")
    return "\n".join(result_lines)


def run_tool(session: CheckoutSession, name: str, arguments: Optional[dict[str, Any]]) -> str:
    """Execute a tool against ``session`` and return the text to show."""
    arguments = arguments or {}

    if name == "checkout_list_products":
        return format_products(session)

    elif name == "checkout_get_product":
        product = session.describe_product(arguments["name"])
        return f"{product.name}\n{product.description}\n{product.price_label}"

    elif name == "checkout_get_cart":
        return format_cart(session)

    elif name == "checkout_add_to_cart":
        _ensure_shopping(session)
        product_name = arguments["name"]
        quantity = _get_quantity(arguments)
        session.add_to_cart(product_name, quantity)
        return f"✅ Added {product_name} (quantity: {quantity}) to cart\n\n{format_cart(session)}"

    elif name == "checkout_remove_from_cart":
        _ensure_shopping(session)
        product_name = arguments["name"]
        quantity = _get_quantity(arguments)
        session.remove_from_cart(product_name, quantity)
        return f"✅ Removed {product_name} (quantity: {quantity}) from cart\n\n{format_cart(session)}"

    elif name == "checkout_clear_cart":
        _ensure_shopping(session)
        if session.cart.is_empty:
            return "Your cart is already empty"
        session.clear_cart()
        return "✅ Cart cleared"

    elif name == "checkout_save_cart":
        _ensure_shopping(session)
        if session.cart.is_empty:
            return "Your cart is empty, nothing to save"
        session.save_cart()
        return "✅ Your cart has been saved"

    elif name == "checkout_load_cart":
        _ensure_shopping(session)
        loaded = session.load_cart()
        if not loaded:
            return "No saved cart to load"
        return f"✅ Loaded {loaded} product(s) from the saved cart\n\n{format_cart(session)}"

    elif name == "checkout_apply_discount":
        code = (arguments.get("code") or "").strip()
        result = session.apply_discount(code)
        if result == ApplyResult.APPLIED:
            return f"✅ Your discount code has been applied!\n\n{session.render_receipt().render()}"
        if result == ApplyResult.ALREADY_HAS_DISCOUNT:
            return "❌ You have already applied a discount code"
        if result == ApplyResult.INVALID:
            return "❌ Invalid discount code"
        return "No discount code given"

    elif name == "checkout_begin":
        outcome = session.begin_checkout()
        if outcome == CheckoutOutcome.EMPTY_CART:
            return "Your cart is empty"
        if outcome == CheckoutOutcome.ALREADY_CHECKING_OUT:
            return f"Already at checkout\n\n{session.receipt_text}"
        return f"Checkout\n\n{session.receipt_text}"

    elif name == "checkout_resume_shopping":
        session.resume_shopping()
        return "✅ Continue shopping"

    elif name == "checkout_get_receipt":
        return session.render_receipt().render()

    elif name == "checkout_pay":
        if not session.is_checking_out:
            raise CheckoutStateError("Go to checkout before paying")
        receipt = session.complete_payment()
        return f"✅ Payment complete. Your receipt:\n\n{receipt.render()}"

    raise NotFoundError(f"Unknown tool: {name}")


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl("checkout://catalog"),
            name="Product Catalog",
            mimeType="application/json",
            description="All products with description, price and unit",
        ),
        Resource(
            uri=AnyUrl("checkout://cart"),
            name="Shopping Cart",
            mimeType="application/json",
            description="Current shopping cart contents",
        ),
        Resource(
            uri=AnyUrl("checkout://receipt"),
            name="Receipt",
            mimeType="text/plain",
            description="Receipt for the current cart",
        ),
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str == "checkout://catalog":
        products = [product.model_dump(mode="json") for product in session.catalog]
        return json.dumps(products, ensure_ascii=False, indent=2)
    if uri_str == "checkout://cart":
        return json.dumps(session.cart.as_dict(), ensure_ascii=False, indent=2)
    if uri_str == "checkout://receipt":
        return session.render_receipt().render()

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return TOOLS


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    try:
        text = run_tool(session, name, arguments)
    except KeyError as e:
        text = f"Error: missing argument {e}"
    except (CheckoutError, ValueError) as e:
        logger.warning(f"Tool {name} rejected: {e}")
        text = f"Error: {e}"
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        text = f"Error: {str(e)}"
    return [TextContent(type="text", text=text)]


async def main(config: Optional[Settings] = None) -> None:
    """Main entry point."""
    global session, settings

    settings = config or Settings.from_env()
    logging.basicConfig(level=settings.log_level.upper())

    session = CheckoutSession.open(settings)
    if session.load_issues:
        logger.warning(f"{len(session.load_issues)} record(s) skipped while loading catalog and discount codes")

    logger.info(f"Starting Checkout MCP Server with {len(session.catalog)} products...")

    # Import and run the server
    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        session.close(save_on_exit=settings.save_on_exit)


if __name__ == "__main__":
    asyncio.run(main())
