"""HTTP server for the Checkout MCP Server."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from . import __version__
from .checkout import CheckoutSession
from .config import Settings
from .errors import (
    CartLoadCorruptError,
    CheckoutStateError,
    InvalidQuantityError,
    NotFoundError,
    StorageError,
)
from .models import ApplyResult, CheckoutOutcome
from .server import MAX_QUANTITY, MIN_QUANTITY, TOOLS

logger = logging.getLogger("checkout-http-server")

# Global state of the presentation layer; core operations take the session explicitly
session: CheckoutSession
settings: Optional[Settings] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global session

    # Startup
    config = settings or Settings.from_env()
    logger.info("Starting Checkout HTTP Server...")
    session = CheckoutSession.open(config)

    yield

    # Shutdown
    logger.info("Shutting down Checkout HTTP Server...")
    session.close(save_on_exit=config.save_on_exit)


app = FastAPI(
    title="Checkout MCP Server",
    description="HTTP API for the product catalog, shopping cart and checkout",
    version=__version__,
    lifespan=lifespan,
)


# Request/Response Models
class CartItemRequest(BaseModel):
    name: str
    quantity: int = Field(1, ge=MIN_QUANTITY, le=MAX_QUANTITY)


class DiscountRequest(BaseModel):
    code: str = ""


class DiscountResponse(BaseModel):
    result: ApplyResult
    has_discount: bool


def _cart_response() -> dict:
    return {
        "items": [{"name": name, "quantity": quantity} for name, quantity in session.cart.items()],
        "mode": session.mode.value,
        "unsaved_changes": session.has_unsaved_changes,
    }


def _ensure_shopping() -> None:
    if session.is_checking_out:
        raise HTTPException(status_code=409, detail="Cart is locked during checkout")


def _error_response(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidQuantityError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, CartLoadCorruptError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, CheckoutStateError):
        return HTTPException(status_code=409, detail=str(e))
    logger.error(f"Request failed: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "products": len(session.catalog), "mode": session.mode.value}


# Product endpoints
@app.get("/products")
async def list_products():
    """List the catalog."""
    return {
        "count": len(session.catalog),
        "products": [product.model_dump() for product in session.catalog],
    }


@app.get("/products/{name}")
async def get_product(name: str):
    """Get one product with its price label."""
    try:
        product = session.describe_product(name)
    except NotFoundError as e:
        raise _error_response(e)
    return {**product.model_dump(), "price_label": product.price_label}


# Cart endpoints
@app.get("/cart")
async def get_cart():
    """Get current shopping cart."""
    return _cart_response()


@app.post("/cart/add")
async def add_to_cart(request: CartItemRequest):
    """Add a product to the cart."""
    _ensure_shopping()
    try:
        session.add_to_cart(request.name, request.quantity)
    except (NotFoundError, InvalidQuantityError) as e:
        raise _error_response(e)
    return _cart_response()


@app.post("/cart/remove")
async def remove_from_cart(request: CartItemRequest):
    """Remove a quantity of a product from the cart."""
    _ensure_shopping()
    try:
        session.remove_from_cart(request.name, request.quantity)
    except (NotFoundError, InvalidQuantityError) as e:
        raise _error_response(e)
    return _cart_response()


@app.post("/cart/clear")
async def clear_cart():
    """Empty the cart."""
    _ensure_shopping()
    session.clear_cart()
    return _cart_response()


@app.post("/cart/save")
async def save_cart():
    """Save the cart for the next session."""
    _ensure_shopping()
    if session.cart.is_empty:
        return {"success": False, "message": "Cart is empty, nothing saved"}
    try:
        session.save_cart()
    except StorageError as e:
        raise _error_response(e)
    return {"success": True, "message": "Cart saved"}


@app.post("/cart/load")
async def load_cart():
    """Merge the saved cart into the current cart."""
    _ensure_shopping()
    try:
        loaded = session.load_cart()
    except (CartLoadCorruptError, StorageError) as e:
        raise _error_response(e)
    return {"loaded": loaded, **_cart_response()}


# Checkout endpoints
@app.post("/discount", response_model=DiscountResponse)
async def apply_discount(request: DiscountRequest):
    """Apply a discount code."""
    result = session.apply_discount(request.code.strip())
    return DiscountResponse(result=result, has_discount=session.discount.has_discount)


@app.post("/checkout")
async def begin_checkout():
    """Go to checkout."""
    outcome = session.begin_checkout()
    if outcome == CheckoutOutcome.EMPTY_CART:
        raise HTTPException(status_code=400, detail="Cart is empty")
    return {"outcome": outcome.value, "receipt": session.receipt_text}


@app.post("/checkout/resume")
async def resume_shopping():
    """Leave checkout without paying."""
    try:
        session.resume_shopping()
    except CheckoutStateError as e:
        raise _error_response(e)
    return {"mode": session.mode.value}


@app.get("/receipt")
async def get_receipt():
    """Receipt for the current cart."""
    receipt = session.render_receipt()
    return {**receipt.model_dump(), "text": receipt.render()}


@app.post("/checkout/pay")
async def pay():
    """Pay and get the final receipt."""
    if not session.is_checking_out:
        raise HTTPException(status_code=409, detail="Go to checkout before paying")
    receipt = session.complete_payment()
    return {**receipt.model_dump(), "text": receipt.render()}


# MCP Tools endpoint (for compatibility with MCP clients over HTTP)
@app.get("/mcp/tools")
async def list_mcp_tools():
    """List available MCP tools."""
    return {
        "tools": [
            {"name": tool.name, "description": tool.description, "input_schema": tool.inputSchema}
            for tool in TOOLS
        ]
    }


def run_http_server(host: str = "0.0.0.0", port: int = 8000, config: Optional[Settings] = None):
    """Run the HTTP server."""
    import uvicorn

    global settings
    settings = config or Settings.from_env()
    logging.basicConfig(level=settings.log_level.upper())

    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
