"""Command-line interface for the Checkout MCP Server."""

import argparse
import asyncio
import sys

from .config import Settings
from .errors import CheckoutError


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Checkout MCP Server - product catalog, shopping cart, discount codes and receipts"
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default="stdio",
        help="Server mode: stdio (for MCP clients) or http (REST API)",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="HTTP server host (only for http mode, default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP server port (only for http mode, default: 8000)",
    )
    parser.add_argument("--products", help="Product catalog file (env: CHECKOUT_PRODUCTS_FILE)")
    parser.add_argument("--discounts", help="Discount code file (env: CHECKOUT_DISCOUNTS_FILE)")
    parser.add_argument("--cart", help="Saved cart file (env: CHECKOUT_CART_FILE)")
    parser.add_argument(
        "--no-save-on-exit",
        action="store_true",
        help="Do not save an unsaved cart on shutdown",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (env: CHECKOUT_LOG_LEVEL, default: INFO)",
    )

    args = parser.parse_args()

    settings = Settings.from_env(
        products_file=args.products,
        discounts_file=args.discounts,
        cart_file=args.cart,
        save_on_exit=False if args.no_save_on_exit else None,
        log_level=args.log_level,
    )

    try:
        if args.mode == "stdio":
            # Run MCP server via stdio
            from .server import main as server_main

            asyncio.run(server_main(settings))
        elif args.mode == "http":
            # Run HTTP server
            from .http_server import run_http_server

            print(f"Starting Checkout HTTP Server on {args.host}:{args.port}", file=sys.stderr)
            print(f"API documentation available at http://{args.host}:{args.port}/docs", file=sys.stderr)
            run_http_server(host=args.host, port=args.port, config=settings)
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)
    except CheckoutError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
