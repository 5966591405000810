from __future__ import annotations

import argparse
import getpass
import os
import sys

from services.storefront.app.constants import DEFAULT_API_BASE, MSG_LOGIN_REQUIRED, MSG_RATE_LIMITED
from services.storefront.app.core.logging import setup_logging
from services.storefront.app.services.backend_base import BackendError, StorefrontBackend
from services.storefront.app.services.backend_mock import MockStorefrontBackend
from services.storefront.app.services.cart import Cart, format_money
from services.storefront.app.services.purchase import (
    Failure,
    RateLimited,
    Success,
    Unauthenticated,
    submit_purchase,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Buy from Bob's Corn from the command line")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="Prompted for when omitted")
    parser.add_argument("--product", required=True, help="Product slug, e.g. caramel-drizzle-pack")
    parser.add_argument("--quantity", type=int, default=1)
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Selected product option (repeatable), e.g. size=2lb",
    )
    parser.add_argument(
        "--api-base",
        default=os.getenv("STOREFRONT_API_BASE", DEFAULT_API_BASE),
        help=f"Shop backend base URL (default: {DEFAULT_API_BASE})",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the in-process mock backend instead of --api-base",
    )

    args = parser.parse_args(argv)
    setup_logging(level=os.getenv("LOG_LEVEL", "WARNING"))

    options: dict[str, str] = {}
    for raw in args.option:
        name, sep, value = raw.partition("=")
        if not sep or not name:
            parser.error(f"--option expects NAME=VALUE, got {raw!r}")
        options[name.strip()] = value.strip()

    backend: StorefrontBackend
    if args.mock:
        backend = MockStorefrontBackend()
    else:
        from services.storefront.app.services.backend_http import HttpStorefrontBackend

        backend = HttpStorefrontBackend(args.api_base)

    password = args.password or getpass.getpass("Password: ")

    try:
        auth = backend.login(args.email, password)
        product = backend.get_product(args.product)
    except BackendError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    cart = Cart()
    line = cart.add_item(product.id, product.title, product.price, args.quantity, options)
    print(f"{line.title} x{line.quantity}  ${format_money(line.subtotal)}")

    outcome = submit_purchase(cart.lines(), auth.token, backend=backend)

    if isinstance(outcome, Success):
        cart.clear()
        print(f"Order {outcome.order_id} {outcome.status}: ${format_money(outcome.total)}")
        return 0

    if isinstance(outcome, RateLimited):
        wait = f" (retry in {outcome.retry_after_seconds}s)" if outcome.retry_after_seconds else ""
        print(f"{MSG_RATE_LIMITED}{wait}", file=sys.stderr)
    elif isinstance(outcome, Unauthenticated):
        print(MSG_LOGIN_REQUIRED, file=sys.stderr)
    elif isinstance(outcome, Failure):
        print(f"error: {outcome.message}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
