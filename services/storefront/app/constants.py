from __future__ import annotations

DEFAULT_API_BASE = "http://localhost:4000/api"

# Enforced by the shop backend: one purchase per customer per window.
RATE_LIMIT_MAX_PURCHASES = 1
RATE_LIMIT_WINDOW_SECONDS = 60

MIN_QUANTITY = 1
MAX_QUANTITY = 99

ORDERS_PATH = "/orders"
LOGIN_PATH = "/login"

MSG_ORDER_PLACED = "Order placed successfully!"
MSG_RATE_LIMITED = "You can only buy 1 corn per minute. Please wait before purchasing again."
MSG_LOGIN_REQUIRED = "Please log in to complete your purchase."
MSG_ORDER_FAILED = "Failed to place order."
