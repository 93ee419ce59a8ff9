"""Root conftest: shared test configuration."""

import os

# Ensure tests never reach a real store, gateway or model
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("DOCUMENT_STORE_URL", "https://store.invalid")
os.environ.setdefault("GATEWAY_URL", "https://gateway.invalid/whatsapp")
os.environ.setdefault("GATEWAY_AUTH_KEY", "gateway-test-key")
os.environ.setdefault("ADMIN_EMAIL", "admin@samaj.test")
os.environ.setdefault("ADMIN_PASSWORD", "test-password")
