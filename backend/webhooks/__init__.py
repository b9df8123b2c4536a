"""
Inbound webhooks from the WhatsApp automation layer.

Two ways in:
- HMAC-signed JSON bodies (ticket, delivery order, accounting note)
- API keys (ticket intake by resident name)
"""
