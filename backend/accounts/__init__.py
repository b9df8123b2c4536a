# accounts/__init__.py
"""
Accounts app - users and roles for the back office.

This app provides:
- User: Custom user model (email login) with a role and WhatsApp number
- ProjectAssignment: which projects a project manager may act on
- ActorContext: Authorization context passed into every command
- build_phone_variants: contact lookup keys for webhook senders
"""
