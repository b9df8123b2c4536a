# properties/__init__.py
"""
Properties app - the physical side of the portfolio.

- Project: a managed compound or building
- OperationalUnit: a unit inside a project, addressed by (code, project)
- OwnerAssociation: the billing entity of a unit (one per unit)
- Resident: a person living in a unit, reachable by phone/WhatsApp
"""
