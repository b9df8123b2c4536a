"""
Finance: accounting notes, claim invoices, PM advances and unit expenses.

Writes go through finance.commands; finance.policies holds the state
checks they apply.
"""
