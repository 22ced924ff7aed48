"""
Constants for the sales module.
"""

# Name recorded on sales that have no customer attached
DEFAULT_CUSTOMER_NAME = "Cliente Avulso"

# Accepted values for the ``periodo`` filter of the sale listing
LISTING_PERIODS = ("hoje", "semana", "mes")
