"""Historical DB API: customer search over the legacy M3 database on Azure SQL."""

__version__ = "0.1.0"
