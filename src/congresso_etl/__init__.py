"""ETL for the Brazilian Senate and Chamber of Deputies open-data APIs."""

__version__ = "0.1.0"
