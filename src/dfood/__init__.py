"""dfood - food-delivery backend.

Accounts, authentication and session trust for the dfood API.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
