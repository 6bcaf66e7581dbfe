# -*- coding: utf-8 -*-
"""Azoth web API package.

- Backend: FastAPI (ASGI)
- Data: datatables mounted through AzothEngine (folder or zip)
"""

__all__ = ["__version__"]
__version__ = "0.4.0"
