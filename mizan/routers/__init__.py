# mizan/routers/__init__.py
from . import customers
from . import invoices
from . import dashboard
