# services/__init__.py

# This file makes the 'services' directory a Python package and
# exposes its modules for import.

from . import session
from . import subscription_access
from . import marketplace_sync
from . import billing_state
from . import job_catalog
