# portal/models/__init__.py
from portal.db.base import Base  # noqa: F401

# order matters due to FKs
from . import organization        # noqa: F401
from . import project             # noqa: F401
from . import user                # noqa: F401
from . import credential_account  # noqa: F401
from . import invitation          # noqa: F401
from . import audit_log           # noqa: F401
