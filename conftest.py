"""Root conftest: pre-import the workspace package.

Importing it here (while pythonpath is already in effect) caches the package
from gthread-core/src/ in sys.modules before test collection starts.
"""

import gthread  # noqa: F401
