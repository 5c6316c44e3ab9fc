__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'recli'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .builder import *
from . import codec, serial
from .config import *
from .defaults import *
from .faults import *
from .nodes import *
from .shapes import *
from .shell import *
from .void import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the builder
__all__ += builder.__all__  # type: ignore[attr-defined]
# Load the exposed API of the config
__all__ += config.__all__  # type: ignore[attr-defined]
# Load the exposed API of the defaults
__all__ += defaults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the nodes
__all__ += nodes.__all__  # type: ignore[attr-defined]
# Load the exposed API of the shapes
__all__ += shapes.__all__  # type: ignore[attr-defined]
# Load the exposed API of the shell
__all__ += shell.__all__  # type: ignore[attr-defined]
# Load the exposed API of the void sentinel
__all__ += void.__all__  # type: ignore[attr-defined]
