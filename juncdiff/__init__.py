# Differential splice junction analysis between two sample groups.

from . import app
from . import config
from . import diff
from . import events
from . import io
from . import utils
from .app import VERSION
from .config import Config
from .diff.main import diff_wrapper
from .events.main import events_wrapper
from .main import main_wrapper


__all__ = ["__version__"]
__version__ = VERSION
