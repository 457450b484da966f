"""Text layout for (multi-channel) signed distance field fonts."""

# ruff: noqa: F401, F403

from ._version import __version__, version_info
from . import utils

from .text import *
from .geometries import *

from .utils import logger, ConfigurationError
from .utils.enums import *
