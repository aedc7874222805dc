"""Awaitable, buffered reads over duplex transports for text protocols."""

# flake8: noqa

from .abc_streams import *
from .exceptions import *
from .matchers import *
from .notifications import *
from .streams import *
from .transports import *

__all__ = (abc_streams.__all__ +
           exceptions.__all__ +
           matchers.__all__ +
           notifications.__all__ +
           streams.__all__ +
           transports.__all__)

__version__ = '1.0.0'
