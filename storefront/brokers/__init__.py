"""Brokers package initialization."""

from .callable import *
from .https import *
from .triggered import *
