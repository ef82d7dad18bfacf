"""
BASE8 - radix-8 binary-to-text codec

Each group of 3 input bytes becomes 8 symbols from the alphabet "01234567";
a short final group is right-padded with "=". Whole-buffer functions and
incremental stream adapters share the same transform.
"""

from .main import *
from .api_strings import *
from .api_streams import *
from .version import __version__
