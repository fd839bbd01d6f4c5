# Schemas package (re-export feature modules for stable imports)
from .files import *
from .users import *
