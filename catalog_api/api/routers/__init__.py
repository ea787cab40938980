from . import categories
from . import products
