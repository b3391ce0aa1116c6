from .config import LithophaneConfig
from .errors import (
    ConfigurationError,
    DegenerateInputError,
    InputImageError,
    LithophaneError,
    StlWriteError,
)
from .geometry import Point3, Triangle
from .mesh3d import Mesh3d
