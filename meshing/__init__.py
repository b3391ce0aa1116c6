from .border import BorderDimensions
from .builder import MeshBuilder
