"""
convertcore - conversion orchestration and safety engine.
"""

from .service import ConversionService
from .settings import ConverterSettings

__version__ = "0.1.0"

__all__ = ["ConversionService", "ConverterSettings", "__version__"]
