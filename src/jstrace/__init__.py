"""jstrace - source-to-source coverage instrumentation for JavaScript.
"""

__version__ = "0.1.0"

from .application.config import InstrumenterOptions
from .application.errors import IllegalReturnError, InputError, JsTraceError, ParseError
from .application.instrumenter import Instrumenter
from .analysis.instrumentationmap import InstrumentationMap
from .runtime.record import FileTrace, RuntimeRecord

__all__ = [
    "Instrumenter",
    "InstrumenterOptions",
    "InstrumentationMap",
    "RuntimeRecord",
    "FileTrace",
    "JsTraceError",
    "InputError",
    "ParseError",
    "IllegalReturnError",
    "__version__",
]
