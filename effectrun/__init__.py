"""
effectrun - Effect interpretation runtime for Python.

Side-effecting operations are described as inert effect values and executed
separately by performers registered in a dispatch table. Generators compose
effects into sequential-looking workflows whose failures can be caught with
ordinary ``try``/``except``.

Example:
    >>> from effectrun import DispatchTable, define, perform
    >>>
    >>> def init_fetch(self, url):
    ...     self.url = url
    >>> Fetch = define("Fetch", init_fetch)
    >>>
    >>> def workflow():
    ...     first = yield Fetch("1")
    ...     second = yield Fetch("2")
    ...     return first + second
    >>>
    >>> table = DispatchTable([(Fetch, lambda effect: "data:" + effect.url)])
    >>> await perform(table, workflow())
    'data:1data:2'
"""

from effectrun.dispatch import DispatchTable
from effectrun.effect import (
    DEFAULT_EFFECT_NAME,
    Effect,
    EffectType,
    define,
    get_created_at,
    get_type,
    is_effect,
)
from effectrun.errors import CompletionError, EffectRuntimeError, NoPerformerError
from effectrun.interpreter import EffectInterpreter, perform, run, run_async
from effectrun.observability import ResolutionEvent, loguru_step_logger
from effectrun.performers import Callback, Completion, Direct, Performer
from effectrun.result import Err, Ok, Result
from effectrun.utils import CodeLocation

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_EFFECT_NAME",
    "Callback",
    "CodeLocation",
    "Completion",
    "CompletionError",
    "Direct",
    "DispatchTable",
    "Effect",
    "EffectInterpreter",
    "EffectRuntimeError",
    "EffectType",
    "Err",
    "NoPerformerError",
    "Ok",
    "Performer",
    "ResolutionEvent",
    "Result",
    "__version__",
    "define",
    "get_created_at",
    "get_type",
    "is_effect",
    "loguru_step_logger",
    "perform",
    "run",
    "run_async",
]
