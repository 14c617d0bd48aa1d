"""
Loading and running solution modules.

Solution files are plain Python modules. While they are loaded, an ``aoc``
module is importable (and pre-bound in their globals) whose ``solution``
decorator registers into this host's registry.

Every piece of solution code, whether module-level code during loading or a
registered function during a run, goes through one single-worker executor.
At most one of them runs at any instant; the event loop stays free to drive
network I/O in the meantime.
"""

from __future__ import annotations
import asyncio
import importlib.util
import logging
import sys
import traceback
import types
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List

from .errors import ScriptExecutionError, ScriptLoadError
from .registry import SolutionHandle, SolutionRegistry

logger = logging.getLogger(__name__)

PLUGIN_MODULE = "aoc"


@dataclass
class LoadReport:
    loaded: List[str] = field(default_factory=list)
    failures: List[ScriptLoadError] = field(default_factory=list)
    handles: int = 0

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def _format_exception(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class ScriptHost:
    """
    Owns the solution registry for one run and the single execution slot.
    """

    def __init__(self, registry: SolutionRegistry | None = None):
        self.registry = registry if registry is not None else SolutionRegistry()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="aoc-solution")
        self._module_count = 0

    # ─────────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────────

    def _plugin_module(self) -> types.ModuleType:
        module = types.ModuleType(PLUGIN_MODULE, "Solution registration API")
        module.solution = self.registry.solution
        return module

    @contextmanager
    def _plugin_api(self, module: types.ModuleType) -> Iterator[None]:
        previous = sys.modules.get(PLUGIN_MODULE)
        sys.modules[PLUGIN_MODULE] = module
        try:
            yield
        finally:
            if previous is None:
                sys.modules.pop(PLUGIN_MODULE, None)
            else:
                sys.modules[PLUGIN_MODULE] = previous

    def _load_one(self, path: Path, api: types.ModuleType) -> None:
        name = f"aoc_solution_{self._module_count}"
        self._module_count += 1
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load {path} as a Python module")
        module = importlib.util.module_from_spec(spec)
        module.aoc = api
        module.solution = api.solution
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise

    def load_module(self, path: Path | str) -> None:
        """
        Load a single solution module.

        Raises:
            ScriptLoadError: If the module fails to compile or import
        """
        api = self._plugin_module()
        with self._plugin_api(api):
            self._submit_load(Path(path), api)

    def _submit_load(self, path: Path, api: types.ModuleType) -> None:
        # A module that fails halfway keeps none of its registrations
        registered = len(self.registry)
        future = self._executor.submit(self._load_one, path, api)
        try:
            future.result()
        except (Exception, SystemExit) as e:
            self.registry.truncate(registered)
            raise ScriptLoadError(str(path), _format_exception(e)) from e

    def load(self, paths: Iterable[Path | str], on_loaded: Callable[[Path], None] | None = None) -> LoadReport:
        """
        Load every module, then freeze the registry.

        A module that fails is logged and counted; the rest still load.
        """
        report = LoadReport()
        before = len(self.registry)
        api = self._plugin_module()
        with self._plugin_api(api):
            for path in map(Path, paths):
                try:
                    self._submit_load(path, api)
                except ScriptLoadError as e:
                    logger.error("Failed to import %s\n\n%s", path, e.details)
                    report.failures.append(e)
                else:
                    report.loaded.append(str(path))
                    logger.debug("Imported %s", path)
                if on_loaded is not None:
                    on_loaded(path)
        self.registry.freeze()
        report.handles = len(self.registry) - before
        return report

    # ─────────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def _call(identifier: str, function: Callable[[str], Any], input_text: str) -> str:
        try:
            return str(function(input_text))
        except (Exception, SystemExit) as e:
            raise ScriptExecutionError(identifier, _format_exception(e)) from e

    async def invoke(self, function: Callable[[str], Any], input_text: str, identifier: str | None = None) -> str:
        """
        Run one solution function in the execution slot.

        Returns:
            The function's return value as a string

        Raises:
            ScriptExecutionError: If the function raised; ``details`` holds
                the formatted traceback
        """
        identifier = identifier or getattr(function, "__name__", repr(function))
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._call, identifier, function, input_text)

    async def invoke_handle(self, handle: SolutionHandle, input_text: str) -> str:
        return await self.invoke(handle.function, input_text, handle.identifier)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "ScriptHost":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
