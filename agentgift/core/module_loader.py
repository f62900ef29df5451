from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import Iterable, List

from fastapi import APIRouter


logger = logging.getLogger(__name__)

MODULES_PACKAGE = "agentgift.modules"


def iter_submodules(package: str = MODULES_PACKAGE) -> Iterable[str]:
    pkg = importlib.import_module(package)
    for m in sorted(pkgutil.iter_modules(pkg.__path__), key=lambda info: info.name):
        if m.ispkg:
            yield f"{package}.{m.name}"


def _import_optional(name: str) -> object | None:
    try:
        return importlib.import_module(name)
    except ModuleNotFoundError as exc:
        # Only a missing optional submodule is tolerated; broken imports inside it are not.
        if exc.name != name:
            raise
        return None


def import_module_models(module_pkg: str) -> None:
    _import_optional(f"{module_pkg}.models")


def import_all_models(package: str = MODULES_PACKAGE) -> None:
    """Register every module's tables on the shared metadata."""
    for mod in iter_submodules(package):
        import_module_models(mod)


def collect_routers(package: str = MODULES_PACKAGE) -> List[APIRouter]:
    routers: List[APIRouter] = []
    for mod in iter_submodules(package):
        import_module_models(mod)
        router_mod = _import_optional(f"{mod}.router")
        router = getattr(router_mod, "router", None)
        if router is None:
            continue
        logger.debug("Discovered router %s (prefix=%r)", mod, router.prefix)
        routers.append(router)
    return routers
