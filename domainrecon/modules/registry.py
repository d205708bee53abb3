"""
Stage registry for the domainrecon scan pipeline.

Stages register themselves at import time via the
:meth:`ModuleRegistry.register` decorator.  The orchestrator asks the
registry for the pipeline in stage order.
"""

from __future__ import annotations

from typing import Optional, Type

from domainrecon.config import Settings
from domainrecon.modules.base import BaseReconModule


class ModuleRegistry:
    """Manages all available pipeline stages.

    Stages are stored in a class-level dictionary keyed by their unique
    ``name`` attribute.

    Example::

        @ModuleRegistry.register
        class MyStage(BaseReconModule):
            name = "mystage"
            order = 9
            ...
    """

    _modules: dict[str, Type[BaseReconModule]] = {}

    @classmethod
    def register(cls, module_class: Type[BaseReconModule]) -> Type[BaseReconModule]:
        """Class-method decorator that registers a stage in the registry.

        Args:
            module_class: The stage class to register.  Its ``name``
                          attribute is used as the registry key.

        Returns:
            The unmodified *module_class* so the decorator is transparent.
        """
        cls._modules[module_class.name] = module_class
        return module_class

    @classmethod
    def names(cls) -> list[str]:
        """Registered stage names in pipeline order."""
        return [
            module_cls.name
            for module_cls in sorted(cls._modules.values(), key=lambda m: m.order)
        ]

    @classmethod
    def get_module(cls, name: str, settings: Optional[Settings] = None) -> BaseReconModule:
        """Instantiate and return a single stage by name.

        Raises:
            KeyError: If no stage with the given name is registered.
        """
        return cls._modules[name](settings)

    @classmethod
    def get_pipeline(cls, settings: Optional[Settings] = None) -> list[BaseReconModule]:
        """Return fresh instances of every registered stage, in order."""
        return [cls.get_module(name, settings) for name in cls.names()]
