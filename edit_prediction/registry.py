# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Edit prediction provider registry.

Manages registration and lookup of prediction providers following
the Factory pattern.
"""

import logging
from typing import Callable, Optional

from edit_prediction.provider import BaseEditPredictionProvider

logger = logging.getLogger(__name__)


class EditPredictionProviderRegistry:
    """Registry for edit prediction providers.

    Supports:
    - Manual registration of provider instances
    - Factory-based lazy instantiation
    - Built-in provider registration
    """

    def __init__(self):
        """Initialize the registry."""
        self._providers: dict[str, BaseEditPredictionProvider] = {}
        self._factories: dict[str, Callable[[], BaseEditPredictionProvider]] = {}

    def register(self, provider: BaseEditPredictionProvider) -> None:
        """Register a provider instance.

        Args:
            provider: The provider to register
        """
        if provider.name in self._providers:
            logger.warning(f"Overwriting existing provider: {provider.name}")
        self._providers[provider.name] = provider
        logger.debug(f"Registered edit prediction provider: {provider.name}")

    def register_factory(
        self,
        name: str,
        factory: Callable[[], BaseEditPredictionProvider],
    ) -> None:
        """Register a factory function for lazy instantiation.

        Args:
            name: Provider name
            factory: Factory function that creates the provider
        """
        self._factories[name] = factory
        logger.debug(f"Registered provider factory: {name}")

    def get_provider(self, name: str) -> Optional[BaseEditPredictionProvider]:
        """Get a provider by name.

        Instantiated providers are returned directly; otherwise the
        factory is called once and its result cached.

        Args:
            name: Provider name

        Returns:
            The provider instance or None if not found
        """
        if name in self._providers:
            return self._providers[name]

        if name in self._factories:
            try:
                provider = self._factories[name]()
            except Exception as e:
                logger.error(f"Factory failed for {name}: {e}")
                return None
            self._providers[name] = provider
            return provider

        return None

    def list_providers(self) -> list[str]:
        """List all registered provider names.

        Returns:
            Sorted provider names
        """
        return sorted(set(self._providers.keys()) | set(self._factories.keys()))

    def get_enabled_providers(self) -> list[BaseEditPredictionProvider]:
        """Instantiate all registered providers and return the enabled ones."""
        providers = [self.get_provider(name) for name in self.list_providers()]
        return [p for p in providers if p is not None and p.enabled]

    def unregister(self, name: str) -> bool:
        """Unregister a provider.

        Args:
            name: Provider name

        Returns:
            True if provider was found and removed
        """
        found = False
        if name in self._providers:
            del self._providers[name]
            found = True
        if name in self._factories:
            del self._factories[name]
            found = True
        return found

    def register_builtin_providers(self) -> None:
        """Register factories for the built-in providers."""
        from edit_prediction.providers.ollama import OllamaCompletionProvider

        self.register_factory("ollama", OllamaCompletionProvider)

    def clear(self) -> None:
        """Clear all registered providers."""
        self._providers.clear()
        self._factories.clear()


# Global registry singleton
_prediction_registry: Optional[EditPredictionProviderRegistry] = None


def get_prediction_registry() -> EditPredictionProviderRegistry:
    """Get the global edit prediction provider registry.

    Returns:
        The singleton registry instance
    """
    global _prediction_registry
    if _prediction_registry is None:
        _prediction_registry = EditPredictionProviderRegistry()
        _prediction_registry.register_builtin_providers()
    return _prediction_registry


def reset_prediction_registry() -> None:
    """Reset the global registry.

    Useful for testing.
    """
    global _prediction_registry
    _prediction_registry = None
