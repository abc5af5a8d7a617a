"""
Dependency resolution for active services to determine startup and shutdown order.
"""
import logging
from typing import Dict, List
from ..MODELS.compose_document import ActiveServiceSet
from ..exceptions import DependencyCycleError

logger = logging.getLogger(__name__)

_DONE = object()


class DependencyResolver:
    """
    Resolves the startup and shutdown order of services based on their dependencies.
    """
    def resolve_order(self, active: ActiveServiceSet) -> List[str]:
        """
        Determines the correct order to start services using topological sort.
        Services without ordering constraints keep their resolved order.

        :param active: The active service set.
        :return: Service names in the order they should be started.
        :raises DependencyCycleError: If a circular dependency is detected.
        """
        dependencies = {name: self._dependencies(cfg) for name, cfg in active.services.items()}

        ordered: List[str] = []
        visited = set()
        # Depth-first walk with an explicit stack of (service, pending dependencies)
        for root in dependencies:
            if root in visited:
                continue
            path: List[str] = [root]
            on_path = {root}
            stack = [(root, iter(dependencies[root]))]
            while stack:
                name, pending = stack[-1]
                dep = next(pending, _DONE)
                if dep is _DONE:
                    stack.pop()
                    path.pop()
                    on_path.discard(name)
                    visited.add(name)
                    ordered.append(name)
                elif dep not in dependencies:
                    logger.warning("Service %s depends on %s, which is not active", name, dep)
                elif dep in on_path:
                    raise DependencyCycleError(path[path.index(dep):] + [dep])
                elif dep not in visited:
                    path.append(dep)
                    on_path.add(dep)
                    stack.append((dep, iter(dependencies[dep])))

        logger.debug("Startup order: %s", ", ".join(ordered))
        return ordered

    def shutdown_order(self, active: ActiveServiceSet) -> List[str]:
        """
        Returns the reverse of the startup order.
        """
        return list(reversed(self.resolve_order(active)))

    @staticmethod
    def _dependencies(config: Dict) -> List[str]:
        deps = config.get('depends_on') or {}
        if isinstance(deps, dict):
            return list(deps.keys())
        return list(deps)
