"""
Per-environment node specification resolution.

Lookup order for (role, environment):
1. Per-environment override
2. Prod baseline (Prod, DR) or Non-Prod baseline (everything else)
"""
import logging
from dataclasses import replace
from typing import Dict, Optional, Tuple

from infra_sizing.domain.enums import (
    EnvironmentType,
    NodeDimension,
    NodeRole,
    is_prod_environment,
)
from infra_sizing.domain.node_models import DistributionTemplate, NodeSpecs


logger = logging.getLogger(__name__)

# Environments seeded from a baseline when a template is applied
_NON_PROD_SEEDED = (EnvironmentType.DEV, EnvironmentType.TEST, EnvironmentType.STAGE)
_PROD_SEEDED = (EnvironmentType.DR,)


def _parse_enum(enum_type, name: str):
    try:
        return enum_type(name.strip().lower())
    except (ValueError, AttributeError):
        return None


class NodeSpecsResolver:
    """Resolves node specs per role and environment."""

    def __init__(self, template: Optional[DistributionTemplate] = None):
        """
        Initialize resolver.

        Args:
            template: Distribution template to seed from (built-in defaults if None)
        """
        self._baselines: Dict[Tuple[NodeRole, bool], NodeSpecs] = {}
        self._overrides: Dict[Tuple[NodeRole, EnvironmentType], NodeSpecs] = {}
        self.initialize_from_template(template or DistributionTemplate())

    def initialize_from_template(self, template: DistributionTemplate) -> None:
        """
        Replace all specs with those of a template.

        Dev/Test/Stage are seeded from the Non-Prod baseline and DR from the
        Prod baseline; the template's own per-environment entries win.
        """
        self._baselines = {
            (NodeRole.CONTROL_PLANE, True): template.prod_control_plane,
            (NodeRole.CONTROL_PLANE, False): template.non_prod_control_plane,
            (NodeRole.INFRA, True): template.prod_infra,
            (NodeRole.INFRA, False): template.non_prod_infra,
            (NodeRole.WORKER, True): template.prod_worker,
            (NodeRole.WORKER, False): template.non_prod_worker,
        }
        self._overrides = {}

        for role in NodeRole:
            for environment in _NON_PROD_SEEDED:
                self._overrides[(role, environment)] = self._baselines[(role, False)]
            for environment in _PROD_SEEDED:
                self._overrides[(role, environment)] = self._baselines[(role, True)]

        template_overrides = {
            NodeRole.CONTROL_PLANE: template.per_env_control_plane,
            NodeRole.INFRA: template.per_env_infra,
            NodeRole.WORKER: template.per_env_worker,
        }
        for role, per_env in template_overrides.items():
            for environment, specs in per_env.items():
                self._overrides[(role, environment)] = specs

        logger.debug(
            f"Node specs initialized from template "
            f"{template.distribution.value if template.distribution else 'default'}"
        )

    def get_baseline(self, role: NodeRole, prod: bool) -> NodeSpecs:
        return self._baselines[(role, prod)]

    def set_baseline(self, role: NodeRole, prod: bool, specs: NodeSpecs) -> None:
        self._baselines[(role, prod)] = specs

    def get_specs(self, role: NodeRole, environment: EnvironmentType) -> NodeSpecs:
        """First defined source: override, then the matching baseline."""
        override = self._overrides.get((role, environment))
        if override is not None:
            return override
        return self._baselines[(role, is_prod_environment(environment))]

    def set_specs(self, role: NodeRole, environment: EnvironmentType, specs: NodeSpecs) -> None:
        self._overrides[(role, environment)] = specs

    def clear_override(self, role: NodeRole, environment: EnvironmentType) -> None:
        self._overrides.pop((role, environment), None)

    def get_spec(self, environment_name: str, role_name: str, dimension_name: str) -> Optional[int]:
        """
        Read one dimension by name (e.g. "prod", "worker", "ram").

        Returns:
            Value, or None if any name is not recognized
        """
        environment = _parse_enum(EnvironmentType, environment_name)
        role = _parse_enum(NodeRole, role_name)
        dimension = _parse_enum(NodeDimension, dimension_name)
        if environment is None or role is None or dimension is None:
            return None
        return getattr(self.get_specs(role, environment), dimension.value)

    def set_spec(self, environment_name: str, role_name: str, dimension_name: str, value: int) -> bool:
        """
        Write one dimension by name.

        Returns:
            False if a name is not recognized or value is not positive
        """
        environment = _parse_enum(EnvironmentType, environment_name)
        role = _parse_enum(NodeRole, role_name)
        dimension = _parse_enum(NodeDimension, dimension_name)
        if environment is None or role is None or dimension is None:
            return False
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            return False

        current = self.get_specs(role, environment)
        self.set_specs(role, environment, replace(current, **{dimension.value: value}))
        return True
