"""
Domain models for cost estimation.
Defines sizing inputs, cost breakdowns, estimates and license line items.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

from infra_sizing.core.config import config
from infra_sizing.domain.enums import (
    CloudProvider,
    CostCategory,
    Currency,
    Distribution,
    EnvironmentType,
    PricingType,
    SupportLevel,
)
from infra_sizing.domain.hadr_models import HADRConfig
from infra_sizing.domain.node_models import NodeSpecs, ZERO_SPECS


@dataclass
class EnvironmentSizing:
    """Node counts and per-role specs of one environment's cluster."""
    environment: EnvironmentType
    control_plane_nodes: int = 0
    infra_nodes: int = 0
    worker_nodes: int = 0
    control_plane_specs: NodeSpecs = ZERO_SPECS
    infra_specs: NodeSpecs = ZERO_SPECS
    worker_specs: NodeSpecs = ZERO_SPECS

    def _roles(self):
        return (
            (self.control_plane_nodes, self.control_plane_specs),
            (self.infra_nodes, self.infra_specs),
            (self.worker_nodes, self.worker_specs),
        )

    @property
    def total_nodes(self) -> int:
        # Zero-spec roles (managed control plane) are not billable nodes
        return sum(count for count, specs in self._roles() if not specs.is_zero)

    @property
    def total_cpu(self) -> int:
        return sum(count * specs.cpu for count, specs in self._roles())

    @property
    def total_ram(self) -> int:
        return sum(count * specs.ram for count, specs in self._roles())

    @property
    def total_disk(self) -> int:
        return sum(count * specs.disk for count, specs in self._roles())


@dataclass
class EstimateOptions:
    """Knobs for a cluster cost estimate."""
    distribution: Optional[Distribution] = None
    pricing_type: PricingType = PricingType.ON_DEMAND
    support_level: SupportLevel = SupportLevel.NONE
    hadr: Optional[HADRConfig] = None
    headroom_percent: float = 0.0
    include_managed_control_plane: bool = True
    include_storage: bool = True
    include_network: bool = True
    include_licenses: bool = True
    monthly_egress_gb: float = 100.0
    load_balancers: int = 1
    storage_gb_per_node: int = 100
    registry_gb: int = 50


@dataclass
class CostLineItem:
    """Represents a single priced quantity inside a breakdown."""
    description: str
    quantity: float
    unit: str
    unit_price: float
    notes: Optional[str] = None

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "description": self.description,
            "quantity": self.quantity,
            "unit": self.unit,
            "unit_price": round(self.unit_price, 4),
            "total": round(self.total, 2),
            "notes": self.notes,
        }


@dataclass
class CostBreakdown:
    """Monthly cost of one category."""
    category: CostCategory
    monthly: float
    description: str = ""
    line_items: List[CostLineItem] = field(default_factory=list)
    percentage: float = 0.0

    @property
    def yearly(self) -> float:
        return self.monthly * config.MONTHS_PER_YEAR

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "description": self.description,
            "monthly": round(self.monthly, 2),
            "yearly": round(self.yearly, 2),
            "percentage": round(self.percentage, 1),
            "line_items": [item.to_dict() for item in self.line_items],
        }


@dataclass
class EnvironmentCost:
    """Share of the monthly bill attributed to one environment."""
    environment: EnvironmentType
    monthly_cost: float
    nodes: int
    total_cpu: int
    total_ram_gb: int
    total_disk_gb: int
    percentage: float = 0.0

    @property
    def cost_per_node(self) -> float:
        return self.monthly_cost / self.nodes if self.nodes > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "environment": self.environment.value,
            "monthly_cost": round(self.monthly_cost, 2),
            "nodes": self.nodes,
            "total_cpu": self.total_cpu,
            "total_ram_gb": self.total_ram_gb,
            "total_disk_gb": self.total_disk_gb,
            "cost_per_node": round(self.cost_per_node, 2),
            "percentage": round(self.percentage, 1),
        }


@dataclass
class CostEstimate:
    """Represents a complete infrastructure cost estimate."""
    provider: CloudProvider
    region: str
    pricing_type: PricingType = PricingType.ON_DEMAND
    currency: Currency = Currency.USD
    breakdown: Dict[CostCategory, CostBreakdown] = field(default_factory=dict)
    environment_costs: Dict[EnvironmentType, EnvironmentCost] = field(default_factory=dict)
    multiplier: float = 1.0
    calculated_at: Optional[datetime] = None
    pricing_source: str = ""
    notes: List[str] = field(default_factory=list)

    @property
    def monthly_total(self) -> float:
        return sum(item.monthly for item in self.breakdown.values())

    @property
    def yearly_total(self) -> float:
        return self.monthly_total * config.MONTHS_PER_YEAR

    def tco(self, years: int) -> float:
        return self.yearly_total * years

    def category_cost(self, category: CostCategory) -> float:
        breakdown = self.breakdown.get(category)
        return breakdown.monthly if breakdown else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        sorted_breakdown = sorted(
            self.breakdown.values(),
            key=lambda x: x.monthly,
            reverse=True
        )
        return {
            "provider": self.provider.value,
            "region": self.region,
            "pricing_type": self.pricing_type.value,
            "currency": self.currency.value,
            "monthly_total": round(self.monthly_total, 2),
            "yearly_total": round(self.yearly_total, 2),
            "three_year_tco": round(self.tco(3), 2),
            "five_year_tco": round(self.tco(5), 2),
            "multiplier": round(self.multiplier, 4),
            "breakdown": [item.to_dict() for item in sorted_breakdown],
            "environment_costs": [cost.to_dict() for cost in self.environment_costs.values()],
            "calculated_at": self.calculated_at.isoformat() if self.calculated_at else None,
            "pricing_source": self.pricing_source,
            "notes": self.notes,
        }


@dataclass
class CostComparison:
    """Side-by-side comparison of several estimates."""
    estimates: List[CostEstimate]
    cheapest: Optional[CostEstimate] = None
    most_expensive: Optional[CostEstimate] = None
    potential_savings: Dict[str, float] = field(default_factory=dict)
    insights: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "estimates": [estimate.to_dict() for estimate in self.estimates],
            "cheapest": self.cheapest.provider.value if self.cheapest else None,
            "most_expensive": self.most_expensive.provider.value if self.most_expensive else None,
            "potential_savings": {k: round(v, 2) for k, v in self.potential_savings.items()},
            "insights": self.insights,
        }


@dataclass
class LicenseLineItem:
    """Flat display row of a license calculator result."""
    category: str  # "License" | "Add-On" | "Service" | "Infrastructure"
    name: str
    amount: float
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category,
            "name": self.name,
            "amount": round(self.amount, 2),
            "notes": self.notes,
        }
