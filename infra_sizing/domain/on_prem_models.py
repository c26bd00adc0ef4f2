"""
Domain models for self-hosted (on-premises) cost inputs.
"""
import math
from dataclasses import dataclass, field

from infra_sizing.core.config import config
from infra_sizing.domain.enums import Distribution, base_distribution
from infra_sizing.domain.pricing_models import TANZU_CORES_PER_NODE


CORES_PER_SERVER = 64
RACK_UNITS_PER_SERVER = 2


@dataclass
class HardwareCosts:
    """Purchase prices of physical equipment."""
    server_cost: float = 15000.0
    per_cpu_core: float = 200.0
    per_gb_ram: float = 15.0
    per_tb_ssd: float = 200.0
    per_tb_hdd: float = 50.0
    network_switch_cost: float = 5000.0
    load_balancer_cost: float = 10000.0
    vms_per_server: int = 10

    def total_cost(self, cpu_cores: int, ram_gb: int, storage_tb: float, load_balancers: int = 0) -> float:
        """One-off purchase cost of a deployment."""
        servers = math.ceil(cpu_cores / CORES_PER_SERVER)
        switches = max(1, math.ceil(servers / 40))
        return (
            servers * self.server_cost
            + cpu_cores * self.per_cpu_core
            + ram_gb * self.per_gb_ram
            + storage_tb * self.per_tb_ssd
            + switches * self.network_switch_cost
            + load_balancers * self.load_balancer_cost
        )


@dataclass
class DataCenterCosts:
    rack_unit_per_month: float = 100.0
    power_per_kwh: float = 0.12
    watts_per_server: int = 500
    pue: float = 1.6
    cooling_percent: float = 40.0

    def monthly_cost(self, servers: int) -> float:
        rack = servers * RACK_UNITS_PER_SERVER * self.rack_unit_per_month
        monthly_kwh = servers * self.watts_per_server * config.HOURS_PER_MONTH / 1000
        power = monthly_kwh * self.power_per_kwh * self.pue
        cooling = power * self.cooling_percent / 100
        return rack + power + cooling


@dataclass
class LaborCosts:
    devops_engineer_monthly: float = 12000.0
    nodes_per_engineer: int = 50
    sysadmin_monthly: float = 8000.0
    dba_monthly: float = 10000.0
    include_dba: bool = True

    def monthly_cost(self, nodes: int, has_prod: bool = True) -> float:
        engineers = max(1.0, nodes / self.nodes_per_engineer)
        devops = engineers * self.devops_engineer_monthly
        sysadmin = max(1.0, engineers * 0.5) * self.sysadmin_monthly
        dba = self.dba_monthly if self.include_dba and has_prod else 0.0
        return devops + sysadmin + dba


@dataclass
class DistributionLicensing:
    """Per node-year subscriptions for self-managed distributions."""
    openshift_per_node_year: float = 2500.0
    tanzu_per_core_year: float = 1500.0
    rancher_enterprise_per_node_year: float = 1000.0
    charmed_k8s_per_node_year: float = 500.0

    def annual_cost(self, distribution: Distribution, node_count: int, core_count: int = 0) -> float:
        base = base_distribution(distribution)
        if base == Distribution.OPENSHIFT:
            return self.openshift_per_node_year * node_count
        if base == Distribution.TANZU:
            cores = core_count if core_count > 0 else node_count * TANZU_CORES_PER_NODE
            return self.tanzu_per_core_year * cores
        if base == Distribution.RANCHER:
            return self.rancher_enterprise_per_node_year * node_count
        if base == Distribution.CHARMED:
            return self.charmed_k8s_per_node_year * node_count
        # RKE2, K3s, MicroK8s and vanilla Kubernetes are free
        return 0.0

    def monthly_cost(self, distribution: Distribution, node_count: int, core_count: int = 0) -> float:
        return self.annual_cost(distribution, node_count, core_count) / config.MONTHS_PER_YEAR

    def has_license_cost(self, distribution: Distribution) -> bool:
        return self.annual_cost(distribution, 1) > 0


@dataclass
class OnPremPricing:
    """Everything needed to price a self-hosted deployment."""
    hardware: HardwareCosts = field(default_factory=HardwareCosts)
    data_center: DataCenterCosts = field(default_factory=DataCenterCosts)
    labor: LaborCosts = field(default_factory=LaborCosts)
    licensing: DistributionLicensing = field(default_factory=DistributionLicensing)
    hardware_refresh_years: int = 4
    hardware_maintenance_percent: float = 10.0

    @property
    def amortization_months(self) -> int:
        return self.hardware_refresh_years * config.MONTHS_PER_YEAR

    def monthly_hardware_cost(self, servers: int) -> float:
        """Server amortization over the refresh cycle plus yearly maintenance."""
        total = servers * self.hardware.server_cost
        amortized = total / self.amortization_months
        maintenance = total * self.hardware_maintenance_percent / 100 / config.MONTHS_PER_YEAR
        return amortized + maintenance
