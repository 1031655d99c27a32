# domain/models.py

from dataclasses import dataclass, field
from typing import Any, Dict, List

from domain.catalog import ROTAS


@dataclass
class Delivery:
    """
    Items handed to one client on one route at one moment.
    """
    id: str  # e.g. "Centro-1714560000000-0a3f"
    client_name: str
    timestamp: str  # ISO instant, UTC
    items: Dict[str, int]  # product -> quantity
    rota: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "clientName": self.client_name,
            "timestamp": self.timestamp,
            "items": dict(self.items),
            "rota": self.rota,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Delivery":
        return cls(
            id=str(data["id"]),
            client_name=data.get("clientName", ""),
            timestamp=data.get("timestamp", ""),
            items={p: int(q or 0) for p, q in (data.get("items") or {}).items()},
            rota=data.get("rota", ""),
        )


@dataclass
class DailyLedger:
    """
    Everything recorded for one calendar day, across all routes.

    Routes missing from either map are treated as empty.
    """
    date: str  # YYYY-MM-DD
    rota_inbound: Dict[str, Dict[str, int]] = field(default_factory=dict)
    client_deliveries: Dict[str, List[Delivery]] = field(default_factory=dict)

    def inbound_for(self, rota: str) -> Dict[str, int]:
        return self.rota_inbound.get(rota) or {}

    def deliveries_for(self, rota: str) -> List[Delivery]:
        return self.client_deliveries.get(rota) or []

    def is_empty(self) -> bool:
        has_inbound = any(any(q > 0 for q in m.values()) for m in self.rota_inbound.values())
        has_deliveries = any(self.client_deliveries.values())
        return not (has_inbound or has_deliveries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "rotaInbound": {r: dict(m) for r, m in self.rota_inbound.items()},
            "clientDeliveries": {
                r: [d.to_dict() for d in dels] for r, dels in self.client_deliveries.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyLedger":
        return cls(
            date=data["date"],
            rota_inbound={
                r: {p: int(q or 0) for p, q in (m or {}).items()}
                for r, m in (data.get("rotaInbound") or {}).items()
            },
            client_deliveries={
                r: [Delivery.from_dict(d) for d in (dels or [])]
                for r, dels in (data.get("clientDeliveries") or {}).items()
            },
        )


@dataclass
class ProductBalance:
    product: str
    inbound: int
    delivered: int

    @property
    def remaining(self) -> int:
        # negative means more was delivered than loaded
        return self.inbound - self.delivered

    @property
    def is_idle(self) -> bool:
        return self.inbound == 0 and self.delivered == 0


@dataclass
class RouteBalance:
    rota: str
    lines: List[ProductBalance]  # only products with activity, catalog order
    total_inbound: int
    total_delivered: int
    delivery_count: int

    @property
    def total_remaining(self) -> int:
        return self.total_inbound - self.total_delivered

    @property
    def has_activity(self) -> bool:
        return bool(self.lines) or self.delivery_count > 0


@dataclass
class ReconciliationReport:
    date: str
    routes: Dict[str, RouteBalance]  # only routes with activity
    products: List[ProductBalance]  # global per-product lines, catalog order
    total_inbound: int
    total_delivered: int
    _matrix: Dict[str, Dict[str, ProductBalance]] = field(default_factory=dict, repr=False)

    @property
    def total_remaining(self) -> int:
        return self.total_inbound - self.total_delivered

    def balance(self, rota: str, product: str) -> ProductBalance:
        """
        Balance for any (route, product) pair, including the idle ones
        left out of `routes`.
        """
        found = self._matrix.get(rota, {}).get(product)
        if found is None:
            return ProductBalance(product=product, inbound=0, delivered=0)
        return found

    def ordered_routes(self) -> List[RouteBalance]:
        return [self.routes[r] for r in ROTAS if r in self.routes]
