# domain/reconciler.py
"""
Balance computation for a DailyLedger.

For every route and product:
    inbound   = quantity loaded on the route
    delivered = sum of that product over the route's deliveries
    remaining = inbound - delivered   (negative = over-delivery)
"""

from collections import defaultdict
from typing import Dict, List

from domain.catalog import PRODUCTS, ROTAS
from domain.models import DailyLedger, ProductBalance, ReconciliationReport, RouteBalance


def delivered_totals(ledger: DailyLedger, rota: str) -> Dict[str, int]:
    totals: Dict[str, int] = defaultdict(int)
    for delivery in ledger.deliveries_for(rota):
        for product, qty in delivery.items.items():
            totals[product] += qty
    return dict(totals)


def reconcile(ledger: DailyLedger) -> ReconciliationReport:
    """
    Compute per-route and global balances. Does not modify `ledger`.
    """
    matrix: Dict[str, Dict[str, ProductBalance]] = {}
    routes: Dict[str, RouteBalance] = {}
    global_in: Dict[str, int] = defaultdict(int)
    global_out: Dict[str, int] = defaultdict(int)
    total_inbound = 0
    total_delivered = 0

    for rota in ROTAS:
        inbound = ledger.inbound_for(rota)
        delivered = delivered_totals(ledger, rota)

        row = {
            product: ProductBalance(
                product=product,
                inbound=inbound.get(product, 0),
                delivered=delivered.get(product, 0),
            )
            for product in PRODUCTS
        }
        matrix[rota] = row

        # off-catalog keys still count toward the totals
        route_in = sum(inbound.values())
        route_out = sum(delivered.values())
        for product, qty in inbound.items():
            global_in[product] += qty
        for product, qty in delivered.items():
            global_out[product] += qty

        lines = [b for b in row.values() if not b.is_idle]
        deliveries = ledger.deliveries_for(rota)
        if lines or deliveries:
            routes[rota] = RouteBalance(
                rota=rota,
                lines=lines,
                total_inbound=route_in,
                total_delivered=route_out,
                delivery_count=len(deliveries),
            )

        total_inbound += route_in
        total_delivered += route_out

    products: List[ProductBalance] = []
    for product in PRODUCTS:
        balance = ProductBalance(
            product=product,
            inbound=global_in.get(product, 0),
            delivered=global_out.get(product, 0),
        )
        if not balance.is_idle:
            products.append(balance)

    return ReconciliationReport(
        date=ledger.date,
        routes=routes,
        products=products,
        total_inbound=total_inbound,
        total_delivered=total_delivered,
        _matrix=matrix,
    )
