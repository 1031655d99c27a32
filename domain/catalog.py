# domain/catalog.py

from typing import Tuple

ROTAS: Tuple[str, ...] = (
    "Barra",
    "Botafogo",
    "Centro",
    "Copacabana",
    "Niteroi",
    "Norte",
    "Tijuca",
)

PRODUCTS: Tuple[str, ...] = (
    "Café",
    "Café organico",
    "Açucar",
    "Adoçante",
    "Chocolate",
    "Leite",
    "Copo 160",
    "Copo 160 AE",
    "Copo Isopor",
    "Adoçante líquido",
    "Xicaras",
    "Outros",
)

# Quantity inputs accept at most 4 digits
MAX_QTY_INPUT = 9999


def is_known_rota(rota: str) -> bool:
    return rota in ROTAS


def is_known_product(product: str) -> bool:
    return product in PRODUCTS
