"""
Seed data -- populates the catalog with a small clothing store.

Run with:
    shopbridge init-db --seed

Idempotent: lookup tables and products are matched by name before
inserting, so re-running never duplicates rows or touches stock.
"""

from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

CATALOG = [
    {
        "name": "Camisa Oxford",
        "description": "Camisa de algodón manga larga, corte clásico.",
        "price": "45.00",
        "category": "Hombre",
        "garment_type": "Camisa",
        "variants": [
            {"color": "Blanco", "size": "M", "stock": 12},
            {"color": "Blanco", "size": "L", "stock": 8},
            {"color": "Celeste", "size": "M", "stock": 5},
        ],
    },
    {
        "name": "Pantalón Chino",
        "description": "Pantalón de gabardina elastizada.",
        "price": "60.00",
        "category": "Hombre",
        "garment_type": "Pantalón",
        "variants": [
            {"color": "Beige", "size": "40", "stock": 10},
            {"color": "Azul marino", "size": "42", "stock": 4},
        ],
    },
    {
        "name": "Buzo Canguro",
        "description": "Buzo de frisa con capucha y bolsillo frontal.",
        "price": "55.50",
        "category": "Unisex",
        "garment_type": "Sudadera con capucha",
        "variants": [
            {"color": "Gris", "size": "S", "stock": 7},
            {"color": "Negro", "size": "M", "stock": 0},
        ],
    },
    {
        "name": "Falda Plisada",
        "description": "Falda midi plisada con cintura elástica.",
        "price": "38.90",
        "category": "Mujer",
        "garment_type": "Falda",
        "variants": [
            {"color": "Verde", "size": "S", "stock": 6},
            {"color": "Negro", "size": "M", "stock": 9},
        ],
    },
]


def _lookup_id(conn: Connection, table: str, name: str) -> Optional[int]:
    row = conn.execute(
        text(f"SELECT id FROM {table} WHERE name = :name"), {"name": name}
    ).first()
    return row[0] if row else None


def _get_or_insert(conn: Connection, table: str, name: str, cache: Dict[str, int]) -> int:
    key = f"{table}:{name}"
    if key not in cache:
        existing = _lookup_id(conn, table, name)
        if existing is None:
            existing = conn.execute(
                text(f"INSERT INTO {table} (name) VALUES (:name) RETURNING id"),
                {"name": name},
            ).scalar()
        cache[key] = existing
    return cache[key]


def seed(engine: Engine) -> int:
    """Insert the sample catalog; returns how many products were added"""
    added = 0
    cache: Dict[str, int] = {}

    with engine.begin() as conn:
        for p in CATALOG:
            if _lookup_id(conn, "products", p["name"]) is not None:
                print(f"  [=] Product exists: {p['name']}")
                continue

            product_id = conn.execute(
                text(
                    "INSERT INTO products "
                    "(name, description, price, available, category_id, garment_type_id) "
                    "VALUES (:name, :description, :price, :available, :category_id, :garment_type_id) "
                    "RETURNING id"
                ),
                {
                    "name": p["name"],
                    "description": p["description"],
                    "price": p["price"],
                    "available": True,
                    "category_id": _get_or_insert(conn, "categories", p["category"], cache),
                    "garment_type_id": _get_or_insert(conn, "garment_types", p["garment_type"], cache),
                },
            ).scalar()

            for v in p["variants"]:
                conn.execute(
                    text(
                        "INSERT INTO product_variants (product_id, color_id, size_id, stock) "
                        "VALUES (:product_id, :color_id, :size_id, :stock)"
                    ),
                    {
                        "product_id": product_id,
                        "color_id": _get_or_insert(conn, "colors", v["color"], cache),
                        "size_id": _get_or_insert(conn, "sizes", v["size"], cache),
                        "stock": v["stock"],
                    },
                )

            added += 1
            print(f"  [+] Product: {p['name']}")

    return added
