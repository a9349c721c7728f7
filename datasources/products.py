"""Mock product inventory."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .base import ChartAggregation, Column, DataSource, FilterModel, Record, as_points, count_by, format_money

CATEGORIES = {
    "Electronics": ["Laptops", "Phones", "Tablets", "Accessories", "Audio"],
    "Furniture": ["Desks", "Chairs", "Storage", "Lighting", "Decor"],
    "Office": ["Supplies", "Paper", "Writing", "Organization", "Tech"],
    "Software": ["Productivity", "Security", "Design", "Development", "Communication"],
}

PRODUCT_NAMES = {
    "Laptops": ["ProBook 15", "UltraSlim 14", "WorkStation X", "DevBook Pro", "Budget Laptop"],
    "Phones": ["SmartPhone Pro", "Galaxy Plus", "Business Phone", "Budget Mobile", "Secure Device"],
    "Tablets": ["TabPro 12", "Mini Tab 8", "Drawing Tablet", "Kids Tablet", "Business Tab"],
    "Accessories": ["USB Hub", "Wireless Mouse", "Keyboard Pro", "Monitor Stand", "Webcam HD"],
    "Audio": ["Headphones Pro", "Earbuds Wireless", "Conference Speaker", "Microphone USB", "Soundbar"],
    "Desks": ["Standing Desk", "Executive Desk", "Corner Desk", "Simple Desk", "Adjustable Desk"],
    "Chairs": ["Ergonomic Chair", "Executive Chair", "Task Chair", "Guest Chair", "Stool"],
    "Storage": ["Filing Cabinet", "Bookshelf", "Storage Box", "Drawer Unit", "Locker"],
    "Lighting": ["Desk Lamp", "Floor Lamp", "LED Panel", "Task Light", "Ring Light"],
    "Decor": ["Plant", "Wall Art", "Clock", "Whiteboard", "Cork Board"],
    "Supplies": ["Stapler Set", "Paper Clips", "Tape Dispenser", "Scissors", "Ruler Set"],
    "Paper": ["Copy Paper", "Notebook", "Sticky Notes", "Index Cards", "Labels"],
    "Writing": ["Pen Set", "Marker Pack", "Highlighters", "Pencils", "Erasers"],
    "Organization": ["Binder", "Folder Pack", "Desk Organizer", "File Box", "Label Maker"],
    "Tech": ["Calculator", "Power Strip", "Extension Cord", "Surge Protector", "Battery Pack"],
    "Productivity": ["Office Suite", "Project Manager", "Time Tracker", "Note App", "Calendar Pro"],
    "Security": ["Antivirus Pro", "VPN Service", "Password Manager", "Backup Solution", "Firewall"],
    "Design": ["Photo Editor", "Vector Graphics", "Video Editor", "Audio Suite", "3D Modeler"],
    "Development": ["IDE Pro", "Database Tool", "API Client", "Version Control", "Testing Suite"],
    "Communication": ["Video Chat", "Team Messenger", "Email Client", "Webinar Tool", "Voice Chat"],
}

SUPPLIERS = [
    "TechSupply Co", "Global Distributors", "Office Depot", "Amazon Business", "Staples",
    "CDW", "Insight", "SHI", "Connection", "PCM", "Zones", "Ingram Micro",
]

Category = Literal["Electronics", "Furniture", "Office", "Software"]
ProductStatus = Literal["IN_STOCK", "LOW_STOCK", "OUT_OF_STOCK", "DISCONTINUED"]


def _status_for(stock: int, rng: random.Random) -> str:
    if stock == 0:
        return "OUT_OF_STOCK"
    if stock < 10:
        return "LOW_STOCK"
    if rng.random() < 0.05:
        return "DISCONTINUED"
    return "IN_STOCK"


def generate_products(count: int = 75, seed: int = 3003, as_of: Optional[date] = None) -> List[Record]:
    rng = random.Random(seed)
    as_of = as_of or date.today()
    products: List[Record] = []

    for i in range(1, count + 1):
        category = rng.choice(list(CATEGORIES))
        subcategory = rng.choice(CATEGORIES[category])
        price = round(rng.random() * 500 + 10, 2)
        stock = rng.randrange(200)
        products.append({
            "id": f"PRD-{i:04d}",
            "sku": f"{category[:3].upper()}-{subcategory[:3].upper()}-{i:04d}",
            "name": f"{rng.choice(PRODUCT_NAMES[subcategory])} {rng.randrange(100)}",
            "category": category,
            "subcategory": subcategory,
            "price": price,
            "cost": round(price * (0.4 + rng.random() * 0.3), 2),
            "stock": stock,
            "supplier": rng.choice(SUPPLIERS),
            "status": _status_for(stock, rng),
            "lastRestocked": (as_of - timedelta(days=rng.randrange(60))).isoformat(),
        })

    return sorted(products, key=lambda p: (p["category"], p["name"]))


class ProductFilters(FilterModel):
    name: Optional[str] = Field(default=None, description="Filter by product name")
    sku: Optional[str] = Field(default=None, description="Filter by SKU")
    category: Optional[Category] = None
    subcategory: Optional[str] = Field(default=None, description="Filter by subcategory")
    supplier: Optional[str] = Field(default=None, description="Filter by supplier")
    status: Optional[ProductStatus] = None
    min_price: Optional[float] = Field(default=None, description="Minimum price")
    max_price: Optional[float] = Field(default=None, description="Maximum price")
    min_stock: Optional[int] = Field(default=None, description="Minimum stock level")
    max_stock: Optional[int] = Field(default=None, description="Maximum stock level")


class ProductsDataSource(DataSource):
    name = "products"
    description = "Product inventory with categories, pricing, stock levels, and supplier information"
    filter_model = ProductFilters
    columns = [
        Column("id", "ID"),
        Column("sku", "SKU"),
        Column("name", "Name"),
        Column("category", "Category"),
        Column("price", "Price", money=True),
        Column("stock", "Stock"),
        Column("supplier", "Supplier"),
        Column("status", "Status"),
    ]
    chart_aggregations = [
        ChartAggregation("byCategory", "Products by Category", "name", "count", "bar"),
        ChartAggregation("byStatus", "Products by Status", "name", "count", "pie"),
        ChartAggregation("bySupplier", "Products by Supplier", "name", "count", "bar"),
        ChartAggregation("valueByCategory", "Inventory Value by Category", "name", "value", "bar"),
    ]

    contains_filters = ("name", "sku", "supplier")
    exact_filters = ("category", "subcategory", "status")
    bound_filters = {
        "minPrice": ("price", "min"),
        "maxPrice": ("price", "max"),
        "minStock": ("stock", "min"),
        "maxStock": ("stock", "max"),
    }
    aggregations = {
        "byCategory": "_by_category",
        "byStatus": "_by_status",
        "bySupplier": "_by_supplier",
        "valueByCategory": "_value_by_category",
    }

    def _by_category(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "category"))

    def _by_status(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "status"), sort=False)

    def _by_supplier(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "supplier"), top=10)

    def _value_by_category(self, records: List[Record]) -> List[Record]:
        values: Dict[str, float] = {}
        for r in records:
            values[r["category"]] = values.get(r["category"], 0) + r["price"] * r["stock"]
        return as_points({k: round(v) for k, v in values.items()}, "value")

    def summary(self, records: List[Record]) -> Dict[str, Any]:
        statuses = count_by(records, "status")
        total_value = round(sum(r["price"] * r["stock"] for r in records), 2)
        return {
            "totalProducts": len(records),
            "totalStock": sum(r["stock"] for r in records),
            "totalValue": format_money(total_value),
            "lowStockCount": statuses.get("LOW_STOCK", 0),
            "outOfStockCount": statuses.get("OUT_OF_STOCK", 0),
        }


__all__ = ["generate_products", "ProductFilters", "ProductsDataSource"]
