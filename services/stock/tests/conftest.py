import os

# Keep the service's engine off Postgres while the test suite imports it
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

from app.domain.catalog import Catalog


@pytest.fixture
def catalog() -> Catalog:
    """Part A=10, Part B=5, Part C=0; product P = {A:2, B:1}, product Q = {B:3, C:1}"""
    return Catalog.from_records(
        parts=[
            {"id": "part-a", "name": "Part A", "quantity_on_hand": 10},
            {"id": "part-b", "name": "Part B", "quantity_on_hand": 5},
            {"id": "part-c", "name": "Part C", "quantity_on_hand": 0},
        ],
        products=[
            {
                "id": "prod-p",
                "name": "Product P",
                "bill_of_materials": [
                    {"part_id": "part-a", "required_quantity": 2},
                    {"part_id": "part-b", "required_quantity": 1},
                ],
            },
            {
                "id": "prod-q",
                "name": "Product Q",
                "bill_of_materials": [
                    {"part_id": "part-b", "required_quantity": 3},
                    {"part_id": "part-c", "required_quantity": 1},
                ],
            },
        ],
    )
