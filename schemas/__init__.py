"""
Pydantic schemas for the HTTP API.

Record models (models/) describe rows in the table service; the schemas
here describe what the dashboards send and receive around them:

Schemas:
    api: Response views (dashboards, filtered lists, aggregates, results)
    requests: Request bodies (forms) with their validation rules

Features:
    - camelCase on the wire, snake_case in Python (populate_by_name)
    - Form rules enforced at the edge (email format, password length and
      confirmation, dimensions for sea freight, weight for air freight)
    - RequestModel.to_fields() yields the column values the records layer writes

Usage:
    from schemas.requests import ItemCreate
    from schemas.api import PackagesView

Example:
    body = ItemCreate.model_validate({"shippingMethod": "air", "weight": 2.5})
    body.to_fields()
    # {"quantity": 1, "length": 0.0, ..., "shippingMethod": "air", "weight": 2.5, ...}
"""

__all__ = [
    "ViewModel",
    "RequestModel",
]
