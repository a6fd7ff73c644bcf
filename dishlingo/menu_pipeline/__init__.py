"""
Menu pipeline package:
- dish_schema: dish records, failure policies, per-image results, request bodies
- validation: "is this a menu?" check over the batch
- extraction: per-image dish list extraction
- enrichment: concurrent pronunciation / allergen lookups
- pipeline: orchestrator tying the stages together
"""
