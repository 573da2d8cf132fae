"""
DevConnect Backend - Pydantic Request/Response Schemas
=======================================================

Shape-level validation of request bodies and the camelCase JSON contract of
every response. Semantic rules (password strength, skill normalization) live
in devconnect.validators.
"""
