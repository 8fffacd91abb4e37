"""
Schemas module - Request/Response schemas for API endpoints.

- Request schemas: what the API accepts (validated before any SQL runs)
- Response schemas: the {success, data, pagination} envelopes the API returns
"""
