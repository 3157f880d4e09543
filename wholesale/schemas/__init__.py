"""
schemas/ — Pydantic request models for the wholesale API

Input validation and OpenAPI docs. Responses are plain dicts built by the
``*_to_dict`` serializers in services/.
"""
