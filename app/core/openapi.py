"""OpenAPI metadata customization.

Adds tag descriptions to the generated schema so the waitlist and health
endpoints are grouped in the interactive docs.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Waitlist",
        "description": "Waitlist sign-ups forwarded to the Notion database.",
    },
    {
        "name": "Health",
        "description": "Liveness, configuration status and Notion connectivity.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tag metadata."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
