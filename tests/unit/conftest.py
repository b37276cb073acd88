"""Shared fixtures for unit tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

SAMPLE_TOKENS: list[dict[str, Any]] = [
    {
        "name": "primary-blue",
        "value": "#1434CB",
        "category": "color",
        "description": "Primary brand color",
        "usage": ["buttons", "links"],
        "aliases": ["brand-blue"],
    },
    {
        "name": "spacing-sm",
        "value": 8,
        "category": "spacing",
        "description": "Small spacing step",
        "deprecated": True,
    },
    {
        "name": "font-body",
        "value": "16px/1.5 Inter",
        "category": "typography",
        "usage": ["paragraphs"],
    },
]

SAMPLE_COMPONENTS: list[dict[str, Any]] = [
    {
        "name": "Button",
        "description": "Triggers an action",
        "category": "actions",
        "props": [
            {
                "name": "variant",
                "type": "'primary' | 'secondary'",
                "required": True,
                "description": "Visual style",
            },
            {
                "name": "disabled",
                "type": "boolean",
                "required": False,
                "default": False,
                "description": "Disables interaction",
            },
        ],
        "variants": [
            {"name": "primary", "props": {"variant": "primary"}, "description": "Main action"}
        ],
        "examples": [
            {
                "title": "Basic",
                "description": "A primary button",
                "code": "<Button variant=\"primary\">Pay</Button>",
                "language": "tsx",
            }
        ],
        "guidelines": ["Use one primary button per view"],
        "accessibility": {
            "ariaLabels": ["aria-pressed"],
            "keyboardNavigation": "Enter and Space activate the button",
        },
    },
    {
        "name": "Card",
        "description": "Groups related content",
        "category": "layout",
        "props": [],
        "variants": [],
        "examples": [],
        "guidelines": [],
        "accessibility": {},
    },
]

SAMPLE_GUIDELINES: list[dict[str, Any]] = [
    {
        "id": "color-usage",
        "title": "Color Usage",
        "category": "color",
        "content": "Use primary blue for main actions.",
        "tags": ["color", "brand"],
        "lastUpdated": "2024-01-15T00:00:00Z",
        "relatedComponents": ["Button"],
        "relatedTokens": ["primary-blue"],
    },
    {
        "id": "spacing-rhythm",
        "title": "Spacing Rhythm",
        "category": "layout",
        "content": "Use multiples of the base spacing unit.",
        "tags": ["spacing"],
        "lastUpdated": "2024-02-01T12:30:00Z",
    },
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def write_data(
    data_dir: Path,
    tokens: Any = None,
    components: Any = None,
    guidelines: Any = None,
) -> Path:
    """Write the three data files, defaulting to the sample records."""
    data_dir.mkdir(parents=True, exist_ok=True)
    files = {
        "design-tokens.json": SAMPLE_TOKENS if tokens is None else tokens,
        "components.json": SAMPLE_COMPONENTS if components is None else components,
        "guidelines.json": SAMPLE_GUIDELINES if guidelines is None else guidelines,
    }
    for filename, content in files.items():
        (data_dir / filename).write_text(json.dumps(content), encoding="utf-8")
    return data_dir


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A data directory holding the sample records."""
    return write_data(tmp_path / "data")


@pytest.fixture
def write_files() -> Any:
    """Return the data-file writer for tests that need custom content."""
    return write_data
