"""JSON schema definition for reporter output."""
from __future__ import annotations

SCHEMA_VERSION = "1.0.0"

JSON_SCHEMA_V1 = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "simtest report",
    "type": "object",
    "required": ["schema_version", "generated_at", "summary", "cases"],
    "properties": {
        "schema_version": {"type": "string"},
        "generated_at": {"type": "string", "format": "date-time"},
        "summary": {
            "type": "object",
            "required": ["total", "passed", "failed", "errors", "duration_s"],
            "properties": {
                "total": {"type": "integer"},
                "passed": {"type": "integer"},
                "failed": {"type": "integer"},
                "errors": {"type": "integer"},
                "duration_s": {"type": "number"},
            },
        },
        "cases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "category", "name", "status", "duration_ms"],
                "properties": {
                    "id": {"type": "string"},
                    "category": {"type": "string"},
                    "name": {"type": "string"},
                    "status": {"enum": ["passed", "failed", "error"]},
                    "duration_ms": {"type": "number"},
                    "simulator_returncode": {"type": ["integer", "null"]},
                    "error": {"type": "string"},
                    "comparison": {
                        "type": "object",
                        "required": ["passed", "compared"],
                        "properties": {
                            "passed": {"type": "boolean"},
                            "compared": {"type": "integer"},
                            "line_number": {"type": ["integer", "null"]},
                            "expected_line": {"type": ["string", "null"]},
                            "actual_line": {"type": ["string", "null"]},
                            "message": {"type": ["string", "null"]},
                        },
                    },
                },
            },
        },
    },
}
