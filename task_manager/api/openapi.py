"""
Stable contract view of the generated OpenAPI document.

The raw document also carries framework details (validation-error schemas,
titles, operation ids) that change between FastAPI releases. The contract
keeps what clients depend on: every operation's parameters, request body
model, success status and whether it needs a bearer token, plus the property
names of this API's own models.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

_FRAMEWORK_SCHEMAS = {"HTTPValidationError", "ValidationError"}


def _ref_name(content: Dict[str, Any]) -> Optional[str]:
    schema = content.get("application/json", {}).get("schema", {})
    ref = schema.get("$ref")
    return ref.rsplit("/", 1)[-1] if ref else None


def _operation(op: Dict[str, Any]) -> Dict[str, Any]:
    params: List[List[str]] = sorted([p["in"], p["name"]] for p in op.get("parameters", []))
    success = sorted(str(code) for code in op.get("responses", {}) if str(code).startswith("2"))
    body = op.get("requestBody")
    return {
        "parameters": params,
        "request_body": _ref_name(body.get("content", {})) if body else None,
        "success_status": success[0] if success else None,
        "secured": bool(op.get("security")),
    }


def openapi_contract(schema: Dict[str, Any]) -> Dict[str, Any]:
    paths = {
        path: {method: _operation(op) for method, op in sorted(ops.items())}
        for path, ops in sorted(schema.get("paths", {}).items())
    }
    components = schema.get("components", {})
    models = {
        name: sorted(model.get("properties", {}))
        for name, model in sorted(components.get("schemas", {}).items())
        if name not in _FRAMEWORK_SCHEMAS
    }
    return {
        "info": {"title": schema["info"]["title"], "version": schema["info"]["version"]},
        "paths": paths,
        "models": models,
        "security_schemes": sorted(components.get("securitySchemes", {})),
    }
