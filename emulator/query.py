"""
The query subset the emulator understands.

Only ``SELECT * FROM <alias>`` with an optional WHERE clause of equality
conditions on top-level fields, joined by AND, is supported. The right-hand
side of a condition is a ``@parameter`` or a JSON literal:

```
SELECT * FROM c WHERE c.city = @city AND c.active = true
```
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any

from .exceptions import BadRequest

_SELECT = re.compile(
    r"^\s*SELECT\s+\*\s+FROM\s+(?P<alias>[A-Za-z_]\w*)(?:\s+WHERE\s+(?P<where>.+?))?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_CONDITION = re.compile(r"^(?P<alias>[A-Za-z_]\w*)\.(?P<field>[A-Za-z_]\w*)\s*=\s*(?P<value>.+)$")
_AND = re.compile(r"\s+AND\s+", re.IGNORECASE)


def _equal(a: Any, b: Any) -> bool:
    # bool is an int subclass; true must not equal 1
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


@dataclass(frozen=True)
class Condition:
    field: str
    value: Any

    def matches(self, item: dict[str, Any]) -> bool:
        return self.field in item and _equal(item[self.field], self.value)


@dataclass(frozen=True)
class SelectQuery:
    alias: str
    conditions: list[Condition] = field(default_factory=list)

    def matches(self, item: Any) -> bool:
        if not isinstance(item, dict):
            return False
        return all(c.matches(item) for c in self.conditions)

    def filter(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [item for item in items if self.matches(item)]


def _literal(text: str) -> Any:
    if len(text) >= 2 and text[0] == text[-1] == "'":
        return text[1:-1]
    try:
        return json.loads(text)
    except ValueError as e:
        raise BadRequest(f"unsupported literal in query: {text}") from e


def _parameters(body: dict[str, Any]) -> dict[str, Any]:
    raw = body.get("parameters") or []
    if not isinstance(raw, list):
        raise BadRequest("query parameters must be an array")
    params: dict[str, Any] = {}
    for p in raw:
        if not isinstance(p, dict) or not isinstance(p.get("name"), str):
            raise BadRequest("each query parameter needs a name")
        params[p["name"]] = p.get("value")
    return params


def parse_query(body: Any) -> SelectQuery:
    """Parse a ``{"query": ..., "parameters": [...]}`` request body."""
    if not isinstance(body, dict) or not isinstance(body.get("query"), str):
        raise BadRequest("query body must be an object with a 'query' string")
    params = _parameters(body)

    m = _SELECT.match(body["query"])
    if m is None:
        raise BadRequest(f"unsupported query: {body['query']}")

    alias = m.group("alias")
    conditions = []
    where = m.group("where")
    if where:
        for clause in _AND.split(where):
            c = _CONDITION.match(clause.strip())
            if c is None or c.group("alias") != alias:
                raise BadRequest(f"unsupported condition: {clause.strip()}")
            raw = c.group("value").strip()
            if raw.startswith("@"):
                if raw not in params:
                    raise BadRequest(f"parameter {raw} is not defined")
                value = params[raw]
            else:
                value = _literal(raw)
            conditions.append(Condition(c.group("field"), value))
    return SelectQuery(alias, conditions)
