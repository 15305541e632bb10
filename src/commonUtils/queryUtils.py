"""
Translation of client-supplied query-string parameters into MongoDB filter documents.

Parameters arrive as a flat mapping of name -> str | list[str]. A key may carry one
comparison token in brackets (``price[gte]=100``); every other key is an exact match.
Only fields declared in a ``FieldSpec`` table are ever compiled, so the generated
filter can never reference a field or an operator the caller did not opt into.
"""
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from src.commonUtils.errors import QueryCompileError

logger = logging.getLogger(__name__)

ParamValue = Union[str, List[str]]

# Never treated as field filters
CONTROL_PARAMS = frozenset({"keyword", "page", "limit"})

KEYWORD_FIELDS = ("name", "brand", "category")

_KEY_PATTERN = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_.]*)(?:\[(?P<op>[^\[\]]*)\])?$")


class Op(str, Enum):
    EQ = "eq"
    GTE = "gte"
    GT = "gt"
    LTE = "lte"
    LT = "lt"

    @property
    def mongo(self) -> str:
        return f"${self.value}"


COMPARISON_OPS = {op.value: op for op in (Op.GTE, Op.GT, Op.LTE, Op.LT)}


def parse_number(raw: str) -> float:
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"{raw!r} is not a finite number")
    return value


def parse_int(raw: str) -> int:
    return int(raw)


def parse_datetime(raw: str) -> datetime:
    return datetime.fromisoformat(raw)


@dataclass(frozen=True)
class FieldSpec:
    """A filterable field: stored path, how to coerce a raw value, and whether it can be compared."""
    path: str
    cast: Callable[[str], Any] = str
    orderable: bool = False


@dataclass(frozen=True)
class Predicate:
    op: Op
    field: str
    value: Any


def query_params_to_mapping(query_params) -> Dict[str, ParamValue]:
    """Flatten a Starlette ``QueryParams`` multi-dict; repeated keys become lists."""
    mapping: Dict[str, ParamValue] = {}
    for key in query_params.keys():
        values = query_params.getlist(key)
        mapping[key] = values if len(values) > 1 else values[0]
    return mapping


def _split_key(key: str) -> Tuple[str, Optional[str]]:
    match = _KEY_PATTERN.match(key)
    if not match:
        raise QueryCompileError(f"Malformed filter parameter '{key}'")
    return match.group("field"), match.group("op")


def _iter_leaves(
        params: Mapping[str, Any],
        fields: Mapping[str, FieldSpec],
) -> Iterable[Tuple[str, Optional[str], Any]]:
    """Yield (field name, operator token, raw value) for every parameter naming a known field."""
    for key, value in params.items():
        if not isinstance(key, str):
            raise QueryCompileError("Filter parameter names must be strings")
        if key in CONTROL_PARAMS:
            continue
        # Only keys on a declared field are held to the strict grammar
        if key.split("[", 1)[0] not in fields:
            logger.debug(f"Ignoring unknown filter parameter '{key}'")
            continue
        name, token = _split_key(key)
        if isinstance(value, Mapping):
            # Nested form: {"price": {"gte": "100"}}
            if token is not None:
                raise QueryCompileError(f"Malformed filter parameter '{key}'")
            for nested_token, nested_value in value.items():
                yield name, str(nested_token), nested_value
        else:
            yield name, token, value


def _coerce(spec: FieldSpec, name: str, raw: Any) -> Any:
    if not isinstance(raw, str):
        raise QueryCompileError(f"Value for '{name}' must be a string")
    try:
        return spec.cast(raw.strip())
    except (TypeError, ValueError):
        raise QueryCompileError(f"Invalid value '{raw}' for '{name}'")


def compile_predicates(params: Mapping[str, Any], fields: Mapping[str, FieldSpec]) -> List[Predicate]:
    """Parse raw parameters into a flat list of typed predicates."""
    if params is None:
        return []
    if not isinstance(params, Mapping):
        raise QueryCompileError("Filter parameters must be a mapping")

    predicates: List[Predicate] = []
    for name, token, raw in _iter_leaves(params, fields):
        spec = fields[name]

        if token is None or token == "":
            op = Op.EQ
        elif token in COMPARISON_OPS:
            op = COMPARISON_OPS[token]
        else:
            raise QueryCompileError(f"Unsupported operator '{token}' on '{name}'")

        if op is Op.EQ:
            if isinstance(raw, (list, tuple)):
                value = [_coerce(spec, name, item) for item in raw]
            else:
                value = _coerce(spec, name, raw)
        else:
            if not spec.orderable:
                raise QueryCompileError(f"Field '{name}' does not support '{token}'")
            if isinstance(raw, (list, tuple)):
                raise QueryCompileError(f"Only one value allowed for '{name}[{token}]'")
            value = _coerce(spec, name, raw)

        predicates.append(Predicate(op=op, field=spec.path, value=value))
    return predicates


def to_mongo_filter(predicates: Iterable[Predicate]) -> Dict[str, Any]:
    """Render predicates as a MongoDB filter document, merging conditions on the same field."""
    conditions: Dict[str, Dict[str, Any]] = {}
    for predicate in predicates:
        field_conditions = conditions.setdefault(predicate.field, {})
        if predicate.op is Op.EQ and isinstance(predicate.value, list):
            operator = "$in"
        else:
            operator = predicate.op.mongo
        if operator in field_conditions:
            raise QueryCompileError(f"Conflicting filters on '{predicate.field}'")
        field_conditions[operator] = predicate.value

    query: Dict[str, Any] = {}
    for field, field_conditions in conditions.items():
        if list(field_conditions) == ["$eq"]:
            query[field] = field_conditions["$eq"]
        else:
            query[field] = field_conditions
    return query


def compile_filters(params: Mapping[str, Any], fields: Mapping[str, FieldSpec]) -> Dict[str, Any]:
    """Compile raw query parameters into a MongoDB filter. Empty input matches everything."""
    return to_mongo_filter(compile_predicates(params, fields))


def expand_keyword(
        predicate: Dict[str, Any],
        keyword: Optional[str],
        fields: Iterable[str] = KEYWORD_FIELDS,
) -> Dict[str, Any]:
    """AND a case-insensitive substring match over ``fields`` onto ``predicate``.

    The keyword is regex-escaped, so ``.*`` or ``(a+)+`` match literally.
    """
    if keyword is None:
        return predicate
    if not isinstance(keyword, str):
        raise QueryCompileError("keyword must be a single string")
    keyword = keyword.strip()
    if not keyword:
        return predicate

    pattern = re.escape(keyword)
    clause = {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}
    if not predicate:
        return clause
    return {"$and": [predicate, clause]}
