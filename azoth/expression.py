# -*- coding: utf-8 -*-
"""Description text expressions.

Game descriptions embed arithmetic in ``${...}`` segments, e.g.::

    "Gain ${StatusEffect.Foo_Buff.DMGSlash * 100 * perkMultiplier}% damage"

Tokens are resolved in this order: caller context values, resource lookups
(``Resource.Id.Attr``), then the constants ``perkMultiplier`` and
``ConsumablePotency``. The substituted expression is only evaluated after it
is verified to hold nothing but numbers and operators.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from azoth.perks import get_perk_multiplier
from azoth.tables import DbSlice, TableIndex, as_number

logger = logging.getLogger(__name__)

__all__ = ["ExpressionContext", "ExpressionError", "ExpressionSolver", "solve_text"]

Number = Union[int, float]

_SEGMENT_RE = re.compile(r"\$\{([^}]*)\}")
_TOKEN_RE = re.compile(r"\s*(\d+\.\d+|\d+|[A-Za-z_][A-Za-z0-9_\.]*|[+\-*/()])\s*")
_NUM_RE = re.compile(r"^-?\d+(\.\d+)?([eE][+\-]?\d+)?$")

_OPERATORS = {"+", "-", "*", "/", "(", ")"}
_BAD_PAIRS = {("*", "*"), ("(", ")"), (")", "("), ("n", "("), (")", "n"), ("n", "n")}

# resource prefix -> DbSlice table
RESOURCES = {
    "statuseffect": "effects",
    "affix": "affixes",
    "ability": "abilities",
    "perk": "perks",
    "item": "items",
    "consumable": "consumables",
    "weapon": "weapons",
    "armor": "armors",
}


class ExpressionError(ValueError):
    """Raised when a token in description text cannot be resolved."""

    def __init__(self, message: str, *, token: str = "", text: str = ""):
        super().__init__(message)
        self.token = token
        self.text = text


@dataclass
class ExpressionContext:
    text: str
    item_id: Optional[str] = None
    gear_score: float = 0
    char_level: int = 60
    values: Dict[str, Any] = field(default_factory=dict)


def _format(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(round(value, 6))


class ExpressionSolver:
    def __init__(self, db: DbSlice):
        self.db = db

    # --------------------------------------------------------
    # Tokens
    # --------------------------------------------------------

    def evaluate(self, token: str, ctx: ExpressionContext) -> Any:
        if token in ctx.values and ctx.values[token] is not None:
            return ctx.values[token]
        if "." in token:
            return self._evaluate_resource(token, ctx)
        return self._evaluate_constant(token, ctx)

    def _evaluate_resource(self, token: str, ctx: ExpressionContext) -> Any:
        parts = token.split(".")
        if len(parts) != 3:
            raise ExpressionError(f'malformed resource token "{token}" in text "{ctx.text}"', token=token, text=ctx.text)
        resource, rid, attr = parts
        table_name = RESOURCES.get(resource.lower())
        table: Optional[TableIndex] = getattr(self.db, table_name, None) if table_name else None
        if table is None:
            raise ExpressionError(
                f'unknown resource "{resource}" (token "{token}" in text "{ctx.text}")', token=token, text=ctx.text
            )
        record = table.get(rid)
        if record is None:
            raise ExpressionError(
                f'object for id "{rid}" not found (token "{token}" in text "{ctx.text}")', token=token, text=ctx.text
            )
        value: Any = None
        found = False
        for key, v in record.items():
            if key == attr or str(key).lower() == attr.lower():
                value, found = v, True
                break
        if not found:
            raise ExpressionError(
                f'object has no attribute "{attr}" (token "{token}" in text "{ctx.text}")', token=token, text=ctx.text
            )
        if isinstance(value, str) and "=" in value:
            logger.debug('[expr] key=value pair in "%s"', value)
            value = value.split("=", 1)[1]
        return value

    def _evaluate_constant(self, token: str, ctx: ExpressionContext) -> Any:
        if token == "ConsumablePotency":
            effect = self.db.effects.get(ctx.item_id)
            if effect is not None:
                return as_number(effect.get("PotencyPerLevel")) * ctx.char_level
            logger.error('ConsumablePotency not resolved for id "%s" in text "%s"', ctx.item_id, ctx.text)
            return 1
        if token == "perkMultiplier":
            perk = self.db.perks.get(ctx.item_id)
            if perk is not None:
                return get_perk_multiplier(perk, ctx.gear_score)
            raise ExpressionError(
                f'perkMultiplier not resolved for id "{ctx.item_id}" in text "{ctx.text}"', token=token, text=ctx.text
            )
        raise ExpressionError(f'unresolved token "{token}" in text "{ctx.text}"', token=token, text=ctx.text)

    # --------------------------------------------------------
    # Expressions
    # --------------------------------------------------------

    def eval_expression(self, expr: str, ctx: ExpressionContext) -> Number:
        tokens: List[str] = [t.strip() for t in _TOKEN_RE.findall(expr) if t.strip()]
        if "".join(tokens) != re.sub(r"\s+", "", expr):
            raise ExpressionError(f'unsupported characters in "{expr}"', token=expr, text=ctx.text)
        py_parts: List[str] = []
        # "n" marks an operand, operators keep their own symbol
        kinds: List[str] = []
        for tok in tokens:
            if tok in _OPERATORS:
                py_parts.append(tok)
                kinds.append(tok)
                continue
            if _NUM_RE.match(tok):
                py_parts.append(tok)
                kinds.append("n")
                continue
            value = self.evaluate(tok, ctx)
            num = str(value).strip()
            if not _NUM_RE.match(num):
                raise ExpressionError(f'token "{tok}" is not numeric ({value!r})', token=tok, text=ctx.text)
            py_parts.append(f"({num})")
            kinds.append("n")

        # no power, calls, tuples or juxtaposed operands
        for left, right in zip(kinds, kinds[1:]):
            if (left, right) in _BAD_PAIRS:
                raise ExpressionError(f'unsupported expression "{expr}"', token=expr, text=ctx.text)

        expr_py = "".join(py_parts)
        # only numbers + operators may reach eval
        if not expr_py or re.search(r"[^0-9\.\+\-\*\/\(\)eE]", expr_py):
            raise ExpressionError(f'unsafe expression "{expr}"', token=expr, text=ctx.text)
        try:
            out = eval(expr_py, {"__builtins__": {}}, {})
            if isinstance(out, bool) or not isinstance(out, (int, float)) or not math.isfinite(out):
                raise ValueError(f"not a finite number: {out!r}")
        except (SyntaxError, ZeroDivisionError, TypeError, OverflowError, ValueError) as exc:
            raise ExpressionError(f'cannot evaluate "{expr}": {exc}', token=expr, text=ctx.text) from exc
        return out

    def solve(self, ctx: ExpressionContext) -> str:
        """Replace every ``${...}`` segment. Raises ExpressionError."""

        def repl(m: re.Match) -> str:
            return _format(self.eval_expression(m.group(1), ctx))

        return _SEGMENT_RE.sub(repl, ctx.text or "")


def solve_text(db: DbSlice, text: str, **kwargs: Any) -> str:
    """Solve ``text``; on an unresolved token log it and return the text unchanged."""
    ctx = ExpressionContext(text=text, **kwargs)
    try:
        return ExpressionSolver(db).solve(ctx)
    except ExpressionError as exc:
        logger.error("%s", exc)
        return text
