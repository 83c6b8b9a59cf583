"""Generic interpreter turning registry rules into template field values."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Collection, Iterable, Mapping, Optional

from .normalize import format_date, is_blank, lookup, safe_text
from .rules import (
    BinarySplitRule,
    ChoiceRule,
    MultiSelectRule,
    RadioRule,
    RatingRule,
    RowsRule,
    Rule,
    TextRule,
)

logger = logging.getLogger(__name__)

YES_VALUES = {"yes", "y"}
NO_VALUES = {"no", "n"}

_NUMBERED_LABEL = re.compile(r"^\s*(\d+)\s*[.)]")


@dataclass(slots=True)
class MissingField:
    field_id: str
    rule_kind: str


@dataclass(slots=True)
class FieldPlan:
    """Ordered field values for one document plus the fields that were absent.

    Radio states are kept apart from text values because they are written as
    appearance state names rather than text.
    """

    form_type: str
    values: dict[str, str] = field(default_factory=dict)
    states: dict[str, str] = field(default_factory=dict)
    missing: list[MissingField] = field(default_factory=list)

    def marked(self) -> list[str]:
        return list(self.values) + list(self.states)


class _Evaluator:
    def __init__(
        self,
        form_type: str,
        data: Mapping[str, Any],
        available: Optional[Collection[str]],
        today: date,
    ) -> None:
        self.data = data
        self.available = available
        self.today = today
        self.plan = FieldPlan(form_type=form_type)

    # ---- helpers ------------------------------------------------------
    def present(self, field_id: str) -> bool:
        return self.available is None or field_id in self.available

    def first_value(self, sources: Iterable[str]) -> Any:
        for source in sources:
            value = lookup(self.data, source)
            if not is_blank(value):
                return value
        return None

    def first_text(self, sources: Iterable[str]) -> str:
        for source in sources:
            text = safe_text(lookup(self.data, source))
            if text:
                return text
        return ""

    def write(self, field_id: Optional[str], value: str, kind: str, only_if_empty: bool = False) -> bool:
        if not field_id or value == "":
            return False
        if not self.present(field_id):
            self.report_missing(field_id, kind)
            return False
        if only_if_empty and self.plan.values.get(field_id):
            return False
        self.plan.values[field_id] = value
        return True

    def report_missing(self, field_id: str, kind: str) -> None:
        form_type = self.plan.form_type
        self.plan.missing.append(MissingField(field_id=field_id, rule_kind=kind))
        logger.warning(
            "[formfill] template field %r not found for %s (%s rule)",
            field_id,
            form_type,
            kind,
            extra={"form_type": form_type, "field_id": field_id, "rule_kind": kind},
        )

    # ---- rule variants ------------------------------------------------
    def text(self, rule: TextRule) -> None:
        raw = self.first_value(rule.sources)
        if rule.other_value is not None and safe_text(raw) == rule.other_value:
            value = safe_text(lookup(self.data, rule.other_source or ""))
        else:
            value = self.first_text(rule.sources)
        if not value and rule.date_style:
            value = format_date(self.today, rule.date_style)
        if not value:
            return
        target = next((t for t in rule.targets if self.present(t)), None)
        if target is None:
            self.report_missing(rule.targets[0], rule.kind)
            return
        self.write(target, value, rule.kind, rule.only_if_empty)

    def binary(self, rule: BinarySplitRule) -> None:
        raw = self.first_value(rule.sources)
        if isinstance(raw, bool):
            answer = "yes" if raw else "no"
        else:
            answer = safe_text(raw).lower()
        if answer in YES_VALUES:
            self.write(rule.yes_field, rule.mark, rule.kind, rule.only_if_empty)
        elif answer in NO_VALUES:
            self.write(rule.no_field, rule.mark, rule.kind, rule.only_if_empty)

    def rating(self, rule: RatingRule) -> None:
        raw = self.first_value(rule.sources)
        score = _as_int(raw)
        if score is None or not rule.low <= score <= rule.high:
            return
        self.write(rule.pattern.format(r=score, r0=score - 1), rule.mark, rule.kind)

    def choice(self, rule: ChoiceRule) -> None:
        key = safe_text(self.first_value(rule.sources)).lower()
        choices = {k.lower(): v for k, v in rule.choices.items()}
        target = choices.get(key, rule.default_field)
        self.write(target, rule.mark, rule.kind)

    def radio(self, rule: RadioRule) -> None:
        key = safe_text(self.first_value(rule.sources)).lower()
        states = {k.lower(): v for k, v in rule.states.items()}
        state = states.get(key, rule.default_state)
        if not state:
            return
        if not self.present(rule.group):
            self.report_missing(rule.group, rule.kind)
            return
        self.plan.states[rule.group] = state

    def multiselect(self, rule: MultiSelectRule) -> None:
        selected = lookup(self.data, rule.source)
        if isinstance(selected, (str, int)) and not isinstance(selected, bool):
            selected = [selected]
        if not isinstance(selected, (list, tuple)):
            return
        for item in selected:
            index = _item_index(item, rule.items)
            if index is None:
                logger.debug("[formfill] unrecognised selection %r for %s", item, rule.source)
                continue
            self.write(rule.pattern.format(index=index), rule.mark, rule.kind)

    def rows(self, rule: RowsRule) -> None:
        raw = lookup(self.data, rule.source)
        if isinstance(raw, str) and rule.split_lines:
            rows: list[Any] = [line.strip() for line in raw.splitlines() if line.strip()]
        elif isinstance(raw, (list, tuple)):
            rows = list(raw)
        else:
            return
        for position, row in enumerate(rows[: rule.max_rows], start=1):
            for pattern, paths in rule.columns:
                if isinstance(row, Mapping):
                    value = next((safe_text(lookup(row, p)) for p in paths if p and safe_text(lookup(row, p))), "")
                else:
                    value = safe_text(row) if "" in paths else ""
                self.write(pattern.format(i=position), value, rule.kind)

    def apply(self, rule: Rule) -> None:
        handler = getattr(self, rule.kind)
        handler(rule)


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    match = re.match(r"^\s*(-?\d+)", str(value))
    return int(match.group(1)) if match else None


def _item_index(item: Any, items: tuple[str, ...]) -> Optional[int]:
    """Return the 1-based position of ``item`` within ``items``."""

    if isinstance(item, bool):
        return None
    if isinstance(item, int):
        return item + 1 if 0 <= item < len(items) else None
    label = safe_text(item)
    if not label:
        return None
    lowered = [candidate.lower() for candidate in items]
    if label.lower() in lowered:
        return lowered.index(label.lower()) + 1
    numbered = _NUMBERED_LABEL.match(label)
    if numbered:
        number = int(numbered.group(1))
        return number if 1 <= number <= len(items) else None
    if label.isdigit():
        position = int(label)
        return position + 1 if position < len(items) else None
    return None


def evaluate_rules(
    form_type: str,
    rules: Iterable[Rule],
    data: Mapping[str, Any],
    available: Optional[Collection[str]] = None,
    today: Optional[date] = None,
) -> FieldPlan:
    """Apply ``rules`` in order and return the resulting :class:`FieldPlan`.

    ``available`` is the set of field identifiers in the loaded template;
    ``None`` skips the presence check.  Rules targeting absent fields are
    recorded on the plan and logged, never raised.
    """

    evaluator = _Evaluator(form_type, data, available, today or date.today())
    for rule in rules:
        evaluator.apply(rule)
    return evaluator.plan


__all__ = ["FieldPlan", "MissingField", "evaluate_rules"]
