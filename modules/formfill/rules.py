"""Declarative fill rules.

Each registry entry is an ordered tuple of these rule variants.  They carry no
behaviour of their own; :mod:`modules.formfill.mapping` interprets them.  Source
values are looked up by dotted path (``geyser.size``) in the merged data and the
first non-empty source wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Mapping, Optional, Union

# Literal marks written into marker-text fields.
MARK = "XX"
SMALL_MARK = "X"
# Resolved to the field's "on" appearance state; used for true checkboxes.
CHECK = "<check>"


@dataclass(frozen=True, slots=True)
class TextRule:
    """Write coerced text into the first of ``targets`` present in the template."""

    targets: tuple[str, ...]
    sources: tuple[str, ...] = ()
    date_style: Optional[str] = None
    other_value: Optional[str] = None
    other_source: Optional[str] = None
    only_if_empty: bool = False

    kind: ClassVar[str] = "text"


@dataclass(frozen=True, slots=True)
class BinarySplitRule:
    """Yes/No value marks ``yes_field`` or ``no_field``; anything else is a no-op."""

    sources: tuple[str, ...]
    yes_field: Optional[str]
    no_field: Optional[str]
    mark: str = MARK
    only_if_empty: bool = False

    kind: ClassVar[str] = "binary"


@dataclass(frozen=True, slots=True)
class RatingRule:
    """Integer ``r`` within ``low..high`` marks ``pattern.format(r=r, r0=r - 1)``."""

    sources: tuple[str, ...]
    pattern: str
    low: int = 1
    high: int = 10
    mark: str = MARK

    kind: ClassVar[str] = "rating"


@dataclass(frozen=True, slots=True)
class ChoiceRule:
    """Categorical value marks the field listed for it in ``choices``.

    Keys are compared case-insensitively.  ``default_field`` is marked when the
    value matches no key.
    """

    sources: tuple[str, ...]
    choices: Mapping[str, str] = field(default_factory=dict)
    mark: str = SMALL_MARK
    default_field: Optional[str] = None

    kind: ClassVar[str] = "choice"


@dataclass(frozen=True, slots=True)
class RadioRule:
    """Select a radio-group state from a categorical value."""

    sources: tuple[str, ...]
    group: str
    states: Mapping[str, str] = field(default_factory=dict)
    default_state: Optional[str] = None

    kind: ClassVar[str] = "radio"


@dataclass(frozen=True, slots=True)
class MultiSelectRule:
    """Mark ``pattern.format(index=n)`` for every selected item.

    Selections resolve to 1-based positions in ``items``: an exact label, a
    ``"N. label"`` style prefix, or a 0-based integer position.
    """

    source: str
    items: tuple[str, ...]
    pattern: str
    mark: str = MARK

    kind: ClassVar[str] = "multiselect"


@dataclass(frozen=True, slots=True)
class RowsRule:
    """Spread a list of row objects over indexed fields.

    ``columns`` pairs a field pattern (formatted with ``i``, 1-based) with the
    row paths to read; an empty path means the row itself.  Text values are
    split into one row per non-blank line when ``split_lines`` is set.
    """

    source: str
    columns: tuple[tuple[str, tuple[str, ...]], ...]
    max_rows: int
    split_lines: bool = False

    kind: ClassVar[str] = "rows"


Rule = Union[TextRule, BinarySplitRule, RatingRule, ChoiceRule, RadioRule, MultiSelectRule, RowsRule]


# ---------------------------------------------------------------------------
# Shorthand constructors used by the registry tables
# ---------------------------------------------------------------------------


def text(target: str | tuple[str, ...], *sources: str, **options) -> TextRule:
    targets = (target,) if isinstance(target, str) else tuple(target)
    return TextRule(targets=targets, sources=tuple(sources), **options)


def yes_no(yes_field: Optional[str], no_field: Optional[str], *sources: str, **options) -> BinarySplitRule:
    return BinarySplitRule(sources=tuple(sources), yes_field=yes_field, no_field=no_field, **options)


def tri_state(prefix: str, *sources: str) -> ChoiceRule:
    """``<prefix>YES`` / ``<prefix>NO``, with ``<prefix>NA`` for anything else."""

    return ChoiceRule(
        sources=tuple(sources),
        choices={"y": f"{prefix}YES", "yes": f"{prefix}YES", "n": f"{prefix}NO", "no": f"{prefix}NO"},
        mark=MARK,
        default_field=f"{prefix}NA",
    )


def targets(rule: Rule) -> list[str]:
    """Every template field identifier ``rule`` may write."""

    if isinstance(rule, TextRule):
        return list(rule.targets)
    if isinstance(rule, BinarySplitRule):
        return [f for f in (rule.yes_field, rule.no_field) if f]
    if isinstance(rule, RatingRule):
        return [rule.pattern.format(r=r, r0=r - 1) for r in range(rule.low, rule.high + 1)]
    if isinstance(rule, ChoiceRule):
        fields = list(dict.fromkeys(rule.choices.values()))
        if rule.default_field and rule.default_field not in fields:
            fields.append(rule.default_field)
        return fields
    if isinstance(rule, RadioRule):
        return [rule.group]
    if isinstance(rule, MultiSelectRule):
        return [rule.pattern.format(index=i) for i in range(1, len(rule.items) + 1)]
    return [pattern.format(i=i) for i in range(1, rule.max_rows + 1) for pattern, _ in rule.columns]


def describe(rule: Rule) -> str:
    """Readable one-line summary of a rule for listings and logs."""

    if isinstance(rule, TextRule):
        return f"text {'|'.join(rule.sources) or '<date>'} -> {'|'.join(rule.targets)}"
    if isinstance(rule, BinarySplitRule):
        return f"binary {'|'.join(rule.sources)} -> {rule.yes_field or '-'} / {rule.no_field or '-'}"
    if isinstance(rule, RatingRule):
        return f"rating {'|'.join(rule.sources)} -> {rule.pattern} [{rule.low}..{rule.high}]"
    if isinstance(rule, ChoiceRule):
        return f"choice {'|'.join(rule.sources)} -> {', '.join(sorted(set(rule.choices.values())))}"
    if isinstance(rule, RadioRule):
        return f"radio {'|'.join(rule.sources)} -> {rule.group}"
    if isinstance(rule, MultiSelectRule):
        return f"multiselect {rule.source} -> {rule.pattern} x{len(rule.items)}"
    return f"rows {rule.source} -> {', '.join(p for p, _ in rule.columns)} x{rule.max_rows}"


__all__ = [
    "BinarySplitRule",
    "CHECK",
    "ChoiceRule",
    "MARK",
    "MultiSelectRule",
    "RadioRule",
    "RatingRule",
    "RowsRule",
    "Rule",
    "SMALL_MARK",
    "TextRule",
    "describe",
    "targets",
    "text",
    "tri_state",
    "yes_no",
]
