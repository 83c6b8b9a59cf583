from __future__ import annotations

import logging
from datetime import date

import pytest

from modules.formfill.mapping import evaluate_rules
from modules.formfill.registry import COMPLIANCE_ISSUES, LIABILITY_ASSESSMENT_ITEMS, get_entry
from modules.formfill.rules import (
    MARK,
    MultiSelectRule,
    RadioRule,
    RatingRule,
    RowsRule,
    text,
    tri_state,
    yes_no,
)

TODAY = date(2026, 10, 19)


def plan_for(rules, data, available=None):
    return evaluate_rules("test-form", rules, data, available, TODAY)


# ---------------------------------------------------------------------------
# Binary split
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("value", ["yes", "Yes", "YES", "y", "Y", True])
def test_binary_yes_marks_only_yes_field(value):
    plan = plan_for([yes_no("Excess=Yes", "Excess=No", "excess")], {"excess": value})
    assert plan.values == {"Excess=Yes": MARK}


@pytest.mark.parametrize("value", ["no", "No", "N", "n", False])
def test_binary_no_marks_only_no_field(value):
    plan = plan_for([yes_no("Excess=Yes", "Excess=No", "excess")], {"excess": value})
    assert plan.values == {"Excess=No": MARK}


@pytest.mark.parametrize("value", [None, "", "maybe", "N/A", "true", "1", 0, ["yes"]])
def test_binary_other_values_mark_nothing(value):
    plan = plan_for([yes_no("Excess=Yes", "Excess=No", "excess")], {"excess": value})
    assert plan.values == {}


def test_binary_without_no_field_ignores_no():
    plan = plan_for([yes_no(None, "Geyser_No", "installed")], {"installed": "yes"})
    assert plan.values == {}
    plan = plan_for([yes_no(None, "Geyser_No", "installed")], {"installed": "no"})
    assert plan.values == {"Geyser_No": MARK}


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("score", range(1, 11))
def test_rating_marks_exactly_one_field(score):
    plan = plan_for([RatingRule(sources=("q",), pattern="CQuality6={r}")], {"q": str(score)})
    assert plan.values == {f"CQuality6={score}": MARK}


@pytest.mark.parametrize("score", [0, 11, -1, "abc", None, "", 3.5])
def test_rating_out_of_range_marks_nothing(score):
    plan = plan_for([RatingRule(sources=("q",), pattern="CQuality6={r}")], {"q": score})
    assert plan.values == {}


def test_rating_zero_based_pattern_and_int_prefix():
    rule = RatingRule(sources=("q",), pattern="Check Box3.2.{r0}")
    assert plan_for([rule], {"q": "7 - good"}).values == {"Check Box3.2.6": MARK}
    assert plan_for([rule], {"q": 1}).values == {"Check Box3.2.0": MARK}


# ---------------------------------------------------------------------------
# Choices and radio groups
# ---------------------------------------------------------------------------


def test_tri_state_defaults_to_not_applicable():
    rule = tri_state("INSTALLEDgeyser", "item")
    assert plan_for([rule], {"item": "Y"}).values == {"INSTALLEDgeyserYES": MARK}
    assert plan_for([rule], {"item": "no"}).values == {"INSTALLEDgeyserNO": MARK}
    assert plan_for([rule], {"item": "later"}).values == {"INSTALLEDgeyserNA": MARK}
    assert plan_for([rule], {}).values == {"INSTALLEDgeyserNA": MARK}


def test_choice_matches_case_insensitively():
    entry = get_entry("discovery-form")
    plan = evaluate_rules(entry.form_type, entry.rules, {"field-old-geyser-make": "KWIKOT", "field-old-geyser-size": "150L"}, None, TODAY)
    assert plan.values["KwiKotgeyser"] == "X"
    assert plan.values["geyserSize150"] == "X"


def test_radio_state_and_default():
    rule = RadioRule(sources=("paid",), group="Group1", states={"yes": "/Choice1"}, default_state="/Choice2")
    assert plan_for([rule], {"paid": "Yes"}).states == {"Group1": "/Choice1"}
    assert plan_for([rule], {"paid": "no"}).states == {"Group1": "/Choice2"}
    assert plan_for([rule], {}).states == {"Group1": "/Choice2"}


# ---------------------------------------------------------------------------
# Text, dates and alternatives
# ---------------------------------------------------------------------------


def test_text_uses_first_non_empty_source():
    rule = text("CName", "cname", "field-cname")
    assert plan_for([rule], {"cname": "", "field-cname": "Jane"}).values == {"CName": "Jane"}
    assert plan_for([rule], {"cname": None}).values == {}


def test_text_other_value_reads_details():
    rule = text("OLDGEYSER", "oldgeyser", other_value="Other", other_source="oldgeyser-details")
    plan = plan_for([rule], {"oldgeyser": "Other", "oldgeyser-details": "Gas 90L"})
    assert plan.values == {"OLDGEYSER": "Gas 90L"}
    plan = plan_for([rule], {"oldgeyser": "Electric"})
    assert plan.values == {"OLDGEYSER": "Electric"}


def test_text_date_style_fills_today():
    plan = plan_for([text("Date_UAAD", "date", date_style="numeric")], {})
    assert plan.values == {"Date_UAAD": "19/10/2026"}
    plan = plan_for([text("Date_UAAD", "date", date_style="numeric")], {"date": "2026-01-02"})
    assert plan.values == {"Date_UAAD": "2026-01-02"}


def test_text_picks_first_present_target():
    rule = text(("Staff", "Installer", "InstallersName"), "installer")
    plan = plan_for([rule], {"installer": "Sam"}, available={"Installer", "InstallersName"})
    assert plan.values == {"Installer": "Sam"}


def test_only_if_empty_keeps_earlier_value():
    rules = [
        text("WH_Yes", "waterHammerBefore"),
        yes_no("WH_Yes", "WH_No", "legacy", only_if_empty=True),
    ]
    plan = plan_for(rules, {"waterHammerBefore": "150 kPa", "legacy": "yes"})
    assert plan.values == {"WH_Yes": "150 kPa"}
    plan = plan_for(rules, {"legacy": "yes"})
    assert plan.values == {"WH_Yes": MARK}


# ---------------------------------------------------------------------------
# Multi-select
# ---------------------------------------------------------------------------


def test_multiselect_accepts_labels_prefixes_and_positions():
    rule = MultiSelectRule(source="issues", items=COMPLIANCE_ISSUES, pattern="n{index}")
    plan = plan_for([rule], {"issues": [COMPLIANCE_ISSUES[0], "12. anything", 2, "33. Exposed"]})
    assert set(plan.values) == {"n1", "n12", "n3", "n33"}


def test_multiselect_ignores_unknown_entries():
    rule = MultiSelectRule(source="items", items=LIABILITY_ASSESSMENT_ITEMS, pattern="L{index}")
    plan = plan_for([rule], {"items": ["Roof Entry", "Unknown", 99, True, None]})
    assert plan.values == {"L2": MARK}


def test_multiselect_single_value_and_non_list():
    rule = MultiSelectRule(source="items", items=LIABILITY_ASSESSMENT_ITEMS, pattern="L{index}")
    assert plan_for([rule], {"items": "waterproofing"}).values == {"L5": MARK}
    assert plan_for([rule], {"items": {"a": 1}}).values == {}


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def test_rows_spread_over_indexed_fields():
    rule = RowsRule(
        source="sundries",
        columns=(("Sundries{i}", ("name", "")), ("SundriesQR{i}", ("qtyRequested", "quantityRequested"))),
        max_rows=2,
    )
    plan = plan_for(
        [rule],
        {
            "sundries": [
                {"name": "Elbow", "qtyRequested": 4},
                {"name": "Tape", "quantityRequested": "2"},
                {"name": "Overflow", "qtyRequested": 1},
            ]
        },
    )
    assert plan.values == {"Sundries1": "Elbow", "SundriesQR1": "4", "Sundries2": "Tape", "SundriesQR2": "2"}


def test_rows_split_lines():
    rule = RowsRule(source="extra", columns=(("Added{i}", ("",)),), max_rows=5, split_lines=True)
    plan = plan_for([rule], {"extra": "Copper pipe\n\n  Solder \nFlux"})
    assert plan.values == {"Added1": "Copper pipe", "Added2": "Solder", "Added3": "Flux"}


# ---------------------------------------------------------------------------
# Missing template fields
# ---------------------------------------------------------------------------


def test_missing_field_is_logged_not_raised(caplog):
    rules = [text("CName", "cname"), yes_no("Excess=Yes", "Excess=No", "excess")]
    with caplog.at_level(logging.WARNING, logger="modules.formfill.mapping"):
        plan = evaluate_rules("clearance-certificate-form", rules, {"cname": "Jane", "excess": "yes"}, {"CName"}, TODAY)
    assert plan.values == {"CName": "Jane"}
    assert [(m.field_id, m.rule_kind) for m in plan.missing] == [("Excess=Yes", "binary")]
    record = next(r for r in caplog.records if getattr(r, "field_id", None) == "Excess=Yes")
    assert record.form_type == "clearance-certificate-form"
    assert record.rule_kind == "binary"


def test_marked_lists_values_and_states():
    rules = [text("CName", "cname"), RadioRule(sources=("p",), group="Group1", default_state="/Choice2")]
    plan = plan_for(rules, {"cname": "Jane"})
    assert plan.marked() == ["CName", "Group1"]
