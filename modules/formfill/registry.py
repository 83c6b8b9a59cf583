"""Template field registry.

One :class:`RegistryEntry` per form type maps logical submission fields onto
the field identifiers of a third-party PDF template.  The templates name their
fields inconsistently (``CQuality1yes`` next to ``CQuality3Yes``, ``Check
Box3.2.0``, ``Geyser_Heat Tech``), so the tables below spell every identifier
out as the template author wrote it.  Entries are immutable; changing a
mapping means shipping new code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .errors import UnsupportedFormType
from .rules import (
    CHECK,
    MARK,
    ChoiceRule,
    MultiSelectRule,
    RadioRule,
    RatingRule,
    RowsRule,
    Rule,
    targets,
    text,
    tri_state,
    yes_no,
)


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    form_type: str
    title: str
    template: str
    download_name: str
    rules: tuple[Rule, ...]
    flatten: bool = True
    dual_signature: bool = False
    signature_page: int = 0


# ---------------------------------------------------------------------------
# ABSA certificate
# ---------------------------------------------------------------------------

_ABSA_RULES: tuple[Rule, ...] = (
    text("CSA Ref", "field-csa-ref"),
    text("Full name of Insured", "field-full-name"),
    text("Claim no", "field-claim-number"),
    text("Property address", "field-property-address"),
    text("Cause of damage", "field-cause-damage"),
    text("IWe confirm that the work undertaken by", "field-staff-name-absa"),
    RadioRule(
        sources=("field-excess-paid-absa",),
        group="Group1",
        states={"yes": "/Choice1"},
        default_state="/Choice2",
    ),
    text("Text2", date_style="day_month"),
    # Row i of the quality table is "Check Box3.<i+1>", columns are 0-based.
    *(
        RatingRule(sources=(f"field-checkbox{i}",), pattern=f"Check Box3.{i + 1}.{{r0}}", mark=CHECK)
        for i in range(1, 14)
    ),
)


# ---------------------------------------------------------------------------
# Clearance certificate
# ---------------------------------------------------------------------------

_CLEARANCE_RULES: tuple[Rule, ...] = (
    text("CName", "cname", "field-cname"),
    text("CRef", "cref", "field-cref"),
    text("CAddress", "caddress", "field-caddress"),
    text("CDamage", "cdamage", "field-cdamage"),
    text("GComments", "gcomments", "field-gcomments"),
    text("ScopeWork", "scopework", "field-scopework"),
    text("OLDGEYSER", "oldgeyser", "field-oldgeyser", other_value="Other", other_source="field-oldgeyser-details"),
    text("NEWGEYSER", "newgeyser", "field-newgeyser", other_value="Other", other_source="field-newgeyser-details"),
    text("Staff", "staff", "field-staff"),
    text("Date_UAAD", "date", date_style="numeric"),
    yes_no("CQuality1yes", "CQuality1", "cquality1", "field-cquality1"),
    yes_no("CQuality2yes", "CQuality2No", "cquality2", "field-cquality2"),
    *(
        yes_no(f"CQuality{n}Yes", f"CQuality{n}No", f"cquality{n}", f"field-cquality{n}")
        for n in (3, 4, 5)
    ),
    RatingRule(sources=("cquality6", "field-cquality6"), pattern="CQuality6={r}"),
    yes_no("Excess=Yes", "Excess=No", "excess", "field-excess"),
    text("Excess", "amount", "field-amount"),
)


# ---------------------------------------------------------------------------
# SAHL certificate
# ---------------------------------------------------------------------------

_SAHL_RULES: tuple[Rule, ...] = (
    text("ClientName_ZIUG", "field-clientname"),
    text("ClientRef", "field-clientref"),
    text("ClientAddress", "field-clientaddress"),
    text("ClientDamage", "field-clientdamage"),
    text("StaffName", "field-staffname"),
    text("textarea_26kyol", "field-scopework-general"),
    text("Date", date_style="long"),
    *(
        yes_no(f"CheckBox{n}-1", f"CheckBox{n}-2", f"field-checkbox{n}")
        for n in (1, 2, 3, 4, 5, 7)
    ),
    RatingRule(sources=("field-checkbox6",), pattern="CheckBox6-{r}"),
)


# ---------------------------------------------------------------------------
# Discovery (geyser) form
# ---------------------------------------------------------------------------

GEYSER_SIZES = ("50", "100", "150", "200", "250", "300", "350")

_DISCOVERY_INSTALLED = {
    "field-item-geyser": "INSTALLEDgeyser",
    "field-item-drip-tray": "INSTALLEDDrip",
    "field-item-vacuum-breakers": "INSTALLEDVB",
    "field-item-platform": "INSTALLEDPlatform",
    "field-item-bonding": "INSTALLEDBonding",
    "field-item-isolator": "INSTALLEDIsolator",
    "field-item-pressure-valve": "INSTALLEDPCV",
    "field-item-relocated": "INSTALLEDRelocated",
    "field-item-thermostat": "INSTALLEDThermostat",
    "field-item-element": "INSTALLEDElement",
    "field-item-safety-valve": "INSTALLEDSafetyValve",
    "field-item-non-return": "INSTALLEDNonreturn",
}

_DISCOVERY_SOLAR = {
    "field-solar-vacuum-tubes": "SOLARVacuumTubes",
    "field-solar-flat-panels": "SOLARFlatPanels",
    "field-solar-circulation-pump": "SOLARCirculationPump",
    "field-solar-geyser-wise": "SOLARGeyserWise",
    "field-solar-mixing-valve": "SOLARMixingValve",
    "field-solar-panel-12v": "SOLAR12VPanel",
}


def _sizes(prefix: str) -> dict[str, str]:
    choices: dict[str, str] = {}
    for size in GEYSER_SIZES:
        choices[size] = f"{prefix}{size}"
        choices[f"{size}L"] = f"{prefix}{size}"
    return choices


def _flag(field_id: str, source: str) -> ChoiceRule:
    return ChoiceRule(sources=(source,), choices={"y": field_id})


_DISCOVERY_RULES: tuple[Rule, ...] = (
    text("ClaimNo", "field-claim-number"),
    text("ClientName", "field-client-name"),
    text("Date", "field-date", date_style="long"),
    text("Address", "field-address"),
    text("company", "field-company-name"),
    text("staff", "field-plumber-name"),
    text("license number", "field-license-number"),
    ChoiceRule(sources=("field-geyser-replaced",), choices={"y": "geyserreplaced_Y"}, mark=MARK, default_field="geyserreplaced_N"),
    ChoiceRule(sources=("field-geyser-repair",), choices={"y": "geyserrepaired_Y"}, mark=MARK, default_field="geyserrepaired_N"),
    ChoiceRule(
        sources=("field-old-geyser-type",),
        choices={"electric": "ELECTRICgeyser", "solar": "SOLARgeyser", "other": "OTHERgeyser"},
    ),
    text("OTHERgeyserspecs", "field-old-geyser-other"),
    ChoiceRule(sources=("field-old-geyser-size",), choices=_sizes("geyserSize")),
    ChoiceRule(
        sources=("field-old-geyser-make",),
        choices={"heat tech": "HeatTechgeyser", "kwikot": "KwiKotgeyser", "other": "OtherTypegeyser"},
    ),
    text("serialgeyser", "field-old-serial-number"),
    text("geysercode", "field-old-code"),
    text("notag", "field-old-no-tag"),
    _flag("wallmountedgeyser", "field-wall-mounted"),
    _flag("inroofgeyser", "field-inside-roof"),
    text("OtherAreageyser", "field-other-location"),
    ChoiceRule(
        sources=("field-new-geyser-type",),
        choices={"electric": "newgeyserELECTRIC", "solar": "newgeyserSOLAR", "other": "newgeyserOTHER"},
    ),
    text("newgeyserOTHERTEXT", "field-new-geyser-other"),
    ChoiceRule(sources=("field-new-geyser-size",), choices=_sizes("NEWgeyserSize")),
    ChoiceRule(
        sources=("field-new-geyser-make",),
        choices={"heat tech": "newgeyserHEATECH", "kwikot": "newgeyserKWIKOT"},
    ),
    text("NEWserialgeyser", "field-new-serial-number"),
    text("NEWgeysercode", "field-new-code"),
    *(tri_state(prefix, source) for source, prefix in _DISCOVERY_INSTALLED.items()),
    *(tri_state(prefix, source) for source, prefix in _DISCOVERY_SOLAR.items()),
)


# ---------------------------------------------------------------------------
# Liability waiver
# ---------------------------------------------------------------------------

LIABILITY_ASSESSMENT_ITEMS = (
    "Existing Pipes/Fittings",
    "Roof Entry",
    "Geyser Enclosure",
    "Wiring (Electrical/Alarm)",
    "Waterproofing",
    "Pipes Not Secured",
    "Increase/Decrease in Pressure",
    "Drip Tray Installation",
)

_LIABILITY_RULES: tuple[Rule, ...] = (
    text("L_Date", "date", date_style="numeric"),
    text("L_Insurance", "insurance", "field-liability-insurance"),
    text("L_ClaimNumber", "claimNumber", "field-liability-claim-number"),
    text("C_Name", "client", "field-client-name"),
    text("P_Name", "plumber", "field-plumber-name"),
    MultiSelectRule(source="selectedAssessmentItems", items=LIABILITY_ASSESSMENT_ITEMS, pattern="L{index}"),
    *(text(f"L{i}", f"field-l{i}", only_if_empty=True) for i in range(1, 9)),
    text("P_KPABEFORE", "pressureTestBefore", "field-old-geyser-liability"),
    text("P_KPAAFTER", "pressureTestAfter", "field-new-geyser-liability"),
    text("T_BEFORE", "thermostatSettingBefore", "field-temp-before-liability"),
    text("T_AFTER", "thermostatSettingAfter", "field-temp-after-liability"),
    text("textarea_33bxdi", "additionalComments", "field-general-comments-liability"),
    text("WH_Yes", "waterHammerBefore"),
    text("WHA_Yes", "waterHammerAfter"),
    yes_no("EI_Yes", "EI_No", "wasExcessPaid"),
    # Older submissions carry these under their wizard field names.
    yes_no("WH_Yes", "WH_No", "field-l9wh", only_if_empty=True),
    yes_no("WHA_Yes", "WHA_No", "field-additional-work", only_if_empty=True),
    yes_no("EI_Yes", "EI_No", "field-excess-paid-liability", only_if_empty=True),
    yes_no(None, "Geyser_No", "field-geyser-installed", only_if_empty=True),
    yes_no(
        "Balanced_System_Yes",
        "Balanced_System_YesBalanced_System_No",
        "field-balanced-system",
        only_if_empty=True,
    ),
    yes_no("NRValve_Yes", "NRValve_No", "field-nr-valve", only_if_empty=True),
)


# ---------------------------------------------------------------------------
# Non-compliance report
# ---------------------------------------------------------------------------

COMPLIANCE_ISSUES = (
    "1. Cold vacuum breaker (Must be 300mm above geyser)",
    "2. Hot vacuum breaker (Must be 300mm above geyser and 430mm away)",
    "3. Vacuum breaker not over drip tray",
    "4. Safety valve not functioning properly",
    "5. Pipes not copper - incorrect material used",
    "6. Geyser brackets missing or inadequate",
    "7. 90 degree short radius bend installed",
    "8. Pipe run exceeds 4m without upsizing to 28mm",
    "9. Missing 1m copper from hot water outlet",
    "10. Missing 1m copper from cold water inlet",
    "11. Pipes in roof not secured properly",
    "12. PRV overflow pipe not adequately secured",
    "13. PRV not positioned over drip tray",
    "14. System unbalanced - pressure issues",
    "15. No shut off valve to the geyser",
    "16. No electrical isolator switch installed",
    "17. Pipes not electrically bonded correctly",
    "18. Non return valve missing on unbalanced system",
    "19. Tray overflow not compliant with regulations",
    "20. Overflow pipe not PVC material",
    "21. Missing brackets every 1m on overflow pipe",
    "22. 90 degree short radius bend on overflow",
    "23. No fall on the overflow outlet pipe",
    "24. Inadequate geyser support structure",
    "25. No lagging on hot water pipes",
    "26. Lagging is split or damaged",
    "27. Incorrect type of lagging material",
    "28. Inadequate geyser access for maintenance",
    "29. Roof sheets/tiles obstruct geyser replacement",
    "30. Trap door located in bathroom (non-compliant)",
    "31. Trap door requires enlargement for access",
    "32. Incorrect pipe type in ceiling (not copper)",
    "33. Exposed pipes not properly secured or lagged",
)

PLUMBER_INDEMNITY = {
    "Electric geyser": "EG_PI",
    "Solar geyser": "SG_PI",
    "Heat pump": "HP_PI",
    "Pipe Repairs": "PR_PI",
    "Assessment": "A_PI",
}

_NONCOMPLIANCE_RULES: tuple[Rule, ...] = (
    text("Date", "date"),
    text("I_Name", "insuranceName"),
    text("C_Number", "claimNumber"),
    text("C_FName", "clientName"),
    text(("Staff", "Installer", "InstallersName"), "installersName"),
    text("Geyser_make", "geyserMake"),
    text("Geyser_Serial", "geyserSerial"),
    text("Geyser_Code", "geyserCode"),
    yes_no("Quote_Y", "Quote_N", "quotationSupplied"),
    ChoiceRule(sources=("plumberIndemnity",), choices=PLUMBER_INDEMNITY, mark=MARK),
    MultiSelectRule(source="selectedIssues", items=COMPLIANCE_ISSUES, pattern="n{index}"),
)


# ---------------------------------------------------------------------------
# Material list
# ---------------------------------------------------------------------------


def _brands(prefix: str, techron: str = "Techron") -> ChoiceRule:
    return ChoiceRule(
        sources=(f"{_MATERIAL_SOURCES[prefix]}.brand",),
        choices={
            "Kwikot": f"{prefix}_Kwikot",
            "Heat Tech": f"{prefix}_HeatTech",
            "Techron": f"{prefix}_{techron}",
        },
        mark=MARK,
    )


_MATERIAL_SOURCES = {
    "Drip_Tray": "dripTray",
    "VB": "vacuumBreaker1",
    "PCV": "pressureControlValve",
    "NRV": "nonReturnValve",
}

_MATERIAL_ROW = (("Sundries{i}", ("name", "")), ("SundriesQR{i}", ("qtyRequested", "quantityRequested")), ("SundriesQU{i}", ("qtyUsed", "quantityUsed")))


def _added(i: int) -> tuple[Rule, ...]:
    item = f"added{i}"
    alt = f"addedItem{i}"
    return (
        text(f"Added{i}", f"{item}.name", item, f"{alt}.name", alt),
        text(f"Added{i}_Req", f"{item}.qtyRequested", f"{item}.quantityRequested", f"{alt}.qtyRequested", f"{alt}.quantityRequested"),
        text(f"Added{i}_Used", f"{item}.qtyUsed", f"{item}.quantityUsed", f"{alt}.qtyUsed", f"{alt}.quantityUsed"),
    )


_MATERIAL_LIST_RULES: tuple[Rule, ...] = (
    text("ML_Date", "date"),
    text("ML_Plumber", "plumber"),
    text("ML_ClaimNumber", "claimNumber"),
    text("ML_Insurance", "insurance"),
    text("Geyser_Size", "geyserSize", "geyser.size"),
    ChoiceRule(
        sources=("geyserBrand", "geyser.brand"),
        choices={"Kwikot": "Geyser_Kwikot", "Heat Tech": "Geyser_Heat Tech", "Techron": "Geyser_Techron"},
        mark=MARK,
    ),
    text("Drip_Tray", "dripTraySize", "dripTray", "dripTray.size"),
    text("Vacumm_B", "vacuumBreaker1", "vacuumBreaker1.size"),
    text("P_CValve", "pressureControlValve", "pressureControlValve.size"),
    text("Non_return", "nonReturnValve", "nonReturnValve.size"),
    text("Fogi_Pack", "fogiPack", "fogiPack.size"),
    _brands("Drip_Tray"),
    _brands("VB"),
    _brands("PCV", techron="Technron"),
    _brands("NRV"),
    RowsRule(source="sundries", columns=_MATERIAL_ROW, max_rows=15),
    text("Extra_Item", "extraItem1.name", "extraItem1"),
    text("Extra_ItemQty", "extraItem1.quantity"),
    text("Extra_Item2", "extraItem2.name", "extraItem2"),
    text("Extra_ItemQty2", "extraItem2.quantity"),
    RowsRule(source="additionalMaterials", columns=(("Added{i}", ("",)),), max_rows=5, split_lines=True),
    *(rule for i in range(1, 6) for rule in _added(i)),
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

REGISTRY: dict[str, RegistryEntry] = {
    entry.form_type: entry
    for entry in (
        RegistryEntry(
            form_type="absa-form",
            title="ABSA Certificate",
            template="ABSACertificate.pdf",
            download_name="ABSA_Form",
            rules=_ABSA_RULES,
            flatten=False,
        ),
        RegistryEntry(
            form_type="clearance-certificate-form",
            title="Clearance Certificate",
            template="BBPClearanceCertificate.pdf",
            download_name="Clearance_Certificate_Form",
            rules=_CLEARANCE_RULES,
            dual_signature=True,
        ),
        RegistryEntry(
            form_type="sahl-certificate-form",
            title="SAHL Certificate",
            template="sahlld.pdf",
            download_name="SAHL_Certificate_Form",
            rules=_SAHL_RULES,
        ),
        RegistryEntry(
            form_type="discovery-form",
            title="Discovery Geyser Form",
            template="desco.pdf",
            download_name="Discovery_Form",
            rules=_DISCOVERY_RULES,
            dual_signature=True,
        ),
        RegistryEntry(
            form_type="liability-form",
            title="Liability Waiver",
            template="liabWave.pdf",
            download_name="Liability_Form",
            rules=_LIABILITY_RULES,
            dual_signature=True,
        ),
        RegistryEntry(
            form_type="noncompliance-form",
            title="Non-Compliance Report",
            template="Noncompliance.pdf",
            download_name="Non_Compliance_Form",
            rules=_NONCOMPLIANCE_RULES,
            dual_signature=True,
        ),
        RegistryEntry(
            form_type="material-list-form",
            title="Material List",
            template="ML.pdf",
            download_name="Material_List_Form",
            rules=_MATERIAL_LIST_RULES,
            dual_signature=True,
        ),
    )
}

ALIASES = {
    "form-absa-certificate": "absa-form",
    "form-clearance-certificate": "clearance-certificate-form",
    "form-sahl-certificate": "sahl-certificate-form",
    "form-discovery-geyser": "discovery-form",
    "form-liability-certificate": "liability-form",
}


def canonical_form_type(form_type: str) -> str:
    return ALIASES.get(form_type, form_type)


def get_entry(form_type: str) -> RegistryEntry:
    """Return the entry for ``form_type`` or its legacy alias."""

    try:
        return REGISTRY[canonical_form_type(form_type)]
    except KeyError:
        raise UnsupportedFormType(form_type) from None


def is_supported(form_type: str) -> bool:
    return canonical_form_type(form_type) in REGISTRY


def list_entries() -> Iterable[RegistryEntry]:
    return REGISTRY.values()


def template_fields(entry: RegistryEntry) -> list[str]:
    """Field identifiers the rules of ``entry`` may write, in rule order."""

    return list(dict.fromkeys(field_id for rule in entry.rules for field_id in targets(rule)))


__all__ = [
    "ALIASES",
    "COMPLIANCE_ISSUES",
    "LIABILITY_ASSESSMENT_ITEMS",
    "REGISTRY",
    "RegistryEntry",
    "canonical_form_type",
    "get_entry",
    "is_supported",
    "list_entries",
    "template_fields",
]
