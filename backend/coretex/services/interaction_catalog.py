"""Drug Interaction Catalog.

Curated, immutable table of known pairwise drug interactions. Each rule
records whether the interaction can be mitigated by spacing doses apart and,
if so, the minimum number of hours required between them.

Absence of a rule is not evidence of safety: it only means the catalog has
no entry for that pair.
"""

import json
import logging
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable

from coretex.core.config import Settings, settings as default_settings
from coretex.schemas.base import InteractionSeverity

logger = logging.getLogger(__name__)


def normalize_medication_name(name: str) -> str:
    """Normalize a medication name for matching.

    Trims, collapses internal whitespace and case-folds, so that
    " Warfarin  Sodium" and "warfarin sodium" compare equal.
    """
    return " ".join(name.split()).casefold()


def pair_key(name_a: str, name_b: str) -> tuple[str, str]:
    """Order-independent key for a pair of normalized names."""
    return (name_a, name_b) if name_a <= name_b else (name_b, name_a)


@dataclass(frozen=True)
class InteractionRule:
    """A known drug-drug interaction between two medications."""

    drug1: str
    drug2: str
    severity: InteractionSeverity
    reason: str
    can_separate_by_schedule: bool = False
    min_hours_apart: float | None = None  # Only meaningful when separable

    @property
    def key(self) -> tuple[str, str]:
        return pair_key(self.drug1, self.drug2)


# ============================================================================
# Built-in Interaction Rules
# ============================================================================

# Curated interactions based on FDA labels and clinical guidelines
INTERACTION_RULES: tuple[InteractionRule, ...] = (
    # ==========================================================================
    # CONTRAINDICATED COMBINATIONS
    # ==========================================================================
    InteractionRule(
        drug1="methotrexate",
        drug2="trimethoprim",
        severity=InteractionSeverity.CONTRAINDICATED,
        reason="Trimethoprim inhibits renal excretion of methotrexate, causing severe myelosuppression",
    ),
    InteractionRule(
        drug1="simvastatin",
        drug2="clarithromycin",
        severity=InteractionSeverity.CONTRAINDICATED,
        reason="Clarithromycin strongly inhibits CYP3A4; rhabdomyolysis risk",
    ),
    InteractionRule(
        drug1="linezolid",
        drug2="sertraline",
        severity=InteractionSeverity.CONTRAINDICATED,
        reason="MAO inhibition plus SSRI; risk of serotonin syndrome",
    ),
    InteractionRule(
        drug1="sildenafil",
        drug2="nitroglycerin",
        severity=InteractionSeverity.CONTRAINDICATED,
        reason="Combined nitric oxide vasodilation causes severe hypotension",
    ),
    InteractionRule(
        drug1="tizanidine",
        drug2="ciprofloxacin",
        severity=InteractionSeverity.CONTRAINDICATED,
        reason="Ciprofloxacin blocks CYP1A2, raising tizanidine levels roughly 10-fold",
    ),
    # ==========================================================================
    # MAJOR INTERACTIONS
    # ==========================================================================
    InteractionRule(
        drug1="warfarin",
        drug2="aspirin",
        severity=InteractionSeverity.MAJOR,
        reason="Additive anticoagulant and antiplatelet effects increase bleeding risk",
        can_separate_by_schedule=True,
        min_hours_apart=8,
    ),
    InteractionRule(
        drug1="warfarin",
        drug2="ibuprofen",
        severity=InteractionSeverity.MAJOR,
        reason="NSAIDs inhibit platelet function and may increase warfarin levels",
    ),
    InteractionRule(
        drug1="spironolactone",
        drug2="lisinopril",
        severity=InteractionSeverity.MAJOR,
        reason="Both drugs increase potassium retention; risk of hyperkalemia",
    ),
    InteractionRule(
        drug1="tramadol",
        drug2="sertraline",
        severity=InteractionSeverity.MAJOR,
        reason="Both drugs increase serotonin activity; seizure and serotonin syndrome risk",
    ),
    InteractionRule(
        drug1="ciprofloxacin",
        drug2="calcium carbonate",
        severity=InteractionSeverity.MAJOR,
        reason="Calcium chelates ciprofloxacin in the gut, causing treatment failure",
        can_separate_by_schedule=True,
        min_hours_apart=6,
    ),
    InteractionRule(
        drug1="levofloxacin",
        drug2="ferrous sulfate",
        severity=InteractionSeverity.MAJOR,
        reason="Iron chelates fluoroquinolones and blocks their absorption",
        can_separate_by_schedule=True,
        min_hours_apart=4,
    ),
    InteractionRule(
        drug1="doxycycline",
        drug2="ferrous sulfate",
        severity=InteractionSeverity.MAJOR,
        reason="Iron binds tetracyclines in the gut and markedly reduces absorption",
        can_separate_by_schedule=True,
        min_hours_apart=3,
    ),
    # ==========================================================================
    # MODERATE INTERACTIONS
    # ==========================================================================
    InteractionRule(
        drug1="levothyroxine",
        drug2="calcium carbonate",
        severity=InteractionSeverity.MODERATE,
        reason="Calcium binds levothyroxine in the GI tract, reducing absorption",
        can_separate_by_schedule=True,
        min_hours_apart=4,
    ),
    InteractionRule(
        drug1="levothyroxine",
        drug2="ferrous sulfate",
        severity=InteractionSeverity.MODERATE,
        reason="Iron forms insoluble complexes with levothyroxine",
        can_separate_by_schedule=True,
        min_hours_apart=4,
    ),
    InteractionRule(
        drug1="levothyroxine",
        drug2="omeprazole",
        severity=InteractionSeverity.MODERATE,
        reason="Reduced gastric acid impairs levothyroxine dissolution",
        can_separate_by_schedule=True,
        min_hours_apart=4,
    ),
    InteractionRule(
        drug1="alendronate",
        drug2="calcium carbonate",
        severity=InteractionSeverity.MODERATE,
        reason="Calcium prevents absorption of bisphosphonates",
        can_separate_by_schedule=True,
        min_hours_apart=2,
    ),
    InteractionRule(
        drug1="omeprazole",
        drug2="clopidogrel",
        severity=InteractionSeverity.MODERATE,
        reason="Omeprazole inhibits CYP2C19, reducing clopidogrel activation",
    ),
    InteractionRule(
        drug1="amlodipine",
        drug2="simvastatin",
        severity=InteractionSeverity.MODERATE,
        reason="Amlodipine inhibits CYP3A4, increasing simvastatin levels and myopathy risk",
    ),
    InteractionRule(
        drug1="metformin",
        drug2="lisinopril",
        severity=InteractionSeverity.MODERATE,
        reason="ACE inhibitors may enhance the glucose-lowering effect",
    ),
    # ==========================================================================
    # MINOR INTERACTIONS
    # ==========================================================================
    InteractionRule(
        drug1="aspirin",
        drug2="acetaminophen",
        severity=InteractionSeverity.MINOR,
        reason="Minimal additive GI irritation at usual doses",
    ),
    InteractionRule(
        drug1="metformin",
        drug2="atorvastatin",
        severity=InteractionSeverity.MINOR,
        reason="Possible small rise in blood glucose with statins",
    ),
    InteractionRule(
        drug1="amlodipine",
        drug2="lisinopril",
        severity=InteractionSeverity.MINOR,
        reason="Additive blood pressure lowering; usually intended",
    ),
)


# ============================================================================
# Catalog
# ============================================================================


class InteractionCatalog:
    """Immutable lookup table of interaction rules keyed by unordered name pairs.

    Built once (normally at startup) and shared read-only between callers.

    Usage:
        catalog = InteractionCatalog.from_rules(INTERACTION_RULES)
        rule = catalog.lookup("Aspirin", "warfarin")
        if rule is not None:
            print(rule.severity, rule.reason)
    """

    __slots__ = ("_pair_index", "_drug_index")

    def __init__(self, rules: Iterable[InteractionRule]) -> None:
        """Index the given rules.

        Raises:
            ValueError: If a rule pairs a medication with itself, a pair is
                listed twice, or minHoursApart is not positive.
        """
        pair_index: dict[tuple[str, str], InteractionRule] = {}
        drug_index: dict[str, list[InteractionRule]] = {}

        for rule in rules:
            rule = replace(
                rule,
                drug1=normalize_medication_name(rule.drug1),
                drug2=normalize_medication_name(rule.drug2),
            )
            if not rule.drug1 or not rule.drug2:
                raise ValueError(f"Interaction rule has an empty medication name: {rule!r}")
            if rule.drug1 == rule.drug2:
                raise ValueError(f"Interaction rule references '{rule.drug1}' against itself")
            if rule.min_hours_apart is not None and rule.min_hours_apart <= 0:
                raise ValueError(
                    f"minHoursApart must be positive for {rule.drug1} + {rule.drug2}"
                )
            if rule.key in pair_index:
                raise ValueError(f"Duplicate interaction rule for {rule.drug1} + {rule.drug2}")

            pair_index[rule.key] = rule
            drug_index.setdefault(rule.drug1, []).append(rule)
            drug_index.setdefault(rule.drug2, []).append(rule)

        self._pair_index = MappingProxyType(pair_index)
        self._drug_index = MappingProxyType(
            {drug: tuple(found) for drug, found in drug_index.items()}
        )

    @classmethod
    def from_rules(cls, rules: Iterable[InteractionRule]) -> "InteractionCatalog":
        return cls(rules)

    @classmethod
    def from_json(cls, path: Path, include_builtin: bool = True) -> "InteractionCatalog":
        """Build a catalog from a JSON rule file.

        The file holds ``{"interactions": [{"drug1", "drug2", "severity",
        "reason", "canSeparateBySchedule", "minHoursApart"}]}``. When
        ``include_builtin`` is set, the built-in rules come first and file
        entries for pairs already covered are skipped.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the file is not valid JSON or holds a bad rule.
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Catalog file {path} must contain a JSON object")

        rules: list[InteractionRule] = list(INTERACTION_RULES) if include_builtin else []
        seen = {
            pair_key(normalize_medication_name(r.drug1), normalize_medication_name(r.drug2))
            for r in rules
        }

        items = data.get("interactions", [])
        if not isinstance(items, list):
            raise ValueError(f"Catalog file {path}: 'interactions' must be a list")

        added = 0
        for item in items:
            rule = _rule_from_dict(item)
            key = pair_key(
                normalize_medication_name(rule.drug1), normalize_medication_name(rule.drug2)
            )
            if key in seen:
                logger.debug(f"Skipping catalog file entry for known pair {key}")
                continue
            seen.add(key)
            rules.append(rule)
            added += 1

        logger.info(f"Loaded {added} interaction rules from {path}")
        return cls(rules)

    def lookup(self, name_a: str, name_b: str) -> InteractionRule | None:
        """Find the rule for a pair of medications, in either order.

        Returns:
            The matching InteractionRule, or None if the catalog has no entry.
        """
        a = normalize_medication_name(name_a)
        b = normalize_medication_name(name_b)
        if a == b:
            return None
        return self._pair_index.get(pair_key(a, b))

    def rules_for(self, name: str) -> tuple[InteractionRule, ...]:
        """Get all known rules involving a medication."""
        return self._drug_index.get(normalize_medication_name(name), ())

    def knows(self, name: str) -> bool:
        """Whether the catalog has any rule mentioning this medication."""
        return normalize_medication_name(name) in self._drug_index

    def stats(self) -> dict[str, Any]:
        """Get statistics about the catalog."""
        by_severity = {severity.value: 0 for severity in InteractionSeverity}
        separable = 0
        for rule in self._pair_index.values():
            by_severity[rule.severity.value] += 1
            if rule.can_separate_by_schedule:
                separable += 1

        return {
            "total_rules": len(self._pair_index),
            "unique_drugs": len(self._drug_index),
            "separable_rules": separable,
            "by_severity": by_severity,
        }

    def __len__(self) -> int:
        return len(self._pair_index)

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return self.lookup(pair[0], pair[1]) is not None


def _rule_from_dict(item: Any) -> InteractionRule:
    """Parse one catalog file entry."""
    if not isinstance(item, dict):
        raise ValueError(f"Catalog entry must be an object: {item!r}")
    try:
        drug1, drug2 = item["drug1"], item["drug2"]
    except KeyError as e:
        raise ValueError(f"Catalog entry is missing {e}: {item!r}") from e
    if not isinstance(drug1, str) or not isinstance(drug2, str):
        raise ValueError(f"Catalog entry drug names must be strings: {item!r}")

    try:
        min_hours = item.get("minHoursApart")
        return InteractionRule(
            drug1=drug1,
            drug2=drug2,
            severity=InteractionSeverity(str(item.get("severity", "moderate")).lower()),
            reason=str(item.get("reason", "")),
            can_separate_by_schedule=bool(item.get("canSeparateBySchedule", False)),
            min_hours_apart=float(min_hours) if min_hours is not None else None,
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Invalid catalog entry {item!r}: {e}") from e


def load_default_catalog(config: Settings | None = None) -> InteractionCatalog:
    """Build the catalog from the built-in rules plus the configured rule file.

    A missing or unreadable rule file is logged and the built-in rules are
    used on their own.
    """
    config = config or default_settings
    path = config.interaction_catalog_file

    if path is not None:
        if path.exists():
            try:
                catalog = InteractionCatalog.from_json(path)
                logger.info(f"Interaction catalog initialized with {len(catalog)} rules")
                return catalog
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load interaction rules from {path}: {e}")
        else:
            logger.warning(f"Interaction catalog file not found: {path}")

    catalog = InteractionCatalog(INTERACTION_RULES)
    logger.info(f"Interaction catalog initialized with {len(catalog)} rules")
    return catalog


@lru_cache(maxsize=1)
def get_default_catalog() -> InteractionCatalog:
    """Get the shared catalog built from the process settings."""
    return load_default_catalog()
