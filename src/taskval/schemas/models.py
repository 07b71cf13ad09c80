"""
@brief
Pydantic data models for the taskval project.

@details
Defines the canonical model families:
    - Client, Worker, Task: one input record of each collection
    - BusinessRule: discriminated union of typed rule models keyed by rule type
    - ValidationFinding: one error/warning produced by the validation engine
    - Config: runtime configuration (from config.yaml)

Record models are deliberately permissive: every field is optional and list
fields accept arbitrary elements, so that partially-invalid records still reach
the validation engine, which reports the problems instead of the loader
rejecting the row. Field aliases follow the canonical column names
(``ClientID``, ``AvailableSlots``, ...); snake_case names are accepted too.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)
from pydantic.alias_generators import to_camel

Severity = Literal["error", "warning"]
EntityKind = Literal["clients", "workers", "tasks"]
RuleType = Literal[
    "co-run",
    "slot-restriction",
    "load-limit",
    "phase-window",
    "pattern-match",
    "precedence-override",
]

RULE_TYPES: tuple[str, ...] = RuleType.__args__  # type: ignore[attr-defined]

# Spellings emitted by the rule builder
_RULE_TYPE_ALIASES: dict[str, str] = {
    "coRun": "co-run",
    "slotRestriction": "slot-restriction",
    "loadLimit": "load-limit",
    "phaseWindow": "phase-window",
    "patternMatch": "pattern-match",
    "precedenceOverride": "precedence-override",
}


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration contracts.

    @details
    Forbids unknown fields and preserves exact naming rules.
    """

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown fields
        populate_by_name=True,  # Allow population by field name
        use_enum_values=True,
    )


class _RecordModel(BaseModel):
    """
    @brief
    Base model for input records (clients, workers, tasks).

    @details
    Records are immutable snapshots. Unknown columns are ignored, numeric IDs
    are coerced to strings, and ``None`` list cells become empty lists.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
        coerce_numbers_to_str=True,
    )


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


# ------------------------------------------------------------
# Input records
# ------------------------------------------------------------
class Client(_RecordModel):
    """
    @brief
    One client record.

    @details
    ``attributes`` holds the structured key/value payload; it may still be a raw
    JSON string when the caller did not decode it.
    """

    client_id: str | None = Field(None, alias="ClientID", description="Unique identifier")
    client_name: str | None = Field(None, alias="ClientName")
    priority_level: int | None = Field(None, alias="PriorityLevel", description="1 (low) .. 5 (high)")
    requested_task_ids: list[Any] = Field(default_factory=list, alias="RequestedTaskIDs")
    group_tag: str | None = Field(None, alias="GroupTag")
    attributes: dict[str, Any] | str | None = Field(None, alias="AttributesJSON")

    @field_validator("requested_task_ids", mode="before")
    @classmethod
    def empty_list_when_none(cls, value: Any) -> Any:
        return _none_to_list(value)


class Worker(_RecordModel):
    """One worker record; ``available_slots`` lists the phases the worker can serve."""

    worker_id: str | None = Field(None, alias="WorkerID", description="Unique identifier")
    worker_name: str | None = Field(None, alias="WorkerName")
    skills: list[Any] = Field(default_factory=list, alias="Skills")
    available_slots: list[Any] = Field(default_factory=list, alias="AvailableSlots")
    max_load_per_phase: int | None = Field(None, alias="MaxLoadPerPhase")
    worker_group: str | None = Field(None, alias="WorkerGroup")
    qualification_level: int | None = Field(None, alias="QualificationLevel")

    @field_validator("skills", "available_slots", mode="before")
    @classmethod
    def empty_list_when_none(cls, value: Any) -> Any:
        return _none_to_list(value)


class Task(_RecordModel):
    """One task record; empty ``preferred_phases`` means any phase."""

    task_id: str | None = Field(None, alias="TaskID", description="Unique identifier")
    task_name: str | None = Field(None, alias="TaskName")
    category: str | None = Field(None, alias="Category")
    duration: int | None = Field(None, alias="Duration", description="Number of phases consumed")
    required_skills: list[Any] = Field(default_factory=list, alias="RequiredSkills")
    preferred_phases: list[Any] = Field(default_factory=list, alias="PreferredPhases")
    max_concurrent: int | None = Field(
        None, alias="MaxConcurrent", description="Maximum parallel assignments"
    )

    @field_validator("required_skills", "preferred_phases", mode="before")
    @classmethod
    def empty_list_when_none(cls, value: Any) -> Any:
        return _none_to_list(value)


# ------------------------------------------------------------
# Business rules
# ------------------------------------------------------------
class _ParametersModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
        alias_generator=to_camel,
    )


class CoRunParameters(_ParametersModel):
    tasks: list[str] = Field(default_factory=list, description="Tasks that must run together")


class SlotRestrictionParameters(_ParametersModel):
    group: str = Field("", description="Client or worker group the restriction applies to")
    min_common_slots: int = Field(1, ge=1)


class LoadLimitParameters(_ParametersModel):
    worker_group: str = Field("", description="Worker group the limit applies to")
    max_slots_per_phase: int = Field(1, ge=1)


class PhaseWindowParameters(_ParametersModel):
    task_id: str = Field("", description="Task restricted by this window")
    allowed_phases: list[int] = Field(default_factory=list)


class PatternMatchParameters(_ParametersModel):
    regex: str = ""
    template: str = ""
    params: dict[str, Any] = Field(default_factory=dict)


class PrecedenceOverrideParameters(_ParametersModel):
    global_rules: list[str] = Field(default_factory=list)
    specific_rules: list[str] = Field(default_factory=list)
    priority: int = 0


def normalize_rule_type(value: Any) -> Any:
    """Map rule-builder spellings (``coRun``) onto canonical rule types (``co-run``)."""
    if isinstance(value, str):
        value = value.strip()
        return _RULE_TYPE_ALIASES.get(value, value)
    return value


class _RuleBase(BaseModel):
    """
    @brief
    Fields shared by every business rule.

    @details
    ``active`` is carried as data only. The validation engine evaluates every
    rule it is given; callers decide which rules to pass in.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = Field(..., description="Rule identifier")
    name: str = ""
    description: str = ""
    active: bool = True

    @field_validator("type", mode="before", check_fields=False)
    @classmethod
    def canonical_type(cls, value: Any) -> Any:
        return normalize_rule_type(value)


class CoRunRule(_RuleBase):
    type: Literal["co-run"] = "co-run"
    parameters: CoRunParameters = Field(default_factory=CoRunParameters)


class SlotRestrictionRule(_RuleBase):
    type: Literal["slot-restriction"] = "slot-restriction"
    parameters: SlotRestrictionParameters = Field(default_factory=SlotRestrictionParameters)


class LoadLimitRule(_RuleBase):
    type: Literal["load-limit"] = "load-limit"
    parameters: LoadLimitParameters = Field(default_factory=LoadLimitParameters)


class PhaseWindowRule(_RuleBase):
    type: Literal["phase-window"] = "phase-window"
    parameters: PhaseWindowParameters = Field(default_factory=PhaseWindowParameters)


class PatternMatchRule(_RuleBase):
    type: Literal["pattern-match"] = "pattern-match"
    parameters: PatternMatchParameters = Field(default_factory=PatternMatchParameters)


class PrecedenceOverrideRule(_RuleBase):
    type: Literal["precedence-override"] = "precedence-override"
    parameters: PrecedenceOverrideParameters = Field(
        default_factory=PrecedenceOverrideParameters
    )


def _rule_discriminator(value: Any) -> Any:
    if isinstance(value, dict):
        return normalize_rule_type(value.get("type"))
    return normalize_rule_type(getattr(value, "type", None))


BusinessRule = Annotated[
    Union[
        Annotated[CoRunRule, Tag("co-run")],
        Annotated[SlotRestrictionRule, Tag("slot-restriction")],
        Annotated[LoadLimitRule, Tag("load-limit")],
        Annotated[PhaseWindowRule, Tag("phase-window")],
        Annotated[PatternMatchRule, Tag("pattern-match")],
        Annotated[PrecedenceOverrideRule, Tag("precedence-override")],
    ],
    Discriminator(_rule_discriminator),
]

RULE_CLASSES: dict[str, type[_RuleBase]] = {
    "co-run": CoRunRule,
    "slot-restriction": SlotRestrictionRule,
    "load-limit": LoadLimitRule,
    "phase-window": PhaseWindowRule,
    "pattern-match": PatternMatchRule,
    "precedence-override": PrecedenceOverrideRule,
}

_rule_adapter: TypeAdapter[Any] = TypeAdapter(BusinessRule)


def parse_rule(data: Any) -> Any:
    """
    @brief
    Validate one raw rule mapping into its typed rule model.

    @raises
        pydantic.ValidationError
            Unknown rule type or parameters that do not fit the rule's shape.
    """
    return _rule_adapter.validate_python(data)


# ------------------------------------------------------------
# Validation output
# ------------------------------------------------------------
class ValidationFinding(BaseModel):
    """
    @brief
    One validation outcome tied to a single entity or rule and a single check.

    @details
    ``id`` is derived from entity kind, entity ID and check, so unchanged input
    yields identical IDs across runs.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., description="Deterministic finding identifier")
    severity: Severity
    entity: EntityKind
    entity_id: str
    field: str | None = None
    message: str
    suggestion: str | None = None
    check: str = Field(..., description="Name of the check that emitted the finding")
    rule_id: str | None = Field(None, description="Business rule the finding refers to")


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class ValidationConfig(BaseModel):
    """
    @brief
    Controls behavior of the validation run.

    @details
    Determines rule selection, check fan-out, and whether warnings make the
    report invalid.
    """

    include_inactive_rules: bool = Field(
        False, description="Pass rules with active=False to the engine"
    )
    parallel: bool = Field(False, description="Run checks on a thread pool")
    max_workers: int = Field(4, ge=1, description="Thread pool size when parallel")
    fail_on_warnings: bool = False
    write_report: bool = True


class ReportConfig(BaseModel):
    """Report output settings."""

    filename: str = "validation_report.json"
    include_summary: bool = True


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.
    """

    dataset_path: str | None = None
    rules_path: str | None = None
    output_dir: str | None = "data/output"
    validation: ValidationConfig = Field(default_factory=ValidationConfig.model_construct)
    report: ReportConfig = Field(default_factory=ReportConfig.model_construct)


__all__ = [
    "BusinessRule",
    "Client",
    "CoRunRule",
    "Config",
    "LoadLimitRule",
    "PatternMatchRule",
    "PhaseWindowRule",
    "PrecedenceOverrideRule",
    "RULE_CLASSES",
    "RULE_TYPES",
    "SlotRestrictionRule",
    "Task",
    "ValidationFinding",
    "Worker",
    "normalize_rule_type",
    "parse_rule",
]
