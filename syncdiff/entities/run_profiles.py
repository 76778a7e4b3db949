"""Run profile entity: steps with their nested per-step settings."""

from collections.abc import Iterator

from ..core.context import OperationContext
from ..core.render import SectionSpec
from ..core.schema import Column, ColumnType, ParentLink, define_schema
from ..core.table import RawRow
from ..rules.run_profiles import step_type_label
from ..rules.selector import merge_by_name
from ..snapshot import Eq, Node, Snapshot
from .base import Entity, find_connector

STEPS_TABLE = "Run Profile Steps"
STEP_SETTINGS_TABLE = "Run Profile Step Settings"

RUN_PROFILE_PATH = "ma-run-data/run-configuration"

steps_schema = define_schema(
    STEPS_TABLE,
    [
        Column("Step Number", ColumnType.INTEGER, header="Step#"),
        Column("Step Type"),
    ],
    primary_key=["Step Number"],
    sort_key="Step Number",
)

step_settings_schema = define_schema(
    STEP_SETTINGS_TABLE,
    [
        Column("Step Number", ColumnType.INTEGER, hidden=True),
        Column("Setting"),
        Column("Configuration"),
        Column("Setting Number", ColumnType.INTEGER, hidden=True),
    ],
    primary_key=["Step Number", "Setting"],
    sort_key="Setting Number",
    parent_link=ParentLink(STEPS_TABLE, ("Step Number",)),
)


def run_profile_names(snapshot: Snapshot | None, connector_name: str | None) -> list[str]:
    connector = find_connector(snapshot, connector_name)
    if connector is None:
        return []
    return [profile.text("name") or "" for profile in connector.select_all(RUN_PROFILE_PATH)]


def ordered_run_profile_names(
    pilot: Snapshot | None, production: Snapshot | None, connector_name: str | None
) -> list[str]:
    """Pilot profile names sorted, then production-only names sorted."""
    return [
        name
        for name, _ in merge_by_name(
            run_profile_names(pilot, connector_name),
            run_profile_names(production, connector_name),
        )
    ]


def _find_profile(
    snapshot: Snapshot, context: OperationContext, profile_name: str
) -> tuple[Node | None, Node | None]:
    connector = find_connector(snapshot, context.connector_name)
    if connector is None:
        return None, None
    return connector, connector.select_one(RUN_PROFILE_PATH, where=Eq("name", profile_name))


def _step_settings(connector: Node, step: Node) -> list[tuple[str, str | None]]:
    step_type = step.select_one("step-type")
    subtype = None
    if step_type is not None:
        subtype = step_type.text("import-subtype") or step_type.text("apply-rules-subtype")

    partition_id = step.text("partition")
    partition_name = partition_id
    if partition_id:
        partition = connector.select_one(
            "ma-partition-data/partition",
            where=Eq("id", partition_id, case_insensitive=True),
        )
        if partition is not None:
            partition_name = partition.text("name") or partition_id

    return [
        (
            "Step Type",
            step_type_label(step_type.attr("type") if step_type is not None else None, subtype),
        ),
        ("Partition", partition_name),
        ("Number of Objects Threshold", step.text("threshold/object")),
        ("Number of Deletions Threshold", step.text("threshold/delete")),
        ("Log File Name", step.text("dropfile-name")),
    ]


def run_profile(profile_name: str, heading_level: int = 4) -> Entity:
    """Entity documenting one run profile of the current connector."""

    def extract_steps(snapshot: Snapshot, context: OperationContext) -> Iterator[RawRow]:
        connector, profile = _find_profile(snapshot, context, profile_name)
        if connector is None or profile is None:
            return
        for number, step in enumerate(profile.select_all("configuration/step"), start=1):
            settings = dict(_step_settings(connector, step))
            yield (number, settings["Step Type"])

    def extract_step_settings(
        snapshot: Snapshot, context: OperationContext
    ) -> Iterator[RawRow]:
        connector, profile = _find_profile(snapshot, context, profile_name)
        if connector is None or profile is None:
            return
        for number, step in enumerate(profile.select_all("configuration/step"), start=1):
            for setting_number, (setting, value) in enumerate(
                _step_settings(connector, step)
            ):
                yield (number, setting, value, setting_number)

    return Entity(
        key=f"run-profile:{profile_name}",
        section=SectionSpec(
            title=profile_name,
            heading_level=heading_level,
            empty_message="The run profile has no steps configured.",
            bookmark_title=f"Run Profile {profile_name}",
            tables=(STEPS_TABLE,),
        ),
        schemas=(steps_schema, step_settings_schema),
        extracts={
            STEPS_TABLE: extract_steps,
            STEP_SETTINGS_TABLE: extract_step_settings,
        },
    )
