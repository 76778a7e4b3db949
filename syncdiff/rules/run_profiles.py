"""Display labels for run profile step types."""

_IMPORT_LABELS = {
    "DELTA-IMPORT": (
        "Delta Import (Stage Only)",
        "Delta Import and Delta Synchronization",
    ),
    "FULL-IMPORT": (
        "Full Import (Stage Only)",
        "Full Import and Delta Synchronization",
    ),
}

_APPLY_RULES_LABELS = {
    "APPLY-PENDING": "Delta Synchronization",
    "REEVALUATE-FLOW-CONNECTORS": "Full Synchronization",
}

STAGE_ONLY_SUBTYPE = "TO-CS"


def step_type_label(step_type: str | None, subtype: str | None = None) -> str:
    """Map a run profile step type and subtype to its display label.

    The mapping is total: unknown step types are returned uppercased, and a
    missing step type yields an empty string.

    Args:
        step_type: Value of the step's ``type`` attribute, e.g. ``delta-import``
        subtype: ``import-subtype`` for imports, ``apply-rules-subtype`` for
            synchronization steps

    Returns:
        The display label
    """
    kind = (step_type or "").upper()
    sub = (subtype or "").upper()

    if kind in _IMPORT_LABELS:
        stage_only, with_sync = _IMPORT_LABELS[kind]
        return stage_only if sub == STAGE_ONLY_SUBTYPE else with_sync

    if kind == "EXPORT":
        return "Export"

    if kind == "FULL-IMPORT-REEVALUATE-RULES":
        return "Full Import and Full Synchronization"

    if kind == "APPLY-RULES":
        return _APPLY_RULES_LABELS.get(sub, sub)

    return kind
