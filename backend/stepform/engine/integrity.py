"""Authoring-time structural checks for templates.

The runtime assumes a published template is well formed; these checks
run when a template is published and from the CLI.
"""

from stepform.engine.field_types import spec_for
from stepform.schemas.wizard import WizardTemplate


def check_template(template: WizardTemplate) -> list[str]:
    """Return a list of human-readable problems (empty = valid)."""
    problems: list[str] = []

    if not template.steps:
        problems.append("Template has no steps")
        return problems

    seen_orders: set[int] = set()
    for step in template.steps:
        if step.sort_order in seen_orders:
            problems.append(f"Duplicate step sort_order {step.sort_order} ('{step.title}')")
        seen_orders.add(step.sort_order)

    # name -> (step_index, position within step)
    positions: dict[str, tuple[int, int]] = {}
    for step_index, step in enumerate(template.steps):
        for position, field in enumerate(step.fields):
            if field.name in positions:
                problems.append(f"Field name '{field.name}' is used more than once")
                continue
            positions[field.name] = (step_index, position)
            if spec_for(field.type).needs_options and not field.options:
                problems.append(f"Field '{field.name}' ({field.type.value}) needs options")

    for step_index, step in enumerate(template.steps):
        if step.condition is not None:
            ref = positions.get(step.condition.field_id)
            if ref is None:
                problems.append(
                    f"Step '{step.title}' condition references unknown field "
                    f"'{step.condition.field_id}'"
                )
            elif ref[0] >= step_index:
                problems.append(
                    f"Step '{step.title}' condition must reference a field of an "
                    f"earlier step, not '{step.condition.field_id}'"
                )

        for position, field in enumerate(step.fields):
            if field.condition is None:
                continue
            ref = positions.get(field.condition.field_id)
            if ref is None:
                problems.append(
                    f"Field '{field.name}' condition references unknown field "
                    f"'{field.condition.field_id}'"
                )
            elif ref >= (step_index, position):
                problems.append(
                    f"Field '{field.name}' condition references '{field.condition.field_id}', "
                    f"which is not answered before it"
                )

    return problems
