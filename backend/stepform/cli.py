"""Management CLI for wizard templates.

Usage:
    python -m stepform.cli seed-templates              # Insert missing built-in templates
    python -m stepform.cli check-template <file.json>  # Integrity check a template file
"""

import asyncio
import json
import sys

from pydantic import ValidationError

from stepform.database import async_session
from stepform.engine.integrity import check_template
from stepform.schemas.wizard import TemplateStatus, WizardTemplate
from stepform.seeds import DEFAULT_TEMPLATES
from stepform.services.template_store import SqlTemplateRepository, slugify


async def seed_templates() -> int:
    """Create and publish every seed whose slug is not taken yet."""
    created = 0
    async with async_session() as db:
        repo = SqlTemplateRepository(db)
        for body in DEFAULT_TEMPLATES:
            slug = slugify(body.name)
            if await repo.get_by_slug(slug):
                print(f"  {slug}: already present")
                continue
            template = await repo.create_template(body, is_system=True)
            await repo.set_status(template.id, TemplateStatus.PUBLISHED)
            await db.commit()
            print(f"  {slug}: created")
            created += 1
    return created


def check_template_file(path: str) -> int:
    """Print integrity problems for a template JSON file; return exit code."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read {path}: {e}")
        return 2

    # List order stands in for a missing sort_order, as on the API
    if isinstance(data, dict):
        for index, step in enumerate(data.get("steps") or []):
            if isinstance(step, dict):
                step.setdefault("sort_order", index)

    try:
        template = WizardTemplate.model_validate(data)
    except ValidationError as e:
        print(f"{path}: invalid template")
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            print(f"  {loc}: {error['msg']}")
        return 2

    problems = check_template(template)
    if not problems:
        print(f"{path}: OK")
        return 0
    print(f"{path}: {len(problems)} problem(s)")
    for problem in problems:
        print(f"  - {problem}")
    return 1


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "seed-templates":
        count = asyncio.run(seed_templates())
        print(f"\n{count} template(s) created")
    elif cmd == "check-template" and len(sys.argv) > 2:
        sys.exit(check_template_file(sys.argv[2]))
    else:
        print("Usage: python -m stepform.cli [seed-templates|check-template <file.json>]")
        sys.exit(2)
