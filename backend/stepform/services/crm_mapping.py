"""Mapping adapter for `entity.property` strings.

Completed intake wizards feed the client and contact records: a field
mapped to `client.company_name` lands in the `client` group under
`company_name`. Nothing else in the codebase looks inside a mapping
string.
"""

import logging

from stepform.engine.values import stringify
from stepform.schemas.submission import AnswerValue

logger = logging.getLogger(__name__)

CRM_ENTITIES = ("client", "contact")


class CrmRecordCollector:
    """Collects mapped answers into per-entity property dicts."""

    def __init__(self, entities: tuple[str, ...] = CRM_ENTITIES):
        self.entities = entities
        self.records: dict[str, dict[str, str]] = {}

    def apply_mapping(self, mapping: str, value: AnswerValue) -> None:
        entity, _, prop = mapping.partition(".")
        if entity not in self.entities or not prop:
            logger.debug(f"Ignoring unsupported mapping {mapping!r}")
            return
        self.records.setdefault(entity, {})[prop] = stringify(value)
