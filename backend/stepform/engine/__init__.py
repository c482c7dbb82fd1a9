"""Wizard engine: condition evaluation, validation and the step runtime.

Pure logic with no I/O; persistence is reached through the contracts in
`stepform.engine.persistence`. Import from the submodules directly
(`stepform.engine.runtime`, `stepform.engine.conditions`, ...): the
schemas import `stepform.engine.field_types`, so this package must not
import them back at load time.
"""
