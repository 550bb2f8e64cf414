from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Literal, Optional, Union, cast

from . import exceptions, importer, ingest, validate
from .config import EngineConfig
from .store import ReadingStore
from .types import (
    ColumnMapping,
    ImportConfig,
    ImportResult,
    ParsedCSV,
    ValidationResult,
)

logger = logging.getLogger(__name__)

WizardStep = Literal["upload", "map", "validate", "import", "results"]
STEPS: tuple[WizardStep, ...] = ("upload", "map", "validate", "import", "results")


@dataclass
class Upload:
    step: WizardStep = field(default="upload", init=False)


@dataclass
class Map:
    csv: ParsedCSV
    mapping: ColumnMapping
    config: ImportConfig
    step: WizardStep = field(default="map", init=False)


@dataclass
class Validating:
    csv: ParsedCSV
    mapping: ColumnMapping
    config: ImportConfig
    step: WizardStep = field(default="validate", init=False)


@dataclass
class Validated:
    csv: ParsedCSV
    mapping: ColumnMapping
    config: ImportConfig
    validation: ValidationResult
    step: WizardStep = field(default="validate", init=False)


@dataclass
class Importing:
    csv: ParsedCSV
    mapping: ColumnMapping
    config: ImportConfig
    validation: ValidationResult
    step: WizardStep = field(default="import", init=False)


@dataclass
class Done:
    csv: ParsedCSV
    mapping: ColumnMapping
    config: ImportConfig
    validation: ValidationResult
    result: ImportResult
    step: WizardStep = field(default="results", init=False)


WizardState = Union[Upload, Map, Validating, Validated, Importing, Done]
LoadedState = Union[Map, Validating, Validated, Importing, Done]


class ImportWizard:
    """
    Linear upload -> map -> validate -> import -> results flow.

    Entering the validate step always runs validation against the store;
    that is the only transition with an implicit action. back() may jump to
    any earlier step and drops the state of later steps.
    """

    def __init__(
        self,
        store: ReadingStore,
        *,
        created_by: Optional[str] = None,
        engine_config: Optional[EngineConfig] = None,
    ):
        self.store = store
        self.created_by = created_by
        self.engine_config = engine_config
        self.state: WizardState = Upload()

    @property
    def step(self) -> WizardStep:
        return self.state.step

    def _expect(self, *kinds: type) -> None:
        if not isinstance(self.state, kinds):
            names = ", ".join(k.__name__ for k in kinds)
            raise exceptions.WizardError(
                f"Cannot do that from step '{self.step}' (needs {names})."
            )

    def _loaded(self) -> LoadedState:
        if isinstance(self.state, Upload):
            raise exceptions.WizardError("No CSV has been uploaded yet.")
        return self.state

    def upload(self, csv: ParsedCSV) -> Map:
        self._expect(Upload)
        mapping = ColumnMapping(date=ingest.detect_date_column(csv.headers))
        self.state = Map(csv=csv, mapping=mapping, config=ImportConfig())
        return self.state

    def submit_mapping(self, mapping: ColumnMapping, config: ImportConfig) -> Validated:
        self._expect(Map)
        current = cast(Map, self.state)
        validate.validate_mapping(mapping, config)
        self.state = Map(csv=current.csv, mapping=mapping, config=config)
        return self._enter_validate()

    def _enter_validate(self) -> Validated:
        current = self._loaded()
        self.state = Validating(current.csv, current.mapping, current.config)
        try:
            result = validate.validate_import(
                current.csv,
                current.mapping,
                current.config,
                self.store,
                engine_config=self.engine_config,
            )
        except Exception:
            self.state = Map(current.csv, current.mapping, current.config)
            raise
        self.state = Validated(current.csv, current.mapping, current.config, result)
        return self.state

    def run_import(self) -> Done:
        self._expect(Validated)
        current = cast(Validated, self.state)
        self.state = Importing(
            current.csv, current.mapping, current.config, current.validation
        )
        try:
            result = importer.execute_import(
                current.validation,
                current.mapping,
                current.config,
                self.store,
                created_by=self.created_by,
            )
        except Exception:
            self.state = current
            raise
        self.state = Done(
            current.csv, current.mapping, current.config, current.validation, result
        )
        return self.state

    def back(self, step: WizardStep) -> WizardState:
        """Return to an earlier step, discarding everything after it."""
        if step not in STEPS or STEPS.index(step) >= STEPS.index(self.step):
            raise exceptions.WizardError(
                f"Cannot go back from '{self.step}' to '{step}'."
            )
        if step == "import":
            raise exceptions.WizardError("The import step cannot be re-entered.")
        current = self._loaded()
        if step == "upload":
            self.state = Upload()
        elif step == "map":
            self.state = Map(current.csv, current.mapping, current.config)
        else:
            self._enter_validate()
        return self.state

    def reset(self) -> Upload:
        self.state = Upload()
        return self.state
