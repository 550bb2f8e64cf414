"""Import wizard state machine: linear flow, auto-validation, back transitions."""

import pytest

from waterlogic import exceptions, wizard
from waterlogic.store import InMemoryReadingStore
from waterlogic.types import ColumnMapping, ImportConfig

from .conftest import METER

MAP = ColumnMapping(date="Reading Date", meter="Meter (gal)")
CFG = ImportConfig(meter_id=METER)


@pytest.fixture
def wiz(store):
    return wizard.ImportWizard(store, created_by="op-1")


def test_happy_path(wiz, store, ten_row_csv):
    assert wiz.step == "upload"

    state = wiz.upload(ten_row_csv)
    assert isinstance(state, wizard.Map)
    assert state.mapping.date == "Reading Date"  # detected from header

    state = wiz.submit_mapping(MAP, CFG)
    assert isinstance(state, wizard.Validated)
    assert wiz.step == "validate"
    assert state.validation.valid_rows == 10
    assert store.readings == []

    state = wiz.run_import()
    assert isinstance(state, wizard.Done)
    assert wiz.step == "results"
    assert state.result.inserted == 10


def test_invalid_mapping_stays_on_map(wiz, ten_row_csv):
    wiz.upload(ten_row_csv)
    with pytest.raises(exceptions.MappingError):
        wiz.submit_mapping(MAP, ImportConfig())
    assert isinstance(wiz.state, wizard.Map)


def test_steps_cannot_be_skipped(wiz, ten_row_csv):
    with pytest.raises(exceptions.WizardError):
        wiz.run_import()
    with pytest.raises(exceptions.WizardError):
        wiz.submit_mapping(MAP, CFG)
    wiz.upload(ten_row_csv)
    with pytest.raises(exceptions.WizardError):
        wiz.upload(ten_row_csv)


def test_back_to_map_discards_validation(wiz, ten_row_csv):
    wiz.upload(ten_row_csv)
    wiz.submit_mapping(MAP, CFG)
    state = wiz.back("map")
    assert isinstance(state, wizard.Map)
    assert state.mapping == MAP
    assert not hasattr(state, "validation")


def test_back_to_validate_reruns_validation(wiz, ten_row_csv):
    wiz.upload(ten_row_csv)
    wiz.submit_mapping(MAP, CFG)
    wiz.run_import()
    state = wiz.back("validate")
    assert isinstance(state, wizard.Validated)
    # the rows now exist in the store
    assert state.validation.duplicate_rows == 10


def test_back_rules(wiz, ten_row_csv):
    with pytest.raises(exceptions.WizardError):
        wiz.back("upload")
    wiz.upload(ten_row_csv)
    wiz.submit_mapping(MAP, CFG)
    with pytest.raises(exceptions.WizardError):
        wiz.back("results")
    wiz.run_import()
    with pytest.raises(exceptions.WizardError):
        wiz.back("import")
    assert isinstance(wiz.back("upload"), wizard.Upload)


def test_reset(wiz, ten_row_csv):
    wiz.upload(ten_row_csv)
    assert isinstance(wiz.reset(), wizard.Upload)
    assert wiz.step == "upload"


class BrokenStore(InMemoryReadingStore):
    def insert_reading(self, reading):
        raise RuntimeError("connection lost")


def test_failed_import_returns_to_validated(meters, ten_row_csv):
    wiz = wizard.ImportWizard(BrokenStore(meters=meters))
    wiz.upload(ten_row_csv)
    validated = wiz.submit_mapping(MAP, CFG)
    with pytest.raises(RuntimeError):
        wiz.run_import()
    assert wiz.state is validated
    assert wiz.step == "validate"
