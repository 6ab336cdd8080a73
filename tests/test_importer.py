# tests/test_importer.py
import pytest

from app.models.tables import AudioSampleRecord
from app.services import importer
from app.services.dictation_service import REPEAT_SENTENCE_COLLECTION, dictation_service


def test_normalize_text():
    assert importer.normalize_text("\ufeff  Hello   world \n") == "Hello world"
    assert importer.normalize_text(None) == ""


def test_strip_wrapping_quotes():
    assert importer.strip_wrapping_quotes('"quoted"') == "quoted"
    assert importer.strip_wrapping_quotes('"half') == '"half'


def test_doc_id_is_stable():
    first = importer.repeat_sentence_doc_id("RS001", "Hello world")
    assert first == importer.repeat_sentence_doc_id("RS001", "Hello world")
    assert first != importer.repeat_sentence_doc_id("RS002", "Hello world")
    assert first.startswith("rs_") and len(first) == 31


class TestBuildPlan:
    ROWS = [
        {"QuestionNo": "rs001", "Type": "rs", "Content": '"The lecture starts at nine."'},
        {"QuestionNo": "RS001", "Type": "RS", "Content": "The  lecture starts at nine."},
        {"QuestionNo": "", "Type": "RS", "Content": "No id."},
        {"QuestionNo": "RS002", "Type": "", "Content": "  "},
        {"QuestionNo": "RS003", "Content": "Please close the door."},
    ]

    def test_rows_are_cleaned_and_deduplicated(self):
        plan = importer.build_repeat_sentence_items(self.ROWS)
        assert [(i.reference_id, i.text) for i in plan.items] == [
            ("RS001", "The lecture starts at nine."),
            ("RS003", "Please close the door."),
        ]
        assert plan.skipped == 2
        assert plan.duplicates_removed == 1

    def test_type_defaults_to_rs(self):
        plan = importer.build_repeat_sentence_items(self.ROWS)
        assert plan.items[1].question_type == "RS"
        assert plan.items[1].line == 6


def test_import_repeat_sentences_is_an_upsert(client, run_db):
    plan = importer.build_repeat_sentence_items([
        {"QuestionNo": "RS100", "Content": "Repeat after me."},
        {"QuestionNo": "RS101", "Content": "Once more please."},
    ])

    async def run_import(session):
        return await importer.import_repeat_sentences(session, plan, import_source="tests")

    first = run_db(run_import)
    assert (first.upserted, first.inserted, first.updated, first.batches) == (2, 2, 0, 1)
    second = run_db(run_import)
    assert (second.inserted, second.updated) == (0, 2)

    async def fetch(session):
        return await session.get(AudioSampleRecord, plan.items[0].doc_id)
    record = run_db(fetch)
    assert record.collection == REPEAT_SENTENCE_COLLECTION
    assert record.reference_id == "RS100"
    assert record.audio == {"Brian": "", "Olivia": "", "Joanna": ""}
    assert record.import_source == "tests"


def test_empty_plan_imports_nothing(client, run_db):
    plan = importer.ImportPlan(items=[], skipped=0, duplicates_removed=0)

    async def run_import(session):
        return await importer.import_repeat_sentences(session, plan)

    assert run_db(run_import).upserted == 0


def test_load_question_number_map(tmp_path):
    path = tmp_path / "lookup.csv"
    path.write_text("QuestionNo,Content\n WFD003 , The museum is closed on public holidays. \n,Orphan\nX1,\n")
    mapping = importer.load_question_number_map(str(path))
    assert mapping == {"The museum is closed on public holidays.": "WFD003", "Orphan": ""}


def test_backfill_dictation_ids(client, run_db):
    mapping = {"The museum is closed on public holidays.": "WFD003"}

    async def backfill(session):
        return await importer.backfill_dictation_ids(session, mapping)

    summary = run_db(backfill)
    assert summary.updated == 1
    assert summary.processed == summary.updated + summary.not_found
    assert "The quick brown fox jumps over the lazy dog." in summary.not_found_texts

    async def fetch(session):
        return await dictation_service.get_item(session, "wfd3")
    assert run_db(fetch).reference_id == "WFD003"


def test_sync_hidden_flags(client, run_db):
    async def sync(session):
        return await importer.sync_hidden_flags(session)

    hidden, visible = run_db(sync)
    assert (hidden, visible) == (1, 3)

    async def fetch(session):
        return await dictation_service.get_item(session, "wfd4")
    assert run_db(fetch).is_hidden is True
