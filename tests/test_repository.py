"""Tests for the JSON persistence gateway."""

import json
import os
from dataclasses import replace

import pytest

from myvocab.errors import (
    CopyFailedError,
    DecodeFailedError,
    DecodeReason,
    NotFoundError,
    WriteFailedError,
)
from myvocab.services import JSONRepository


class TestInitialize:
    """First-run bootstrap and loading."""

    def test_first_run_copies_template(self, repository, dataset):
        assert not repository.has_working_copy
        loaded = repository.initialize()
        assert repository.has_working_copy
        assert loaded == dataset

    def test_second_call_does_not_recopy_template(self, repository, template_file):
        first = repository.initialize()

        # Changing the template afterwards must not affect the working copy
        data = json.loads(template_file.read_text(encoding="utf-8"))
        data["user"]["name"] = "Someone else"
        data["words"] = data["words"][:1]
        template_file.write_text(json.dumps(data), encoding="utf-8")

        second = repository.initialize()
        assert second == first
        assert second.user.name == "Tester"

    def test_missing_template(self, tmp_path):
        repo = JSONRepository(
            data_file=str(tmp_path / "work" / "zdata.json"),
            template_file=str(tmp_path / "nowhere.json"),
        )
        try:
            with pytest.raises(NotFoundError):
                repo.initialize()
            assert not repo.has_working_copy
        finally:
            repo.close()

    def test_copy_failure(self, tmp_path, template_file):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        repo = JSONRepository(data_file=str(blocker / "zdata.json"), template_file=str(template_file))
        try:
            with pytest.raises(CopyFailedError):
                repo.initialize()
        finally:
            repo.close()

    def test_corrupted_working_copy(self, repository):
        repository.data_file.parent.mkdir(parents=True)
        repository.data_file.write_text("{ not json", encoding="utf-8")
        with pytest.raises(DecodeFailedError) as excinfo:
            repository.initialize()
        assert excinfo.value.reason is DecodeReason.CORRUPTED

    def test_working_copy_with_missing_field(self, repository, dataset_dict):
        del dataset_dict["categories"]
        repository.data_file.parent.mkdir(parents=True)
        repository.data_file.write_text(json.dumps(dataset_dict), encoding="utf-8")
        with pytest.raises(DecodeFailedError) as excinfo:
            repository.initialize()
        assert excinfo.value.reason is DecodeReason.MISSING_FIELD

    def test_malformed_template_fails_after_copy(self, tmp_path):
        template = tmp_path / "template.json"
        template.write_text(json.dumps({"user": {}}), encoding="utf-8")
        repo = JSONRepository(data_file=str(tmp_path / "work" / "zdata.json"), template_file=str(template))
        try:
            with pytest.raises(DecodeFailedError):
                repo.initialize()
        finally:
            repo.close()

    def test_utf8_bom_is_tolerated(self, repository, dataset_dict, dataset):
        repository.data_file.parent.mkdir(parents=True)
        repository.data_file.write_text(json.dumps(dataset_dict), encoding="utf-8-sig")
        assert repository.initialize() == dataset


class TestSave:
    """Synchronous and background saves."""

    def test_round_trip(self, repository):
        dataset = repository.initialize()
        dataset.words[0] = dataset.words[0].with_status(
            dataset.words[0].user_status.after_review(True, "2025-07-14")
        )
        dataset.user = replace(dataset.user, name="Renamed")

        repository.save(dataset)
        assert repository.initialize() == dataset

    def test_saved_file_is_utf8_json(self, repository):
        dataset = repository.initialize()
        dataset.user = replace(dataset.user, name="使用者")
        repository.save(dataset)
        text = repository.data_file.read_text(encoding="utf-8")
        assert "使用者" in text
        assert json.loads(text)["user"]["name"] == "使用者"

    def test_failed_save_keeps_previous_copy(self, repository, monkeypatch):
        dataset = repository.initialize()
        before = repository.data_file.read_bytes()

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        dataset.user = replace(dataset.user, name="Lost")
        with pytest.raises(WriteFailedError):
            repository.save(dataset)
        monkeypatch.undo()

        assert repository.data_file.read_bytes() == before
        leftovers = [p for p in repository.data_file.parent.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []

    def test_async_save_writes_snapshot(self, repository):
        dataset = repository.initialize()
        dataset.user = replace(dataset.user, name="Async")
        future = repository.save_async(dataset)

        # Later in-memory changes are not part of the submitted snapshot
        dataset.user = replace(dataset.user, name="Changed later")

        assert future.result(timeout=5) in (True, False)
        assert repository.flush(timeout=5)
        assert repository.initialize().user.name == "Async"

    def test_last_submitted_save_wins(self, repository):
        dataset = repository.initialize()
        futures = []
        for i in range(20):
            dataset.user = replace(dataset.user, name=f"Name {i}")
            futures.append(repository.save_async(dataset))

        assert repository.flush(timeout=5)
        assert all(f.exception() is None for f in futures)
        assert futures[-1].result() is True
        assert repository.initialize().user.name == "Name 19"

    def test_sync_save_is_not_overwritten_by_older_async_save(self, repository):
        dataset = repository.initialize()
        dataset.user = replace(dataset.user, name="Older")
        repository.save_async(dataset)
        dataset.user = replace(dataset.user, name="Newer")
        repository.save(dataset)

        assert repository.flush(timeout=5)
        assert repository.initialize().user.name == "Newer"

    def test_async_failure_is_reported_on_future(self, repository, monkeypatch):
        dataset = repository.initialize()

        def broken_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr(os, "replace", broken_replace)
        future = repository.save_async(dataset)
        with pytest.raises(WriteFailedError):
            future.result(timeout=5)
