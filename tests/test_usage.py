import json

from formulasnap.usage import UsageRecord, UsageTracker, get_usage_tracker


def _tracker(tmp_path, day="2026-03-01"):
    clock = {"today": day}
    tracker = UsageTracker(tmp_path / "usage.json", today=lambda: clock["today"])
    return tracker, clock


class TestUsageRecord:
    def test_from_json(self):
        record = UsageRecord.from_json({"date": "2026-03-01", "models": {"latex_ocr": 3}})
        assert record.date == "2026-03-01"
        assert record.counts == {"latex_ocr": 3}

    def test_from_json_drops_bad_counts(self):
        record = UsageRecord.from_json({"date": "d", "models": {"a": -1, "b": "2", "c": True, "d": 4}})
        assert record.counts == {"d": 4}

    def test_from_json_garbage(self):
        assert UsageRecord.from_json([1, 2]) == UsageRecord()


class TestUsageTracker:
    def test_no_file_means_zero(self, tmp_path):
        tracker, _ = _tracker(tmp_path)
        assert tracker.usage_today("latex_ocr") == 0

    def test_increment(self, tmp_path):
        tracker, _ = _tracker(tmp_path)
        tracker.increment("latex_ocr")
        tracker.increment("latex_ocr")
        tracker.increment("latex_ocr_turbo")
        assert tracker.usage_today("latex_ocr") == 2
        assert tracker.usage_today("latex_ocr_turbo") == 1

    def test_file_format(self, tmp_path):
        tracker, _ = _tracker(tmp_path)
        tracker.increment("latex_ocr")
        saved = json.loads((tmp_path / "usage.json").read_text(encoding="utf-8"))
        assert saved == {"date": "2026-03-01", "models": {"latex_ocr": 1}}

    def test_new_day_resets_counts(self, tmp_path):
        tracker, clock = _tracker(tmp_path, day="2026-03-01")
        for _ in range(5):
            tracker.increment("latex_ocr")
        clock["today"] = "2026-03-02"
        assert tracker.usage_today("latex_ocr") == 0
        tracker.increment("latex_ocr")
        assert tracker.usage_today("latex_ocr") == 1
        saved = json.loads((tmp_path / "usage.json").read_text(encoding="utf-8"))
        assert saved == {"date": "2026-03-02", "models": {"latex_ocr": 1}}

    def test_usage_by_model(self, tmp_path):
        tracker, _ = _tracker(tmp_path)
        tracker.increment("simpletex_ocr")
        assert tracker.usage_by_model(["latex_ocr", "simpletex_ocr"]) == {"latex_ocr": 0, "simpletex_ocr": 1}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        (tmp_path / "usage.json").write_text("{not json", encoding="utf-8")
        tracker, _ = _tracker(tmp_path)
        assert tracker.usage_today("latex_ocr") == 0
        tracker.increment("latex_ocr")
        assert tracker.usage_today("latex_ocr") == 1

    def test_invalid_utf8_reads_as_empty(self, tmp_path):
        (tmp_path / "usage.json").write_bytes(b"\xff\xfe garbage")
        tracker, _ = _tracker(tmp_path)
        assert tracker.usage_today("latex_ocr") == 0
        tracker.increment("latex_ocr")
        assert tracker.usage_today("latex_ocr") == 1

    def test_stale_read_leaves_file_untouched(self, tmp_path):
        tracker, clock = _tracker(tmp_path, day="2026-03-01")
        tracker.increment("latex_ocr")
        before = (tmp_path / "usage.json").read_bytes()
        clock["today"] = "2026-03-02"
        assert tracker.usage_today("latex_ocr") == 0
        assert tracker.usage_by_model(["latex_ocr"]) == {"latex_ocr": 0}
        assert (tmp_path / "usage.json").read_bytes() == before


def test_get_usage_tracker_uses_data_dir(tmp_path):
    assert get_usage_tracker().path == tmp_path / "usage.json"
    assert get_usage_tracker() is get_usage_tracker()
