"""Tests for the JSON formatter and writer."""

import json
import math
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from outport.errors import JsonFormattingError, ValidationError
from outport.models.options import JsonConfig, WriterOptions
from outport.writers import get_writer
from outport.writers.csv_writer import CsvWriter
from outport.writers.json_format import JsonFormatter
from outport.writers.json_writer import JsonWriter


@pytest.fixture
def users():
    return [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]


# ═══════════════════════════════════════════
# JsonFormatter Tests
# ═══════════════════════════════════════════


class TestJsonFormatter:
    def test_pretty_array(self, users):
        assert JsonFormatter().format(users) == json.dumps(users, indent=2)

    def test_compact_array(self, users):
        text = JsonFormatter(pretty_print=False).format(users)
        assert text == '[{"id":1,"name":"Alice"},{"id":2,"name":"Bob"}]'

    def test_zero_indent_is_compact(self, users):
        assert JsonFormatter(indent=0).format(users) == JsonFormatter(pretty_print=False).format(users)

    def test_non_array_context_one_record_per_line(self, users):
        text = JsonFormatter(pretty_print=False).format(users, is_array_context=False)
        assert text.splitlines() == ['{"id":1,"name":"Alice"}', '{"id":2,"name":"Bob"}']

    def test_format_item(self):
        assert JsonFormatter(indent=4).format_item({"a": 1}) == '{\n    "a": 1\n}'

    def test_datetime_values_use_iso_format(self):
        text = JsonFormatter(pretty_print=False).format_item({"at": datetime(2024, 5, 1, 12, 30)})
        assert text == '{"at":"2024-05-01T12:30:00"}'

    def test_non_ascii_kept(self):
        assert JsonFormatter(pretty_print=False).format_item({"name": "José"}) == '{"name":"José"}'

    def test_unserializable_raises(self):
        with pytest.raises(JsonFormattingError, match="Failed to format data as JSON"):
            JsonFormatter().format_item({"value": object()})

    @pytest.mark.parametrize("pretty_print", [True, False])
    def test_non_finite_float_raises(self, pretty_print):
        with pytest.raises(JsonFormattingError):
            JsonFormatter(pretty_print=pretty_print).format([{"v": math.inf}])


# ═══════════════════════════════════════════
# JsonWriter Tests
# ═══════════════════════════════════════════


class TestJsonWriterValidation:
    def test_wrong_extension(self):
        with pytest.raises(ValidationError, match="File extension must be .json"):
            JsonWriter(WriterOptions(type="json", file="out.csv"))

    def test_wrong_type(self):
        with pytest.raises(ValidationError, match="Invalid writer type for JsonWriter"):
            JsonWriter(WriterOptions(type="csv", file="out.json"))

    @pytest.mark.parametrize("indent", [-1, 11])
    def test_indent_out_of_range(self, indent):
        with pytest.raises(ValidationError, match="Indent must be between 0 and 10"):
            JsonWriter(WriterOptions(type="json", file="out.json", json=JsonConfig(indent=indent)))


class TestJsonWriter:
    def test_write_sync_pretty(self, users):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "users.json"
            writer = JsonWriter(WriterOptions(type="json", file=str(path)))

            assert writer.write_sync(users).success
            assert path.read_text(encoding="utf-8") == json.dumps(users, indent=2)

    @pytest.mark.asyncio
    async def test_write_async_compact(self, users):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "users.json"
            options = WriterOptions(type="json", file=str(path), json=JsonConfig(pretty_print=False))

            assert (await JsonWriter(options).write(users)).success
            assert path.read_text(encoding="utf-8") == (
                '[{"id":1,"name":"Alice"},{"id":2,"name":"Bob"}]'
            )

    def test_write_mode_replaces_array(self, users, memory_sink):
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=memory_sink)

        writer.write_sync(users)
        writer.write_sync([{"id": 3}])

        assert json.loads(memory_sink.files["out.json"]) == [{"id": 3}]

    def test_append_after_write_extends_array(self, users, memory_sink):
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=memory_sink)

        writer.write_sync(users)
        writer.append_sync({"id": 3, "name": "Carol"})

        assert json.loads(memory_sink.files["out.json"]) == users + [{"id": 3, "name": "Carol"}]

    @pytest.mark.asyncio
    async def test_append_across_writer_instances(self, users):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "users.json"
            await JsonWriter(WriterOptions(type="json", file=str(path))).write(users)

            appender = JsonWriter(WriterOptions(type="json", file=str(path), mode="append"))
            assert (await appender.append([{"id": 3, "name": "Carol"}])).success
            assert (await appender.append({"id": 4, "name": "Dan"})).success

            data = json.loads(path.read_text(encoding="utf-8"))
            assert [record["id"] for record in data] == [1, 2, 3, 4]

    def test_append_mode_write_extends_existing_file(self, users):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "users.json"
            path.write_text(json.dumps(users[:1]), encoding="utf-8")

            writer = JsonWriter(WriterOptions(type="json", file=str(path), mode="append"))
            assert writer.write_sync(users[1:]).success

            assert json.loads(path.read_text(encoding="utf-8")) == users

    def test_existing_single_object_becomes_array(self, make_sink):
        sink = make_sink()
        sink.files["out.json"] = '{"id": 1}'
        writer = JsonWriter(WriterOptions(type="json", file="out.json", mode="append"), sink=sink)

        writer.append_sync({"id": 2})

        assert json.loads(sink.files["out.json"]) == [{"id": 1}, {"id": 2}]

    def test_existing_file_with_bom(self, make_sink):
        sink = make_sink()
        sink.files["out.json"] = '\ufeff[{"id": 1}]'
        writer = JsonWriter(WriterOptions(type="json", file="out.json", mode="append"), sink=sink)

        assert writer.append_sync({"id": 2}).success
        assert json.loads(sink.files["out.json"]) == [{"id": 1}, {"id": 2}]

    def test_empty_existing_file_treated_as_empty_array(self, make_sink):
        sink = make_sink()
        sink.files["out.json"] = "  \n"
        writer = JsonWriter(WriterOptions(type="json", file="out.json", mode="append"), sink=sink)

        writer.append_sync({"id": 1})

        assert json.loads(sink.files["out.json"]) == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_invalid_existing_file_fails(self, make_sink):
        sink = make_sink()
        sink.files["out.json"] = "not json"
        writer = JsonWriter(WriterOptions(type="json", file="out.json", mode="append"), sink=sink)

        result = await writer.append({"id": 1})

        assert not result.success
        assert isinstance(result.error, JsonFormattingError)
        assert "Failed to parse existing JSON file" in str(result.error)
        assert sink.files["out.json"] == "not json"

    def test_existing_file_ignored_in_write_mode(self, make_sink):
        sink = make_sink()
        sink.files["out.json"] = "not json"
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=sink)

        assert writer.append_sync({"id": 1}).success
        assert json.loads(sink.files["out.json"]) == [{"id": 1}]

    def test_utf8_bom(self, users, memory_sink):
        options = WriterOptions(type="json", file="out.json", json=JsonConfig(include_utf8_bom=True))
        writer = JsonWriter(options, sink=memory_sink)

        writer.write_sync(users)
        writer.append_sync({"id": 3})

        content = memory_sink.files["out.json"]
        assert content.startswith("\ufeff[")
        assert content.count("\ufeff") == 1

    def test_empty_write_fails(self, memory_sink):
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=memory_sink)

        result = writer.write_sync([])

        assert not result.success
        assert "Cannot write empty data array" in str(result.error)
        assert memory_sink.calls == []

    @pytest.mark.asyncio
    async def test_empty_append_is_noop(self, memory_sink):
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=memory_sink)

        assert (await writer.append([])).success
        assert memory_sink.calls == []

    def test_failed_write_keeps_previous_records(self, users, make_sink):
        sink = make_sink(fail_on={"write"}, fail_after=1)
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=sink)

        assert writer.write_sync(users).success
        result = writer.append_sync({"id": 3})

        assert not result.success
        assert "Failed to write file" in str(result.error)
        assert writer.records == users

    def test_unserializable_record_fails_without_writing(self, memory_sink):
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=memory_sink)
        cyclic = {"id": 1}
        cyclic["self"] = cyclic

        result = writer.write_sync([cyclic])

        assert not result.success
        assert isinstance(result.error, JsonFormattingError)
        assert memory_sink.calls == []

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_floats_rejected(self, value, memory_sink):
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=memory_sink)

        result = writer.write_sync([{"v": value}])

        assert not result.success
        assert isinstance(result.error, JsonFormattingError)
        assert memory_sink.calls == []

    @pytest.mark.asyncio
    async def test_unencodable_text_is_formatting_error(self, users):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "users.json"
            path.write_text(json.dumps(users), encoding="utf-8")
            writer = JsonWriter(WriterOptions(type="json", file=str(path)))

            result = await writer.write([{"id": 1, "name": "bad\ud800"}])

            assert not result.success
            assert isinstance(result.error, JsonFormattingError)
            assert json.loads(path.read_text(encoding="utf-8")) == users

    def test_existing_file_not_utf8(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "users.json"
            path.write_bytes(b"[\xff\xfe]")
            writer = JsonWriter(WriterOptions(type="json", file=str(path), mode="append"))

            result = writer.append_sync({"id": 1})

            assert not result.success
            assert isinstance(result.error, JsonFormattingError)
            assert "Failed to parse existing JSON file" in str(result.error)
            assert path.read_bytes() == b"[\xff\xfe]"

    @pytest.mark.asyncio
    async def test_existing_file_not_utf8_async(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "users.json"
            path.write_bytes(b"[\xff\xfe]")
            writer = JsonWriter(WriterOptions(type="json", file=str(path), mode="append"))

            result = await writer.write([{"id": 1}])

            assert not result.success
            assert isinstance(result.error, JsonFormattingError)

    def test_empty_generator_write_fails(self, memory_sink):
        writer = JsonWriter(WriterOptions(type="json", file="out.json"), sink=memory_sink)

        result = writer.write_sync(record for record in [])

        assert not result.success
        assert isinstance(result.error, ValidationError)
        assert memory_sink.calls == []


# ═══════════════════════════════════════════
# get_writer Tests
# ═══════════════════════════════════════════


class TestGetWriter:
    def test_csv(self):
        assert isinstance(get_writer(WriterOptions(type="csv", file="out.csv")), CsvWriter)

    def test_json(self):
        assert isinstance(get_writer(WriterOptions(type="json", file="out.json")), JsonWriter)

    def test_injected_sink(self, memory_sink):
        writer = get_writer(WriterOptions(type="json", file="out.json"), sink=memory_sink)
        assert writer.sink is memory_sink

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            get_writer(WriterOptions(type="xml", file="out.xml"))
