"""
End-to-end test: a MediaWiki dump extracted with a YAML config, from file
discovery through JSON Lines output. Every scenario runs against a dump with
no namespace and against one in the MediaWiki export default namespace, as
real dumps are published.
"""

import sys
import os
base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '../'))
if base_dir not in sys.path:
    sys.path.insert(0, base_dir)

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from xml_records.config.config_manager import ConfigManager
from xml_records.output.page_outputs import JsonLinesPageOutput, ListPageOutput
from xml_records.processing.file_input import FileInput
from xml_records.processing.sequential_processor import SequentialProcessor


FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(params=["sample_01.xml", "sample_02_ns.xml"])
def dump(request):
    return FIXTURES / request.param


@pytest.fixture
def mediawiki_config(monkeypatch):
    for var in ("XML_RECORDS_PAGE_SIZE", "XML_RECORDS_DEFAULT_TIMEZONE",
                "XML_RECORDS_READ_CHUNK_SIZE", "XML_RECORDS_DEFAULT_TIMESTAMP_FORMAT"):
        monkeypatch.delenv(var, raising=False)
    return ConfigManager(FIXTURES).load_extraction_config("mediawiki_config.yml")


class TestMediaWikiExtraction:

    def test_two_pages_two_records(self, mediawiki_config, dump):
        output = ListPageOutput()
        result = SequentialProcessor(mediawiki_config, output).process_files(
            FileInput.from_paths([dump])
        )

        assert result.records_emitted == 2
        first, second = output.records

        assert first["id"] == 1
        assert first["title"] == "Wikipedia:アップロードログ 2004年4月"
        assert first["revision/text"] == "なんか書く"
        assert first["revision/timestamp"] == datetime(2004, 4, 30, 14, 46, tzinfo=timezone.utc)
        assert int(first["revision/timestamp"].timestamp()) == 1083336360

        assert second["id"] == 5
        assert second["title"] == "アンパサンド"
        assert second["revision/text"] == "アンパサンドとは\n「…と…」を意味する記号である。"
        assert int(second["revision/timestamp"].timestamp()) == 1449883580

    def test_nested_ids_do_not_override_page_id(self, mediawiki_config, dump):
        output = ListPageOutput()
        SequentialProcessor(mediawiki_config, output).process_files(
            FileInput.from_paths([dump])
        )
        # revision/id and contributor/id are deeper paths than the "id" column
        assert [r["id"] for r in output.records] == [1, 5]

    def test_jsonl_round_trip(self, mediawiki_config, dump, tmp_path):
        out = tmp_path / "pages.jsonl"
        SequentialProcessor(mediawiki_config, JsonLinesPageOutput(out)).process_files(
            FileInput.from_paths([dump])
        )

        lines = out.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[1]) == {
            "id": 5,
            "title": "アンパサンド",
            "revision/timestamp": "2015-12-12T01:26:20+00:00",
            "revision/text": "アンパサンドとは\n「…と…」を意味する記号である。",
        }

    def test_namespaced_and_plain_dumps_agree(self, mediawiki_config):
        output = ListPageOutput()
        SequentialProcessor(mediawiki_config, output).process_files(
            FileInput.from_paths([FIXTURES / "sample_01.xml", FIXTURES / "sample_02_ns.xml"])
        )
        assert len(output.records) == 4
        assert output.records[:2] == output.records[2:]
