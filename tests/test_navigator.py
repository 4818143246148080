"""
Artifact navigator tests

Loading rustdoc JSON and finding the crate root docs.
"""

import json

import pytest

from extract_readme.exceptions import ArtifactError, MissingDocsError
from extract_readme.lib.navigator import artifact_load, rootDocs_extract
from extract_readme.models.artifact import Crate


def artifact_write(path, root, index, **extra):
    path.write_text(json.dumps({"root": root, "index": index, **extra}), encoding="utf-8")
    return path


class TestArtifactLoad:
    """Reading and validating the JSON file"""

    def test_integer_ids(self, tmp_path):
        path = artifact_write(
            tmp_path / "crate.json",
            0,
            {"0": {"id": 0, "name": "mycrate", "docs": "Hello."}},
            format_version=39,
            crate_version="0.3.1",
        )
        crate = artifact_load(path)
        assert crate.format_version == 39
        assert crate.crate_version == "0.3.1"
        assert crate.item_get(0).name == "mycrate"

    def test_string_ids(self, tmp_path):
        path = artifact_write(
            tmp_path / "crate.json",
            "0:0:1572",
            {"0:0:1572": {"id": "0:0:1572", "name": "mycrate", "docs": "Hello."}},
        )
        crate = artifact_load(path)
        assert crate.item_get("0:0:1572").docs == "Hello."

    def test_unknown_fields_ignored(self, tmp_path):
        path = artifact_write(
            tmp_path / "crate.json",
            1,
            {"1": {"id": 1, "name": "c", "docs": "d", "inner": {"module": {}}, "visibility": "public"}},
            paths={},
            external_crates={},
        )
        assert artifact_load(path).item_get(1).docs == "d"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArtifactError, match="couldn't open"):
            artifact_load(tmp_path / "absent.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "crate.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ArtifactError, match="couldn't deserialize"):
            artifact_load(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "crate.json"
        path.write_text(json.dumps({"index": []}), encoding="utf-8")
        with pytest.raises(ArtifactError):
            artifact_load(path)


class TestRootDocs:
    """Root documentation lookup"""

    def test_docs_returned(self):
        crate = Crate(root=0, index={"0": {"id": 0, "docs": "Does a thing."}})
        assert rootDocs_extract(crate) == "Does a thing."

    def test_missing_docs(self):
        crate = Crate(root=0, index={"0": {"id": 0, "docs": None}})
        with pytest.raises(MissingDocsError, match="root does not have any documentation"):
            rootDocs_extract(crate)

    def test_empty_docs_are_missing(self):
        crate = Crate(root=0, index={"0": {"id": 0, "docs": ""}})
        with pytest.raises(MissingDocsError):
            rootDocs_extract(crate)

    def test_root_not_in_index(self):
        crate = Crate(root=5, index={"0": {"id": 0, "docs": "x"}})
        with pytest.raises(ArtifactError):
            rootDocs_extract(crate)
