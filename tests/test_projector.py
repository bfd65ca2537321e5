"""Tests for response projection."""

import pytest

from conftest import instance
from orchestrator_client.envelope import Envelope, RawArray, RawObject, RawScalar
from orchestrator_client.exceptions import ProjectionError
from orchestrator_client.projector import project
from orchestrator_client.registry import Extractor


def envelope(details) -> Envelope:
    return Envelope(code="OK", message="", details=details)


class TestKeyExtraction:
    """Key, MasterKey and SuccessorKey extraction."""

    def test_key_from_envelope(self):
        result = envelope({"Key": {"Hostname": "h", "Port": 3306}})
        assert project(Extractor.KEY, result) == ["h:3306"]

    def test_key_from_raw_object(self):
        assert project(Extractor.KEY, RawObject(instance("db-1", 3307))) == ["db-1:3307"]

    def test_bare_key_details(self):
        """Some endpoints answer with the key itself as Details."""
        assert project(Extractor.KEY, envelope({"Hostname": "db-1", "Port": 3306})) == ["db-1:3306"]

    def test_master_key(self):
        result = RawObject(instance("db-2", master=("db-1", 3306)))
        assert project(Extractor.MASTER_KEY, result) == ["db-1:3306"]

    def test_successor_key(self):
        result = envelope({"SuccessorKey": {"Hostname": "db-2", "Port": 3306}})
        assert project(Extractor.SUCCESSOR_KEY, result) == ["db-2:3306"]

    def test_null_details_gives_no_output(self):
        assert project(Extractor.KEY, envelope(None)) == []

    def test_missing_key_raises(self):
        with pytest.raises(ProjectionError):
            project(Extractor.MASTER_KEY, RawObject({"Key": {"Hostname": "h", "Port": 1}}))


class TestKeysList:
    """KeysList keeps source order."""

    def test_order_preserved(self):
        result = RawArray([instance("c"), instance("a"), instance("b", 3307)])
        assert project(Extractor.KEYS_LIST, result) == ["c:3306", "a:3306", "b:3307"]

    def test_from_envelope_details(self):
        result = envelope([instance("a"), instance("b")])
        assert project(Extractor.KEYS_LIST, result) == ["a:3306", "b:3306"]

    def test_bare_keys(self):
        result = RawArray([{"Hostname": "a", "Port": 3306}])
        assert project(Extractor.KEYS_LIST, result) == ["a:3306"]

    def test_not_a_list_raises(self):
        with pytest.raises(ProjectionError, match="expected a list"):
            project(Extractor.KEYS_LIST, RawObject(instance("a")))


class TestComposite:
    """Composite renders instance<master on one line."""

    def test_key_below_master(self):
        result = envelope(instance("db-3", master=("db-2", 3306)))
        assert project(Extractor.COMPOSITE, result) == ["db-3:3306<db-2:3306"]


class TestRawAndDetails:
    """Raw and Details emit JSON values textually."""

    def test_raw_scalar_unquoted(self):
        assert project(Extractor.RAW, RawScalar("10.0.0.1:10008")) == ["10.0.0.1:10008"]

    def test_raw_array_as_json(self):
        lines = project(Extractor.RAW, RawArray(["a"]))
        assert "\n".join(lines) == '[\n  "a"\n]'

    def test_raw_envelope_keeps_code(self):
        lines = project(Extractor.RAW, envelope(True))
        assert '"Code": "OK"' in "\n".join(lines)

    def test_details_string_split_into_lines(self):
        topology = "db-1:3306 [0s,ok]\n+ db-2:3306 [0s,ok]"
        assert project(Extractor.DETAILS, envelope(topology)) == [
            "db-1:3306 [0s,ok]",
            "+ db-2:3306 [0s,ok]",
        ]

    def test_details_null(self):
        assert project(Extractor.DETAILS, envelope(None)) == []


class TestOtherExtractors:
    """Strings, Field, ClusterAliases, Analysis and None."""

    def test_strings(self):
        assert project(Extractor.STRINGS, RawArray(["c1", "c2"])) == ["c1", "c2"]

    def test_field(self):
        result = RawObject({"ClusterName": "c1", "ClusterAlias": "main"})
        assert project(Extractor.FIELD, result, "ClusterAlias") == ["main"]

    def test_field_missing_is_empty(self):
        assert project(Extractor.FIELD, RawObject({}), "GtidErrant") == []

    def test_cluster_aliases(self):
        result = RawArray([
            {"ClusterName": "db-1:3306", "ClusterAlias": "main"},
            {"ClusterName": "db-9:3306", "ClusterAlias": ""},
        ])
        assert project(Extractor.CLUSTER_ALIASES, result) == ["db-1:3306,main", "db-9:3306,"]

    def test_analysis_skips_no_problem(self):
        result = envelope([
            {
                "AnalyzedInstanceKey": {"Hostname": "db-1", "Port": 3306},
                "ClusterDetails": {"ClusterName": "c1"},
                "Analysis": "DeadMaster",
            },
            {
                "AnalyzedInstanceKey": {"Hostname": "db-5", "Port": 3306},
                "ClusterDetails": {"ClusterName": "c2"},
                "Analysis": "NoProblem",
            },
        ])
        assert project(Extractor.ANALYSIS, result) == ["db-1:3306 (cluster c1): DeadMaster"]

    def test_none(self):
        assert project(Extractor.NONE, envelope({"anything": 1})) == []


class TestMalformedPayloads:
    """Payloads of the wrong shape raise ProjectionError."""

    def test_key_without_port(self):
        with pytest.raises(ProjectionError):
            project(Extractor.KEY, envelope({"Key": {"Hostname": "h"}}))

    def test_list_item_without_port(self):
        with pytest.raises(ProjectionError):
            project(Extractor.KEYS_LIST, RawArray([{"Key": {"Hostname": "h"}}]))

    def test_cluster_aliases_non_object_items(self):
        with pytest.raises(ProjectionError, match="str"):
            project(Extractor.CLUSTER_ALIASES, RawArray(["c1"]))

    def test_analysis_non_object_items(self):
        with pytest.raises(ProjectionError):
            project(Extractor.ANALYSIS, RawArray(["x"]))

    def test_analysis_without_key(self):
        with pytest.raises(ProjectionError):
            project(Extractor.ANALYSIS, RawArray([{"Analysis": "DeadMaster"}]))

    def test_analysis_tolerates_odd_cluster_details(self):
        result = RawArray([{
            "AnalyzedInstanceKey": {"Hostname": "db-1", "Port": 3306},
            "ClusterDetails": "c1",
            "ClusterName": "c1",
            "Analysis": "DeadMaster",
        }])
        assert project(Extractor.ANALYSIS, result) == ["db-1:3306 (cluster c1): DeadMaster"]
