"""Tests for the command table."""

import pytest

from orchestrator_client.exceptions import UnsupportedCommandError
from orchestrator_client.registry import (
    COMMANDS,
    Arity,
    CommandSpec,
    Extractor,
    commands_by_section,
    lookup,
    rewrite_legacy_name,
)


class TestLookup:
    """Tests for lookup()."""

    def test_known_command(self):
        spec = lookup("relocate")
        assert spec.path == "relocate/{instance}/{destination}"
        assert spec.extractor == Extractor.COMPOSITE

    def test_unknown_command(self):
        with pytest.raises(UnsupportedCommandError, match="no-such-command"):
            lookup("no-such-command")

    @pytest.mark.parametrize(
        "legacy, modern",
        [
            ("start-slave", "start-replica"),
            ("stop-slave-nice", "stop-replica-nice"),
            ("which-slaves", "which-replicas"),
            ("relocate-slaves", "relocate-replicas"),
            ("enable-semi-sync-slave", "enable-semi-sync-replica"),
        ],
    )
    def test_legacy_names(self, legacy, modern):
        assert lookup(legacy) is lookup(modern)

    def test_rewrite_leaves_modern_names(self):
        assert rewrite_legacy_name("take-master") == "take-master"


class TestTable:
    """Invariants of the static table."""

    def test_size(self):
        assert len(COMMANDS) >= 80

    def test_pairwise_commands_require_destination(self):
        for spec in COMMANDS.values():
            if spec.arity == Arity.PAIRWISE:
                assert "destination" in spec.required_params(), spec.name

    def test_singular_commands_take_no_destination(self):
        for spec in COMMANDS.values():
            if spec.arity == Arity.SINGULAR:
                assert "destination" not in spec.all_params(), spec.name

    def test_arity_not_inferred_from_name(self):
        assert lookup("move-up").arity == Arity.SINGULAR
        assert lookup("move-below").arity == Arity.PAIRWISE
        assert lookup("move-up-replicas").arity == Arity.SINGULAR

    def test_every_command_has_description(self):
        assert all(spec.description for spec in COMMANDS.values())

    def test_sections_cover_table(self):
        grouped = commands_by_section()
        assert sum(len(specs) for specs in grouped.values()) == len(COMMANDS)
        assert "relocation" in grouped
        assert "raft" in grouped


class TestCommandSpec:
    """Tests for CommandSpec parameter introspection and validation."""

    def test_required_params_order(self):
        spec = lookup("begin-downtime")
        assert spec.required_params() == ("instance", "owner", "reason")
        assert spec.all_params() == ("instance", "owner", "reason", "duration")

    def test_query_params_are_required(self):
        assert lookup("search").required_params() == ("query",)
        assert lookup("ack-cluster-recoveries").required_params() == ("cluster", "reason")

    def test_pairwise_without_destination_rejected(self):
        with pytest.raises(ValueError, match="pairwise"):
            CommandSpec(name="bad", path="bad/{instance}", arity=Arity.PAIRWISE)

    def test_field_extractor_needs_field(self):
        with pytest.raises(ValueError, match="field"):
            CommandSpec(name="bad", path="bad", extractor=Extractor.FIELD)

    def test_needs_path_or_handler(self):
        with pytest.raises(ValueError, match="path or a handler"):
            CommandSpec(name="bad")

    def test_frozen(self):
        with pytest.raises(ValueError):
            lookup("relocate").path = "other"
