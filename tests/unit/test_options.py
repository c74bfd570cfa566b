"""Tests for tallylog.config.options module."""

import pytest
from pydantic import ValidationError

from tallylog.config.options import (
    OPTIONS,
    OptionKind,
    describe,
    find_option,
    is_reserved,
    normalize_key,
)
from tallylog.config.resolver import ResolvedConfig


class TestDescribe:
    def test_declaration_order_is_stable(self):
        assert describe() == describe()
        names = [option.name for option in describe()]
        assert names[:5] == ["PassLabel", "FailLabel", "NoneLabel", "SkipLabel", "NotFoundLabel"]
        assert names[-1] == "TimestampFormat"

    def test_names_are_unique(self):
        names = [option.name for option in describe()]
        assert len(names) == len(set(names))

    @pytest.mark.parametrize(
        ("name", "kind", "default"),
        [
            ("PassLabel", OptionKind.STRING, "✅"),
            ("FailLabel", OptionKind.STRING, "🛑"),
            ("NoneLabel", OptionKind.STRING, "❓"),
            ("SkipLabel", OptionKind.STRING, "🚫"),
            ("NotFoundLabel", OptionKind.STRING, "🤷"),
            ("NoColor", OptionKind.BOOL, False),
            ("Theme", OptionKind.STRING, "default"),
            ("HighlightSlowTests", OptionKind.BOOL, True),
            ("SlowTestThresholdMs", OptionKind.INT, 1000),
            ("ShowTotals", OptionKind.BOOL, False),
            ("OutputFailuresInline", OptionKind.BOOL, False),
            ("ShowHelp", OptionKind.BOOL, True),
            ("LogPrefix", OptionKind.STRING, ""),
            ("TestNamePrefix", OptionKind.STRING, ""),
            ("SummaryStartMarker", OptionKind.STRING, None),
            ("SummaryCompleteMarker", OptionKind.STRING, None),
            ("FailureStartMarker", OptionKind.STRING, None),
            ("FailureCompleteMarker", OptionKind.STRING, None),
            ("SlowSummaryStartMarker", OptionKind.STRING, None),
            ("SlowSummaryCompleteMarker", OptionKind.STRING, None),
            ("SummaryTotalsStartMarker", OptionKind.STRING, None),
            ("SummaryTotalsCompleteMarker", OptionKind.STRING, None),
            ("FailureIndexPlaceholder", OptionKind.STRING, None),
            ("SlowIndexPlaceholder", OptionKind.STRING, None),
            ("MaxSlowTestsToDisplay", OptionKind.INT, 10),
            ("ShowTimestamps", OptionKind.BOOL, False),
        ],
    )
    def test_descriptor_table(self, name, kind, default):
        option = find_option(name)
        assert option is not None
        assert option.kind is kind
        assert option.default == default
        assert option.help

    def test_every_descriptor_has_a_config_field(self):
        config = ResolvedConfig()
        for option in OPTIONS:
            assert config.value_of(option) == option.default

    def test_config_fields_come_from_descriptors(self):
        fields = ResolvedConfig.model_fields

        assert set(fields) == {option.field for option in OPTIONS} | {"explicit"}
        for option in OPTIONS:
            assert fields[option.field].default == option.default

    def test_config_is_frozen_and_typed(self):
        config = ResolvedConfig(slow_test_threshold_ms=250, summary_start_marker=None)

        assert config.slow_test_threshold_ms == 250
        with pytest.raises(ValidationError):
            config.show_totals = True
        with pytest.raises(ValidationError):
            ResolvedConfig(slow_test_threshold_ms="fast")

    def test_env_name_is_upper_snake_with_prefix(self):
        assert find_option("SlowTestThresholdMs").env_name == "TALLYLOG_SLOW_TEST_THRESHOLD_MS"
        assert find_option("PassLabel").env_name == "TALLYLOG_PASS_LABEL"


class TestNormalizeKey:
    @pytest.mark.parametrize(
        "key",
        ["PassLabel", "passlabel", "pass_label", "pass-label", "PASS.LABEL", "Pass_Label"],
    )
    def test_separator_and_case_insensitive(self, key):
        assert normalize_key(key) == "passlabel"

    def test_strips_prefix_case_insensitively(self):
        assert normalize_key("tallylog_show_totals", "TALLYLOG_") == "showtotals"
        assert normalize_key("TALLYLOG_SHOW_TOTALS", "TALLYLOG_") == "showtotals"

    def test_keeps_key_without_prefix(self):
        assert normalize_key("ShowTotals", "TALLYLOG_") == "showtotals"

    def test_find_option_unknown(self):
        assert find_option("foo") is None

    def test_debug_is_reserved(self):
        assert is_reserved("debug")
        assert is_reserved("TALLYLOG_DEBUG", "TALLYLOG_")
        assert not is_reserved("ShowHelp")
        assert find_option("debug") is None
