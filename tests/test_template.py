"""
Tests for the template model, validator and loader.

Tests cover:
- Template, Phrase and ReharmZone models
- Validation checks and their order
- YAML/JSON loading and dumping
- The built-in template library
"""

import json
from pathlib import Path

import pytest

from chuk_mcp_harmony.core import CadenceLabel
from chuk_mcp_harmony.models import Phrase, ReharmZone, Template
from chuk_mcp_harmony.templates import (
    TemplateErrorKind,
    TemplateLoader,
    TemplateLoadError,
    TemplateValidationError,
    validate,
    validate_template,
)


def make_template(
    bars: int = 8,
    phrases: list[Phrase] | None = None,
    tension_curve: list[float] | None = None,
    reharm_zones: list[ReharmZone] | None = None,
) -> Template:
    """Build a template, defaulting to one phrase covering every bar."""
    if phrases is None:
        phrases = [Phrase(name="A", start_bar=0, length=bars, cadence="perfect")]
    if tension_curve is None:
        tension_curve = [0.5] * bars
    return Template(
        id="test",
        bars=bars,
        phrases=phrases,
        tension_curve=tension_curve,
        reharm_zones=reharm_zones or [],
    )


class TestTemplateModel:
    """Tests for the template models."""

    def test_defaults(self) -> None:
        """Version defaults to 1 and schema to template/v1."""
        template = make_template()
        assert template.version == 1
        assert template.schema_version == "template/v1"

    def test_schema_alias(self) -> None:
        """The schema field is populated by its alias."""
        template = Template.model_validate(
            {"schema": "template/v1", "id": "x", "bars": 4, "phrases": [], "tension_curve": []}
        )
        assert template.schema_version == "template/v1"

    def test_version_must_be_positive(self) -> None:
        """Version 0 is rejected."""
        with pytest.raises(ValueError):
            Template(id="x", version=0, bars=4)

    def test_frozen(self) -> None:
        """Templates are immutable."""
        template = make_template()
        with pytest.raises(ValueError):
            template.bars = 16  # type: ignore[misc]

    def test_phrase_accepts_cadence_enum(self) -> None:
        """Cadence members are stored as their string value."""
        phrase = Phrase(name="A", start_bar=0, length=4, cadence=CadenceLabel.PLAGAL)
        assert phrase.cadence == "plagal"
        assert phrase.cadence_label == CadenceLabel.PLAGAL
        assert phrase.end_bar == 4

    def test_reharm_risk_clamped(self) -> None:
        """Out-of-range risk is clamped, not rejected."""
        assert ReharmZone(start_bar=0, end_bar=2, risk=1.7).risk == 1.0
        assert ReharmZone(start_bar=0, end_bar=2, risk=-0.3).risk == 0.0

    def test_reharm_zone_covers_half_open(self) -> None:
        """Zones cover [start_bar, end_bar)."""
        zone = ReharmZone(start_bar=4, end_bar=8, risk=0.5)
        assert zone.covers(4)
        assert zone.covers(7)
        assert not zone.covers(8)
        assert not zone.covers(3)

    def test_summary(self, eight_bar_template: Template) -> None:
        """Summaries count phrases."""
        summary = eight_bar_template.summary()
        assert summary.id == "eight_bar"
        assert summary.bars == 8
        assert summary.phrases == 2


class TestValidator:
    """Tests for template validation."""

    def test_valid_template(self, eight_bar_template: Template) -> None:
        """A well-formed template passes."""
        result = validate_template(eight_bar_template)
        assert result.is_valid
        assert bool(result)
        validate(eight_bar_template)

    @pytest.mark.parametrize("bars", [3, 65])
    def test_bars_out_of_range(self, bars: int) -> None:
        """Bar counts outside 4-64 fail."""
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(make_template(bars=bars))
        assert exc_info.value.kind == TemplateErrorKind.BARS_OUT_OF_RANGE

    @pytest.mark.parametrize("bars", [4, 64])
    def test_bars_at_limits(self, bars: int) -> None:
        """4 and 64 bars are both allowed."""
        validate(make_template(bars=bars))

    def test_tension_curve_length_mismatch(self) -> None:
        """An 11-entry curve on a 12-bar template fails."""
        template = make_template(bars=12, tension_curve=[0.5] * 11)
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(template)
        assert exc_info.value.kind == TemplateErrorKind.TENSION_CURVE_LENGTH_MISMATCH

    def test_tension_out_of_range(self) -> None:
        """Tension values outside [0, 1] fail."""
        curve = [0.5] * 8
        curve[3] = 1.2
        result = validate_template(make_template(tension_curve=curve))
        assert result.kinds == [TemplateErrorKind.TENSION_OUT_OF_RANGE]
        assert result.first is not None
        assert result.first.location == "tension_curve/3"

    def test_tension_nan_fails(self) -> None:
        """NaN is not a tension."""
        curve = [0.5] * 8
        curve[0] = float("nan")
        result = validate_template(make_template(tension_curve=curve))
        assert TemplateErrorKind.TENSION_OUT_OF_RANGE in result.kinds

    def test_phrase_gap(self) -> None:
        """A gap between phrases fails."""
        template = make_template(
            phrases=[
                Phrase(name="A", start_bar=0, length=3),
                Phrase(name="B", start_bar=4, length=4, cadence="perfect"),
            ]
        )
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(template)
        assert exc_info.value.kind == TemplateErrorKind.NON_CONTIGUOUS_PHRASES

    def test_phrase_overlap(self) -> None:
        """Overlapping phrases fail."""
        template = make_template(
            phrases=[
                Phrase(name="A", start_bar=0, length=5),
                Phrase(name="B", start_bar=4, length=4, cadence="perfect"),
            ]
        )
        result = validate_template(template)
        assert TemplateErrorKind.NON_CONTIGUOUS_PHRASES in result.kinds

    def test_phrases_short_of_section(self) -> None:
        """Phrases must reach the last bar."""
        template = make_template(phrases=[Phrase(name="A", start_bar=0, length=6)])
        result = validate_template(template)
        assert result.kinds == [TemplateErrorKind.NON_CONTIGUOUS_PHRASES]

    def test_first_phrase_must_start_at_zero(self) -> None:
        """Coverage starts at bar 0."""
        template = make_template(phrases=[Phrase(name="A", start_bar=1, length=7)])
        result = validate_template(template)
        assert TemplateErrorKind.NON_CONTIGUOUS_PHRASES in result.kinds

    def test_no_phrases(self) -> None:
        """A template without phrases covers nothing."""
        template = make_template(phrases=[])
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(template)
        assert exc_info.value.kind == TemplateErrorKind.NON_CONTIGUOUS_PHRASES

    def test_zero_length_phrase(self) -> None:
        """Zero-length phrases fail."""
        template = make_template(
            phrases=[
                Phrase(name="A", start_bar=0, length=8),
                Phrase(name="empty", start_bar=8, length=0),
            ]
        )
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(template)
        assert exc_info.value.kind == TemplateErrorKind.ZERO_LENGTH_PHRASE

    def test_unknown_cadence(self) -> None:
        """Unrecognized cadence labels fail."""
        template = make_template(
            phrases=[Phrase(name="A", start_bar=0, length=8, cadence="authentic")]
        )
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(template)
        assert exc_info.value.kind == TemplateErrorKind.UNKNOWN_CADENCE_LABEL
        assert "authentic" in str(exc_info.value)

    @pytest.mark.parametrize(
        ("start_bar", "end_bar"),
        [(-1, 4), (4, 4), (6, 2), (4, 9)],
    )
    def test_invalid_reharm_range(self, start_bar: int, end_bar: int) -> None:
        """Zones must satisfy 0 <= start < end <= bars."""
        template = make_template(
            reharm_zones=[ReharmZone(start_bar=start_bar, end_bar=end_bar, risk=0.5)]
        )
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(template)
        assert exc_info.value.kind == TemplateErrorKind.INVALID_REHARM_RANGE

    def test_zone_may_end_at_last_bar(self) -> None:
        """end_bar == bars is inside the section."""
        validate(make_template(reharm_zones=[ReharmZone(start_bar=4, end_bar=8, risk=0.5)]))

    def test_first_failure_wins(self) -> None:
        """Check order decides the reported kind; every issue is still listed."""
        template = make_template(
            bars=3,
            phrases=[Phrase(name="A", start_bar=0, length=3, cadence="bogus")],
            tension_curve=[0.5, 0.5],
        )
        with pytest.raises(TemplateValidationError) as exc_info:
            validate(template)
        error = exc_info.value
        assert error.kind == TemplateErrorKind.BARS_OUT_OF_RANGE
        assert [issue.kind for issue in error.issues] == [
            TemplateErrorKind.BARS_OUT_OF_RANGE,
            TemplateErrorKind.TENSION_CURVE_LENGTH_MISMATCH,
            TemplateErrorKind.UNKNOWN_CADENCE_LABEL,
        ]

    def test_validation_error_is_value_error(self) -> None:
        """Callers may catch ValueError."""
        with pytest.raises(ValueError):
            validate(make_template(bars=2))

    def test_issue_code(self) -> None:
        """Issue codes are the kind's value."""
        result = validate_template(make_template(bars=2))
        assert result.first is not None
        assert result.first.code == "BARS_OUT_OF_RANGE"
        assert "BARS_OUT_OF_RANGE" in str(result)


class TestTemplateLoader:
    """Tests for loading and dumping template documents."""

    def test_load_flat_yaml(self) -> None:
        """Load the flat document layout."""
        text = """
id: tiny
version: 2
bars: 4
phrases:
  - {name: A, start_bar: 0, length: 4, cadence: perfect}
tension_curve: [0.1, 0.3, 0.6, 0.2]
"""
        template = TemplateLoader().load_string(text)
        assert template.id == "tiny"
        assert template.version == 2
        assert template.phrases[0].cadence_label == CadenceLabel.PERFECT
        validate(template)

    def test_load_nested_metadata(self) -> None:
        """Load the nested metadata layout."""
        text = """
metadata:
  id: nested
  version: 3
  phrases:
    - {name: A, start_bar: 0, length: 4, cadence: half}
bars: 4
tension_curve: [0.1, 0.3, 0.6, 0.7]
"""
        template = TemplateLoader().load_string(text)
        assert template.id == "nested"
        assert template.version == 3
        assert len(template.phrases) == 1

    def test_load_json(self) -> None:
        """JSON is valid YAML, so JSON documents load too."""
        document = {
            "id": "from_json",
            "bars": 4,
            "phrases": [{"name": "A", "start_bar": 0, "length": 4, "cadence": "none"}],
            "tension_curve": [0.2, 0.2, 0.2, 0.2],
        }
        template = TemplateLoader().load_string(json.dumps(document))
        assert template.id == "from_json"

    def test_missing_zone_risk_defaults(self) -> None:
        """Zones without a risk get the default."""
        text = """
id: zones
bars: 4
phrases: [{name: A, start_bar: 0, length: 4}]
tension_curve: [0.1, 0.1, 0.1, 0.1]
reharm_zones: [{start_bar: 0, end_bar: 2}]
"""
        template = TemplateLoader().load_string(text)
        assert template.reharm_zones[0].risk == 0.5

    @pytest.mark.parametrize("template_id", ["", "has space", "slash/id", "dot.id"])
    def test_invalid_id(self, template_id: str) -> None:
        """Ids must be file-name safe."""
        document = {"id": template_id, "bars": 4, "tension_curve": [0.1] * 4}
        with pytest.raises(TemplateLoadError):
            TemplateLoader().from_dict(document)

    def test_not_a_mapping(self) -> None:
        """A YAML list is not a template."""
        with pytest.raises(TemplateLoadError):
            TemplateLoader().load_string("- 1\n- 2\n")

    def test_malformed_yaml(self) -> None:
        """Unparseable text raises TemplateLoadError."""
        with pytest.raises(TemplateLoadError):
            TemplateLoader().load_string("id: [unclosed")

    def test_missing_bars(self) -> None:
        """Model errors surface as TemplateLoadError."""
        with pytest.raises(TemplateLoadError):
            TemplateLoader().from_dict({"id": "no_bars"})

    def test_unsupported_extension(self, temp_dir: Path) -> None:
        """Only .yaml, .yml and .json are read."""
        path = temp_dir / "template.txt"
        path.write_text("id: x\n")
        with pytest.raises(TemplateLoadError):
            TemplateLoader().load_file(path)

    @pytest.mark.parametrize("suffix", [".yaml", ".json"])
    def test_dump_and_reload(
        self, temp_dir: Path, eight_bar_template: Template, suffix: str
    ) -> None:
        """Dumped templates load back equal."""
        loader = TemplateLoader()
        path = loader.dump(eight_bar_template, temp_dir / f"eight_bar{suffix}")
        assert path.exists()
        assert loader.load_file(path) == eight_bar_template

    def test_dump_json_is_json(self, temp_dir: Path, eight_bar_template: Template) -> None:
        """A .json dump is real JSON."""
        path = TemplateLoader().dump(eight_bar_template, temp_dir / "t.json")
        data = json.loads(path.read_text())
        assert data["id"] == "eight_bar"
        assert data["phrases"][0]["cadence"] == "half"

    def test_iter_directory(self, temp_dir: Path) -> None:
        """Directory listing filters by extension and sorts by name."""
        for name in ("b.yaml", "a.json", "c.yml", "notes.txt"):
            (temp_dir / name).write_text("id: x\n")
        names = [path.name for path in TemplateLoader().iter_directory(temp_dir)]
        assert names == ["a.json", "b.yaml", "c.yml"]

    def test_iter_missing_directory(self, temp_dir: Path) -> None:
        """A missing directory has no templates."""
        assert TemplateLoader().iter_directory(temp_dir / "missing") == []


class TestBuiltinLibrary:
    """Tests for the shipped templates."""

    @pytest.mark.parametrize(
        ("filename", "bars"),
        [
            ("jazz_aaba_v1.yaml", 32),
            ("blues_12bar_v1.yaml", 12),
            ("pop_verse_chorus_v1.yaml", 16),
            ("ballad_aaba_16_v1.yaml", 16),
        ],
    )
    def test_builtin_templates_valid(self, library_path: Path, filename: str, bars: int) -> None:
        """Every shipped template loads and validates."""
        template = TemplateLoader().load_file(library_path / filename)
        assert template.bars == bars
        assert template.id == filename.removesuffix(".yaml")
        validate(template)

    def test_jazz_bridge_hint(self, jazz_template: Template) -> None:
        """The bridge carries its modulation hint verbatim."""
        bridge = next(phrase for phrase in jazz_template.phrases if phrase.name == "B")
        assert bridge.modulation_hint == "IV"
