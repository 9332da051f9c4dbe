"""Tests for exercise-name normalization and store keys."""

from __future__ import annotations

from uuid import UUID

import pytest

from progression_engine.normalizer import make_store_key, normalize


class TestNormalize:
    def test_trims_and_lowercases(self):
        assert normalize("  Barbell Back Squat  ") == "barbell back squat"

    def test_collapses_internal_space_runs(self):
        assert normalize("Bench   Press") == "bench press"
        assert normalize("Bench\tPress") == "bench press"

    def test_display_variants_share_a_key(self):
        assert normalize("  Bench  Press (Incline) ") == normalize("bench press (incline)")

    def test_strips_edge_punctuation_with_whitespace(self):
        assert normalize("- Lat Pulldown -") == "lat pulldown"
        assert normalize("• Face Pull") == "face pull"
        assert normalize("[Cable Fly]") == "cable fly"
        assert normalize("Dip —") == "dip"

    def test_keeps_internal_punctuation(self):
        assert normalize("Pull-Up") == "pull-up"
        assert normalize("T-Bar Row / Chest Supported") == "t-bar row / chest supported"

    @pytest.mark.parametrize(
        "raw",
        ["  Bench  Press (Incline) ", "-- Leg Press --", "Assisted Pull-Up", "", "   ", "(( ))"],
    )
    def test_idempotent(self, raw: str):
        once = normalize(raw)
        assert normalize(once) == once

    def test_punctuation_only_name_is_empty(self):
        assert normalize(" ( - ) ") == ""


class TestMakeStoreKey:
    def test_key_layout(self):
        meso = UUID("6f1c2b9e-3d4a-4c5b-9e8f-0a1b2c3d4e5f")
        assert make_store_key(meso, " Leg  Press ") == "6f1c2b9e-3d4a-4c5b-9e8f-0a1b2c3d4e5f::leg press"

    def test_accepts_string_mesocycle(self):
        assert make_store_key("abc", "Dip") == "abc::dip"
