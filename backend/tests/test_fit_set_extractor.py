"""Tests for the heuristic strength set scanner."""

import random

import pytest

from strength_sync.services.fit_set_extractor import (
    MAX_REPS,
    MAX_WEIGHT_TENTHS_KG,
    TRAILER_SIZE,
    ExtractedExercise,
    extract_sets,
    header_size,
    scan_sets,
)
from strength_sync.services.exercise_taxonomy import MAX_STRENGTH_CATEGORY


class TestHeaderSize:
    def test_empty_buffer(self):
        assert header_size(b"") is None

    def test_header_larger_than_buffer(self):
        assert header_size(bytes([40, 0, 0])) is None

    def test_reads_first_byte(self):
        assert header_size(bytes([14]) + bytes(20)) == 14


class TestExtractSets:
    """Tests for extract_sets."""

    def test_empty_buffer_returns_nothing(self):
        assert extract_sets(b"") == {}

    def test_buffers_within_trailer_return_nothing(self):
        for length in range(1, TRAILER_SIZE + 2):
            assert extract_sets(bytes([1] * length)) == {}

    def test_single_bench_press_set(self, bench_press_file: bytes):
        result = extract_sets(bench_press_file)

        assert list(result) == ["Bench Press"]
        bench = result["Bench Press"]
        assert bench.reps == [8]
        assert bench.weights == [70.5]
        assert bench.sets == 1

    def test_groups_sets_by_exercise_in_file_order(self, fit_file):
        buffer = fit_file(
            (10, 600, 28),  # Squat 60 kg
            (8, 705, 0),  # Bench Press 70.5 kg
            (8, 650, 28),  # Squat 65 kg
            (12, 0, 22),  # Push Up, bodyweight
        )

        result = extract_sets(buffer)

        assert list(result) == ["Squat", "Bench Press", "Push Up"]
        assert result["Squat"].reps == [10, 8]
        assert result["Squat"].weights == [60.0, 65.0]
        assert result["Bench Press"].weights == [70.5]
        assert result["Push Up"].weights == [0.0]

    def test_rejects_out_of_range_fields(self, fit_file):
        buffer = fit_file(
            (0, 500, 0),  # zero reps
            (101, 500, 0),  # too many reps
            (5, 5001, 0),  # heavier than 500 kg
            (5, 500, 33),  # not a strength category
        )

        assert extract_sets(buffer) == {}

    def test_accepts_boundary_values(self, fit_file):
        buffer = fit_file(
            (1, 0, 0),
            (MAX_REPS, MAX_WEIGHT_TENTHS_KG, MAX_STRENGTH_CATEGORY),
        )

        found = list(scan_sets(buffer))

        assert [(s.reps, s.weight_kg, s.category) for s in found] == [
            (1, 0.0, 0),
            (100, 500.0, 32),
        ]

    def test_definition_message_header_is_skipped(self, fit_file):
        buffer = bytearray(fit_file((8, 705, 0)))
        buffer[16] = 0x40

        assert extract_sets(bytes(buffer)) == {}

    def test_trailer_is_not_scanned(self):
        # Valid-looking record placed inside the last 10 bytes
        buffer = bytearray([0xFF] * 30)
        buffer[0] = 2
        buffer[22:28] = bytes([0x00, 8, 0xC1, 0x02, 0xFF, 0x00])

        assert extract_sets(bytes(buffer)) == {}

    def test_accepts_bytearray_and_memoryview(self, bench_press_file: bytes):
        expected = extract_sets(bench_press_file)

        assert extract_sets(bytearray(bench_press_file)) == expected
        assert extract_sets(memoryview(bench_press_file)) == expected


class TestExtractorProperties:
    """Random buffers must never crash the scanner or break its bounds."""

    @pytest.mark.parametrize("seed", range(20))
    def test_random_buffers_respect_bounds(self, seed: int):
        rng = random.Random(seed)
        buffer = bytes(rng.getrandbits(8) for _ in range(rng.randint(0, 2048)))

        result = extract_sets(buffer)

        for exercise in result.values():
            assert isinstance(exercise, ExtractedExercise)
            assert len(exercise.reps) == len(exercise.weights) == exercise.sets
            assert all(1 <= r <= 100 for r in exercise.reps)
            assert all(0 <= w <= 500 for w in exercise.weights)

        for found in scan_sets(buffer):
            assert found.category <= MAX_STRENGTH_CATEGORY

    @pytest.mark.parametrize("seed", range(5))
    def test_deterministic(self, seed: int):
        rng = random.Random(seed)
        buffer = bytes(rng.getrandbits(8) for _ in range(1024))

        first = {k: v.to_dict() for k, v in extract_sets(buffer).items()}
        second = {k: v.to_dict() for k, v in extract_sets(buffer).items()}

        assert first == second

    def test_to_dict_uses_response_keys(self):
        exercise = ExtractedExercise(name="Squat", reps=[5, 5], weights=[60.0, 62.5])

        assert exercise.to_dict() == {
            "exerciseName": "Squat",
            "sets": 2,
            "reps": [5, 5],
            "weight": [60.0, 62.5],
        }
