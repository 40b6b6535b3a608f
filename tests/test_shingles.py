import io
import json

import pytest
from pydantic import ValidationError

from config import Defaults
from core.errors import InvalidArgumentError, NotFoundError
from core.models import Shingleprint
from fingerprint.shingles import (
    ShingleprintBuilder,
    load_shingleprint,
    resemblance,
    save_shingleprint,
    shingleprint_bytes,
    shingleprint_file,
    shingleprint_stream,
)

TEXT = (
    b"We compute the checksum using Broder's implementation of Rabin's "
    b"fingerprinting algorithm. Fingerprints offer provably strong "
    b"probabilistic guarantees that two different strings will not have "
    b"the same fingerprint."
)


def all_window_fingerprints(engine, data, size):
    return {engine.hash_bytes(data[i:i + size]) for i in range(len(data) - size + 1)}


class TestShingleprint:
    def test_keeps_smallest_distinct_fingerprints(self, engine):
        sketch = shingleprint_bytes(TEXT, shingle_size=8, feature_set_size=16)
        expected = sorted(all_window_fingerprints(engine, TEXT, 8))[:16]
        assert sketch.features == expected
        assert sketch.shingle_size == 8
        assert sketch.version == Defaults.SHINGLEPRINT_VERSION

    def test_small_document_keeps_everything(self, engine):
        sketch = shingleprint_bytes(b"abcdefghijkl", shingle_size=4, feature_set_size=128)
        assert sketch.features == sorted(all_window_fingerprints(engine, b"abcdefghijkl", 4))
        assert len(sketch) == 9

    def test_duplicate_windows_counted_once(self):
        sketch = shingleprint_bytes(b"a" * 100, shingle_size=8)
        assert len(sketch) == 1

    def test_input_shorter_than_shingle(self):
        assert shingleprint_bytes(b"abc", shingle_size=4).features == []

    @pytest.mark.parametrize("chunk_size", [1, 3, 7, 64])
    def test_chunking_does_not_change_result(self, chunk_size):
        whole = shingleprint_bytes(TEXT, feature_set_size=32)
        streamed = shingleprint_stream(io.BytesIO(TEXT), feature_set_size=32, chunk_size=chunk_size)
        assert streamed.features == whole.features

    def test_builder_updates(self):
        builder = ShingleprintBuilder(shingle_size=6, feature_set_size=20)
        builder.update(TEXT[:50]).update(TEXT[50:])
        assert builder.result().features == shingleprint_bytes(TEXT, 6, 20).features

    def test_defaults_from_settings(self):
        sketch = shingleprint_bytes(TEXT)
        assert sketch.shingle_size == Defaults.SHINGLE_SIZE
        assert sketch.feature_set_size == Defaults.FEATURE_SET_SIZE

    @pytest.mark.parametrize("shingle_size,feature_set_size", [(3, 10), (8, 0), (8, -1)])
    def test_invalid_sizes(self, shingle_size, feature_set_size):
        with pytest.raises(InvalidArgumentError):
            ShingleprintBuilder(shingle_size, feature_set_size)

    def test_file(self, tmp_path):
        path = tmp_path / "doc.txt"
        path.write_bytes(TEXT)
        sketch = shingleprint_file(path)
        assert sketch.features == shingleprint_bytes(TEXT).features
        assert sketch.source == str(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            shingleprint_file(tmp_path / "missing.txt")


class TestResemblance:
    def test_identical(self):
        sketch = shingleprint_bytes(TEXT)
        assert resemblance(sketch, sketch) == 1.0

    def test_disjoint(self):
        assert resemblance(shingleprint_bytes(b"a" * 50), shingleprint_bytes(b"b" * 50)) == 0.0

    def test_similar_documents_score_between(self):
        edited = TEXT.replace(b"provably strong", b"very strong")
        score = resemblance(shingleprint_bytes(TEXT, feature_set_size=1000), shingleprint_bytes(edited, feature_set_size=1000))
        assert 0.0 < score < 1.0

    def test_formula(self):
        a = Shingleprint(shingle_size=8, features=[1, 2, 3, 4])
        b = Shingleprint(shingle_size=8, features=[3, 4, 5, 6])
        # 2 matches, union 2 * 4 - 2
        assert resemblance(a, b) == pytest.approx(2 / 6)

    def test_empty_sketch(self):
        assert resemblance(Shingleprint(features=[]), Shingleprint(features=[1])) == 0.0

    def test_shingle_size_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            resemblance(Shingleprint(shingle_size=8), Shingleprint(shingle_size=4))


class TestPersistence:
    def test_save_and_load(self, tmp_path):
        sketch = shingleprint_bytes(TEXT)
        path = save_shingleprint(sketch, tmp_path / "out" / "doc.sim.json")
        loaded = load_shingleprint(path)
        assert loaded == sketch

    def test_bad_version(self, tmp_path):
        path = tmp_path / "old.sim.json"
        path.write_text(json.dumps({"version": 0xCB00, "shingle_size": 8, "features": []}))
        with pytest.raises(InvalidArgumentError):
            load_shingleprint(path)

    def test_not_json(self, tmp_path):
        path = tmp_path / "junk.sim.json"
        path.write_text("not json")
        with pytest.raises(InvalidArgumentError):
            load_shingleprint(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "shape.sim.json"
        path.write_text(json.dumps({"features": "abc"}))
        with pytest.raises(InvalidArgumentError):
            load_shingleprint(path)

    def test_missing(self, tmp_path):
        with pytest.raises(NotFoundError):
            load_shingleprint(tmp_path / "none.sim.json")

    @pytest.mark.parametrize("features", [[5, 5, 9], [9, 5], [-1, 3], [1 << 64]])
    def test_rejects_malformed_features(self, tmp_path, features):
        path = tmp_path / "edited.sim.json"
        path.write_text(json.dumps({"version": Defaults.SHINGLEPRINT_VERSION, "shingle_size": 8, "features": features}))
        with pytest.raises(InvalidArgumentError):
            load_shingleprint(path)


class TestShingleprintModel:
    def test_accepts_sorted_distinct_features(self):
        assert Shingleprint(features=[0, 7, (1 << 64) - 1]).features == [0, 7, (1 << 64) - 1]

    @pytest.mark.parametrize("features", [[3, 3], [4, 2], [-5], [1 << 64]])
    def test_rejects_malformed_features(self, features):
        with pytest.raises(ValidationError):
            Shingleprint(features=features)
