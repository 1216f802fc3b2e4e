import polars as pl
import pytest
from polars.testing import assert_frame_equal

from interactions.codec import UNSEEN, InteractionCodec, InteractionCodecError
from interactions.frame_encoding import decode_frame, encode_frame, resolve_indices


def synthetic_data():
    codec = InteractionCodec(
        [["a", "b"], ["x", "y", "z"]], columns=["letter", "axis"]
    )
    df = pl.DataFrame(
        {
            "letter": ["a", "b", None, "c", "a"],
            "axis": ["x", "z", None, "x", None],
            "target": [1.0, 0.0, 1.0, 0.5, 0.0],
        }
    )
    return codec, df


def test_resolve_distinguishes_null_and_unseen():
    codec, df = synthetic_data()
    idx = resolve_indices(df, codec)
    assert idx.tolist() == [[0, 0], [1, 2], [-1, -1], [2, 0], [0, -1]]


def test_encode_frame_matches_scalar_codec():
    codec, df = synthetic_data()
    out = encode_frame(df, codec)
    assert out.columns == ["letter", "axis", "target", "letter:axis"]
    assert out["letter:axis"].dtype == pl.Int64
    expected = [
        codec.encode_labels([lt, ax])
        for lt, ax in zip(df["letter"].to_list(), df["axis"].to_list())
    ]
    assert out["letter:axis"].to_list() == expected
    assert expected[:4] == [0, 9, 19, 2]


def test_encode_frame_is_deterministic_and_leaves_input():
    codec, df = synthetic_data()
    before = df.clone()
    e1 = encode_frame(df, codec, alias="code")
    e2 = encode_frame(df, codec, alias="code")
    assert_frame_equal(e1, e2)
    assert_frame_equal(df, before)


def test_categorical_columns_are_resolved_by_label():
    codec, df = synthetic_data()
    cat = df.with_columns(pl.col("letter").cast(pl.Categorical))
    assert_frame_equal(
        encode_frame(cat, codec, alias="code").select("code"),
        encode_frame(df, codec, alias="code").select("code"),
    )


def test_explicit_columns_map_positionally():
    codec, df = synthetic_data()
    renamed = df.rename({"letter": "l", "axis": "ax"})
    out = encode_frame(renamed, codec, ["l", "ax"])
    assert out["l:ax"].to_list()[:2] == [0, 9]


def test_decode_frame_restores_labels():
    codec, df = synthetic_data()
    encoded = encode_frame(df, codec, alias="code")
    decoded = decode_frame(encoded.select("code"), codec, "code", suffix="_dec")
    assert decoded["letter_dec"].to_list() == ["a", "b", None, UNSEEN, "a"]
    assert decoded["axis_dec"].to_list() == ["x", "z", None, "x", None]
    assert decoded["letter_dec"].dtype == pl.Utf8


def test_decode_frame_with_unseen_as_na():
    codec = InteractionCodec([["a"]], encode_unseen_as_na=True, columns=["k"])
    df = pl.DataFrame({"k": ["a", "zz", None]})
    encoded = encode_frame(df, codec, alias="code")
    assert encoded["code"].to_list() == [0, 1, 1]
    decoded = decode_frame(encoded.drop("k"), codec, "code")
    assert decoded["k"].to_list() == ["a", None, None]


def test_decode_frame_keeps_null_codes_null():
    codec, _ = synthetic_data()
    df = pl.DataFrame({"code": [9, None]}, schema={"code": pl.Int64})
    decoded = decode_frame(df, codec, "code")
    assert decoded["letter"].to_list() == ["b", None]
    assert decoded["axis"].to_list() == ["z", None]


def test_empty_domain_column():
    codec = InteractionCodec([[], ["x"]], columns=["e", "k"])
    df = pl.DataFrame({"e": ["q", None], "k": ["x", "x"]})
    assert resolve_indices(df, codec).tolist() == [[0, 0], [-1, 0]]


def test_empty_frame():
    codec, df = synthetic_data()
    out = encode_frame(df.head(0), codec, alias="code")
    assert out.height == 0
    assert out["code"].dtype == pl.Int64


def test_missing_columns_rejected():
    codec, df = synthetic_data()
    with pytest.raises(InteractionCodecError):
        encode_frame(df.drop("axis"), codec)
    with pytest.raises(InteractionCodecError):
        encode_frame(df, codec, ["letter"])
    with pytest.raises(InteractionCodecError):
        decode_frame(df, codec, "nope")


def test_decode_frame_rejects_float_codes():
    codec, _ = synthetic_data()
    df = pl.DataFrame({"code": [9.7, 2.2]})
    with pytest.raises(InteractionCodecError):
        decode_frame(df, codec, "code")


def test_decode_frame_rejects_wide_unsigned_codes():
    codec, _ = synthetic_data()
    df = pl.DataFrame({"code": [9, 2**63 + 5]}, schema={"code": pl.UInt64})
    with pytest.raises(InteractionCodecError):
        decode_frame(df, codec, "code")


def test_decode_frame_accepts_unsigned_codes_in_range():
    codec, _ = synthetic_data()
    df = pl.DataFrame({"code": [9, 0]}, schema={"code": pl.UInt32})
    decoded = decode_frame(df, codec, "code")
    assert decoded["letter"].to_list() == ["b", "a"]
    assert decoded["axis"].to_list() == ["z", "x"]


def test_decode_frame_rejects_codes_outside_space():
    codec, _ = synthetic_data()
    df = pl.DataFrame({"code": [0, 20]})
    with pytest.raises(InteractionCodecError):
        decode_frame(df, codec, "code")


def test_duplicate_interacting_columns_rejected():
    codec, df = synthetic_data()
    with pytest.raises(InteractionCodecError):
        encode_frame(df, codec, ["letter", "letter"])
    with pytest.raises(InteractionCodecError):
        resolve_indices(df, codec, ["axis", "axis"])
