from pathlib import Path

import pandas as pd
import pytest

from titanic_tree.data_loader import column_kind, infer_kind, load_data, load_table, parse_integer
from titanic_tree.errors import LoadError, NotFoundError


def test_load_table_infers_column_kinds(train_path: Path) -> None:
    df = load_table(train_path)
    assert list(df.columns) == ["PassengerId", "Survived", "Pclass", "Name", "Sex", "Age", "Ticket", "Fare"]
    assert len(df) == 12
    assert column_kind(df["PassengerId"]) == "integer"
    assert column_kind(df["Age"]) == "integer"
    assert column_kind(df["Fare"]) == "real"
    assert column_kind(df["Name"]) == "text"
    assert column_kind(df["Ticket"]) == "text"
    assert df.loc[0, "Name"] == "Braund, Mr. Owen"


def test_load_table_marks_empty_cells_missing(train_path: Path) -> None:
    df = load_table(train_path)
    assert df["Age"].isna().tolist() == [
        False, False, True, False, False, False, False, False, False, False, True, False
    ]


def test_missing_is_not_zero(tmp_path: Path) -> None:
    path = tmp_path / "zeros.csv"
    path.write_text("a,b\n0,x\n,y\n", encoding="utf-8")
    df = load_table(path)
    assert df.loc[0, "a"] == 0
    assert pd.isna(df.loc[1, "a"])


def test_load_table_real_column_with_missing(test_path: Path) -> None:
    df = load_table(test_path)
    assert column_kind(df["Age"]) == "real"
    assert df["Age"].isna().sum() == 2
    assert df.loc[0, "Age"] == 34.5


def test_load_table_missing_file(tmp_path: Path) -> None:
    with pytest.raises(LoadError):
        load_table(tmp_path / "nope.csv")


def test_load_table_directory(tmp_path: Path) -> None:
    with pytest.raises(LoadError):
        load_table(tmp_path)


def test_load_table_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(LoadError):
        load_table(path)


@pytest.mark.parametrize("body", ["a,b\n1,2\n3\n", "a,b\n1,2\n3,4,5\n"])
def test_load_table_rejects_ragged_rows(tmp_path: Path, body: str) -> None:
    path = tmp_path / "ragged.csv"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(LoadError, match="line 3"):
        load_table(path)


def test_load_table_rejects_duplicate_header(tmp_path: Path) -> None:
    path = tmp_path / "dupes.csv"
    path.write_text("a,a\n1,2\n", encoding="utf-8")
    with pytest.raises(LoadError, match="duplicate"):
        load_table(path)


def test_load_table_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "blank.csv"
    path.write_text("a,b\n1,2\n\n3,4\n", encoding="utf-8")
    df = load_table(path)
    assert df["a"].tolist() == [1, 3]


def test_forced_integer_marks_unparseable_missing(tmp_path: Path) -> None:
    path = tmp_path / "forced.csv"
    path.write_text("a,b\n1,x\nabc,y\n2.5,z\n3.0,w\n", encoding="utf-8")
    df = load_table(path, dtypes={"a": "integer"})
    assert column_kind(df["a"]) == "integer"
    assert df["a"].isna().tolist() == [False, True, True, False]
    assert df.loc[3, "a"] == 3


def test_forced_type_unknown_column(tmp_path: Path) -> None:
    path = tmp_path / "forced.csv"
    path.write_text("a\n1\n", encoding="utf-8")
    with pytest.raises(NotFoundError):
        load_table(path, dtypes={"b": "integer"})


def test_forced_type_unknown_kind(tmp_path: Path) -> None:
    path = tmp_path / "forced.csv"
    path.write_text("a\n1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_table(path, dtypes={"a": "date"})


def test_infer_kind() -> None:
    assert infer_kind(pd.Series(["1", "-2", None], dtype=object)) == "integer"
    assert infer_kind(pd.Series(["1", "2.5"], dtype=object)) == "real"
    assert infer_kind(pd.Series(["1", "x"], dtype=object)) == "text"
    assert infer_kind(pd.Series([None, None], dtype=object)) == "real"


def test_integers_wider_than_int64_load_as_real(tmp_path: Path) -> None:
    path = tmp_path / "wide.csv"
    path.write_text("a,b\n99999999999999999999,1\n-5,2\n", encoding="utf-8")
    df = load_table(path)
    assert column_kind(df["a"]) == "real"
    assert df.loc[0, "a"] == 1e20
    assert column_kind(df["b"]) == "integer"


def test_forced_integer_outside_int64_is_missing(tmp_path: Path) -> None:
    path = tmp_path / "wide.csv"
    path.write_text("a\n99999999999999999999\n9223372036854775807\n", encoding="utf-8")
    df = load_table(path, dtypes={"a": "integer"})
    assert df["a"].isna().tolist() == [True, False]
    assert df.loc[1, "a"] == 2 ** 63 - 1


def test_parse_integer() -> None:
    assert parse_integer(" 9007199254740993 ") == 9007199254740993
    assert parse_integer("3.0") == 3
    assert parse_integer("2.5") is None
    assert parse_integer("inf") is None
    assert parse_integer("9223372036854775808") is None
    assert parse_integer(None) is None


def test_load_data_returns_both_tables(train_path: Path, test_path: Path) -> None:
    train, test = load_data(train_path, test_path)
    assert len(train) == 12
    assert len(test) == 5
    assert "Survived" not in test.columns
