from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

TRAIN_CSV = """PassengerId,Survived,Pclass,Name,Sex,Age,Ticket,Fare
1,0,3,"Braund, Mr. Owen",male,22,A/5 21171,7.25
2,1,1,"Cumings, Mrs. John",female,38,PC 17599,71.28
3,1,3,"Heikkinen, Miss. Laina",female,,STON/O2. 3101282,7.92
4,1,1,"Futrelle, Mrs. Jacques",female,35,113803,53.1
5,0,3,"Allen, Mr. William",male,35,373450,8.05
6,0,1,"McCarthy, Mr. Timothy",male,54,17463,51.86
7,0,3,"Palsson, Master. Gosta",male,2,349909,21.08
8,1,3,"Johnson, Mrs. Oscar",female,27,347742,11.13
9,1,2,"Nasser, Mrs. Nicholas",female,14,237736,30.07
10,1,3,"Sandstrom, Miss. Marguerite",female,4,PP 9549,16.7
11,0,2,"Rice, Master. Eugene",male,,382652,29.13
12,0,2,"Fynney, Mr. Joseph",male,35,239865,26.0
"""

TEST_CSV = """PassengerId,Pclass,Name,Sex,Age,Ticket,Fare
892,3,"Kelly, Mr. James",male,34.5,330911,7.83
893,3,"Wilkes, Mrs. James",female,47,363272,7.0
894,2,"Myles, Mr. Thomas",male,,240276,9.69
895,3,"Wirz, Mr. Albert",male,27,315154,8.66
896,3,"Hirvonen, Mrs. Alexander",female,,3101298,12.29
"""

# 895 is deliberately wrong for a sex-only tree
ANSWERS_CSV = """PassengerId,Survived
892,0
893,1
894,0
895,1
896,1
"""


@pytest.fixture
def train_path(tmp_path: Path) -> Path:
    path = tmp_path / "train.csv"
    path.write_text(TRAIN_CSV, encoding="utf-8")
    return path


@pytest.fixture
def test_path(tmp_path: Path) -> Path:
    path = tmp_path / "test.csv"
    path.write_text(TEST_CSV, encoding="utf-8")
    return path


@pytest.fixture
def answers_path(tmp_path: Path) -> Path:
    path = tmp_path / "answers.csv"
    path.write_text(ANSWERS_CSV, encoding="utf-8")
    return path
