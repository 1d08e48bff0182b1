"""
Tests for CSV import merging.
"""

import pytest

from showmatch.csv_import import (
    CsvImportError,
    import_rows,
    match_row,
    normalize_key,
    normalize_value,
    read_import_rows,
)
from showmatch.database import CatalogShow, get_session
from showmatch.logger import get_logger
from showmatch.storage import list_all_shows

IMPORT_CSV = """Show Name,Stimulation Score,releaseYear,Is Featured,Age Range
Bluey,2,2018,true,4-7
peppa pig,3,,0,
Magic School Bus,4,2017,,
Totally Unknown,5,2020,,
"""


@pytest.fixture
def import_csv(tmp_path):
    path = tmp_path / "import.csv"
    path.write_text(IMPORT_CSV, encoding="utf-8")
    return path


class TestNormalization:
    """Test key and value coercion."""

    @pytest.mark.parametrize("key,expected", [
        ("Show Name", "show_name"),
        ("releaseYear", "release_year"),
        ("stimulation_score", "stimulation_score"),
        ("age-range", "age_range"),
        (" Is Featured ", "is_featured"),
        ("NAME", "name"),
        ("TITLE", "title"),
        ("ShowName", "show_name"),
    ])
    def test_normalize_key(self, key, expected):
        assert normalize_key(key) == expected

    @pytest.mark.parametrize("key,value,expected", [
        ("stimulation_score", "4", 4),
        ("stimulation_score", "4.0", 4),
        ("release_year", "n/a", None),
        ("release_year", "2016-present", 2016),
        ("seasons", "3 seasons", 3),
        ("episode_length", " 7 min", 7),
        ("seasons", 3, 3),
        ("is_featured", "TRUE", True),
        ("has_dialogue", "1", True),
        ("is_featured", "no", False),
        ("is_featured", 0, False),
        ("age_range", " 2-5 ", "2-5"),
        ("age_range", "", None),
        ("name", None, None),
    ])
    def test_normalize_value(self, key, value, expected):
        assert normalize_value(key, value) == expected


class TestReadImportRows:
    """Test CSV parsing."""

    def test_reads_and_normalizes(self, import_csv):
        rows = read_import_rows(import_csv)

        assert len(rows) == 4
        assert rows[0] == {
            "show_name": "Bluey",
            "stimulation_score": 2,
            "release_year": 2018,
            "is_featured": True,
            "age_range": "4-7",
        }
        assert rows[1]["release_year"] is None
        assert rows[1]["is_featured"] is False

    def test_utf8_bom(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_text("Title,Seasons\nBluey,3\n", encoding="utf-8-sig")
        assert read_import_rows(path) == [{"title": "Bluey", "seasons": 3}]

    def test_upper_case_headers(self, tmp_path):
        path = tmp_path / "caps.csv"
        path.write_text("TITLE,RELEASE YEAR,SEASONS\nBluey,2018-present,3 seasons\n")
        assert read_import_rows(path) == [{"title": "Bluey", "release_year": 2018, "seasons": 3}]

    def test_missing_file(self, tmp_path):
        with pytest.raises(CsvImportError, match="not found"):
            read_import_rows(tmp_path / "missing.csv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(CsvImportError, match="header"):
            read_import_rows(path)

    def test_requires_name_column(self, tmp_path):
        path = tmp_path / "noname.csv"
        path.write_text("Foo,Bar\n1,2\n")
        with pytest.raises(CsvImportError, match="name"):
            read_import_rows(path)


class TestMatchRow:
    """Test pairing rows with catalog shows."""

    def test_exact_compact_name(self, db_session):
        match = match_row("BLUEY!", list_all_shows(db_session))
        assert match.method == "exact"
        assert match.show.id == 1
        assert match.result.score == 100.0

    def test_fuzzy_name(self, db_session):
        match = match_row("Magic School Bus", list_all_shows(db_session))
        assert match.method == "fuzzy"
        assert match.show.id == 3
        assert match.result.score == 55.9

    def test_show_names_keep_dots(self):
        shows = [CatalogShow(id=10, name="Mr. Rogers' Neighborhood")]
        match = match_row("Mister Rogers Neighborhood", shows)
        assert match is not None
        assert match.result.candidate == "Mr. Rogers' Neighborhood"

    def test_no_match(self, db_session):
        assert match_row("Totally Unknown", list_all_shows(db_session)) is None


class TestImportRows:
    """Test merging rows into the catalog."""

    def test_applies_confident_matches(self, db_session, catalog_db, import_csv):
        report = import_rows(db_session, read_import_rows(import_csv))

        assert report.rows == 4
        assert report.updated == ["Bluey", "Peppa Pig"]
        assert report.unmatched == ["Totally Unknown"]
        assert [m.name for m in report.below_threshold] == ["Magic School Bus"]
        assert report.changes["Peppa Pig"] == {"stimulation_score": {"old": None, "new": 3}}

        other = get_session(catalog_db)
        bluey = other.get(CatalogShow, 1)
        assert bluey.stimulation_score == 2
        assert bluey.release_year == 2018
        assert bluey.is_featured is True
        assert bluey.age_range == "4-7"
        assert other.get(CatalogShow, 3).stimulation_score is None
        other.close()

        metrics = get_logger().get_metrics()
        assert metrics["updates_applied"] == 2
        assert metrics["high_confidence"] == 2
        assert metrics["low_confidence"] == 1
        assert metrics["unmatched"] == 1

    def test_lower_min_score_applies_fuzzy_match(self, db_session, import_csv):
        report = import_rows(db_session, read_import_rows(import_csv), min_score=50.0)

        assert "The Magic School Bus Rides Again" in report.updated
        assert db_session.get(CatalogShow, 3).release_year == 2017

    def test_dry_run_writes_nothing(self, db_session, catalog_db, import_csv):
        report = import_rows(db_session, read_import_rows(import_csv), dry_run=True)

        assert report.updated == ["Bluey", "Peppa Pig"]
        assert get_logger().get_metrics()["updates_applied"] == 0

        other = get_session(catalog_db)
        assert other.get(CatalogShow, 1).stimulation_score is None
        other.close()

    def test_rerun_is_unchanged(self, db_session, import_csv):
        rows = read_import_rows(import_csv)
        import_rows(db_session, rows)

        report = import_rows(db_session, rows)

        assert report.updated == []
        assert report.unchanged == ["Bluey", "Peppa Pig"]

    def test_row_without_name(self, db_session):
        report = import_rows(db_session, [{"name": None, "seasons": 2}])
        assert report.unmatched == ["<missing name>"]
