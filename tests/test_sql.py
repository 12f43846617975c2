import pytest

from litescan.errors import QueryParseError
from litescan.sql import ColumnName, Condition, CountStar, Query, parse_query


class TestParseQuery:
    def test_count_star(self):
        query = parse_query("SELECT COUNT(*) FROM apples")

        assert query == Query(selection=[CountStar()], table="apples")
        assert query.is_count

    def test_keywords_are_case_insensitive(self):
        assert parse_query("select count(*) from apples") == parse_query(
            "SELECT COUNT(*) FROM apples"
        )

    def test_single_column(self):
        assert parse_query("SELECT name FROM apples").selection == [ColumnName("name")]

    def test_multiple_columns(self):
        query = parse_query("SELECT name, color FROM carrots")

        assert query.selection == [ColumnName("name"), ColumnName("color")]
        assert query.table == "carrots"
        assert query.conditions == []
        assert not query.is_count

    def test_where_clause(self):
        query = parse_query("SELECT name, color FROM apples WHERE color = 'Yellow'")

        assert query.conditions == [Condition("color", "Yellow")]

    def test_literal_with_spaces(self):
        query = parse_query("SELECT id, name FROM superheroes WHERE eye_color = 'Pink Eyes'")

        assert query.selection == [ColumnName("id"), ColumnName("name")]
        assert query.conditions == [Condition("eye_color", "Pink Eyes")]

    def test_conditions_joined_with_and(self):
        query = parse_query(
            "SELECT id FROM companies WHERE country = 'eritrea' and name='Acme'"
        )

        assert query.conditions == [
            Condition("country", "eritrea"),
            Condition("name", "Acme"),
        ]

    def test_flexible_whitespace_and_semicolon(self):
        query = parse_query("  SELECT\n\tname ,color\nFROM   apples\n  WHERE color='Red' ;  ")

        assert query.selection == [ColumnName("name"), ColumnName("color")]
        assert query.conditions == [Condition("color", "Red")]

    def test_doubled_quote_is_an_escaped_quote(self):
        query = parse_query("SELECT name FROM apples WHERE name = 'Granny''s'")
        assert query.conditions == [Condition("name", "Granny's")]

    def test_quoted_identifiers(self):
        query = parse_query('SELECT "eye color", [name] FROM "super heroes"')

        assert query.selection == [ColumnName("eye color"), ColumnName("name")]
        assert query.table == "super heroes"


class TestParseQueryErrors:
    def test_missing_from(self):
        with pytest.raises(QueryParseError) as excinfo:
            parse_query("SELECT name apples")

        assert excinfo.value.reason == "missing FROM"
        assert excinfo.value.remainder == "apples"

    def test_missing_from_at_end_of_input(self):
        with pytest.raises(QueryParseError) as excinfo:
            parse_query("SELECT name")
        assert excinfo.value.reason == "missing FROM"
        assert excinfo.value.remainder == ""

    def test_empty_selection_list(self):
        with pytest.raises(QueryParseError) as excinfo:
            parse_query("SELECT FROM apples")

        assert excinfo.value.reason == "empty selection list"
        assert excinfo.value.remainder == "FROM apples"

    def test_unterminated_string_literal(self):
        with pytest.raises(QueryParseError) as excinfo:
            parse_query("SELECT name FROM apples WHERE color = 'Yellow")

        assert excinfo.value.reason == "unterminated string literal"
        assert excinfo.value.remainder == "'Yellow"

    def test_trailing_garbage(self):
        with pytest.raises(QueryParseError) as excinfo:
            parse_query("SELECT name FROM apples WHERE color = 'Red' ORDER BY name")

        assert excinfo.value.reason == "unexpected trailing input"
        assert excinfo.value.remainder == "ORDER BY name"

    def test_literal_must_be_quoted(self):
        with pytest.raises(QueryParseError) as excinfo:
            parse_query("SELECT name FROM apples WHERE id = 3")
        assert excinfo.value.remainder == "3"

    def test_only_equality_is_supported(self):
        with pytest.raises(QueryParseError):
            parse_query("SELECT name FROM apples WHERE color > 'Red'")

    def test_or_is_not_supported(self):
        with pytest.raises(QueryParseError):
            parse_query("SELECT name FROM apples WHERE color = 'Red' OR color = 'Yellow'")

    def test_count_cannot_be_mixed_with_columns(self):
        with pytest.raises(QueryParseError):
            parse_query("SELECT COUNT(*), name FROM apples")

    def test_not_a_select(self):
        with pytest.raises(QueryParseError) as excinfo:
            parse_query("DELETE FROM apples")
        assert excinfo.value.remainder == "DELETE FROM apples"

    def test_dangling_comma(self):
        with pytest.raises(QueryParseError):
            parse_query("SELECT name, FROM apples")

    def test_missing_table_name(self):
        with pytest.raises(QueryParseError):
            parse_query("SELECT name FROM")
