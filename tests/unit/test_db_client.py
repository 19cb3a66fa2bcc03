"""Unit tests for the SQLite client's filter parsing and record helpers."""

import pytest

from src.core import db_client


@pytest.mark.unit
class TestFilterParsing:
    """Tests for parse_filter and its helpers."""

    def test_empty_filter(self):
        assert db_client.parse_filter("") == ("", [])

    def test_and_conjunction(self):
        clause, params = db_client.parse_filter('user_address = "0xabc" && task_id = "task_001"')

        assert clause == "user_address = ? AND task_id = ?"
        assert params == ["0xabc", "task_001"]

    @pytest.mark.parametrize("raw", ["007", "true", "false", "1.50", "0042", "null"])
    def test_numeric_looking_values_stay_strings(self, raw):
        clause, value = db_client._parse_single_comparison(f'owner = "{raw}"')

        assert clause == "owner = ?"
        assert value == raw

    @pytest.mark.parametrize("query", ['level >= "5"', 'owner != "x"', 'owner ~ "abc"', 'level < "5"'])
    def test_only_equality_is_supported(self, query):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            db_client.parse_filter(query)

    def test_or_groups_are_rejected(self):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            db_client.parse_filter('owner = "a" && (task_id = "x" || task_id = "y")')

    def test_escaped_double_quotes(self):
        _, value = db_client._parse_single_comparison('name = "foo\\"bar"')

        assert value == 'foo"bar'

    def test_escaped_single_quotes(self):
        _, value = db_client._parse_single_comparison("name = 'O\\'Reilly'")

        assert value == "O'Reilly"

    def test_backslash(self):
        _, value = db_client._parse_single_comparison('name = "\\\\"')

        assert value == "\\"

    @pytest.mark.parametrize("raw", ['foo"bar', "back\\slash", "naïve", 'mixed "quotes" && || (parens)'])
    def test_sanitize_param_round_trip(self, raw):
        _, value = db_client._parse_single_comparison(f'name = "{db_client.sanitize_param(raw)}"')

        assert value == raw

    def test_conjunction_inside_quoted_values_does_not_split(self):
        clause, params = db_client.parse_filter('owner = "a && b" && task_id = "x || y"')

        assert clause == "owner = ? AND task_id = ?"
        assert params == ["a && b", "x || y"]

    def test_injection_attempt_is_rejected(self):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            db_client._parse_single_comparison('owner = "x" OR 1=1 --')

    def test_unsupported_syntax(self):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            db_client.parse_filter("owner == x")


@pytest.mark.unit
class TestRecords:
    """Tests for upsert_record, get_record and list_records against a temporary database."""

    @pytest.fixture
    async def db_path(self, tmp_path):
        path = str(tmp_path / "records.db")
        await db_client.init_db(db_path=path)
        yield path
        await db_client.close_connection(db_path=path)

    async def test_upsert_and_get(self, db_path):
        await db_client.upsert_record(
            collection="pets",
            record_id="pet_1",
            data={"name": "Draco", "skills": ["Flight"]},
            columns={"owner": "0xabc"},
            db_path=db_path,
        )

        record = await db_client.get_record(collection="pets", record_id="pet_1", db_path=db_path)

        assert record["id"] == "pet_1"
        assert record["owner"] == "0xabc"
        assert record["data"] == {"name": "Draco", "skills": ["Flight"]}

    async def test_upsert_replaces(self, db_path):
        for name in ("Draco", "Draco II"):
            await db_client.upsert_record(
                collection="pets", record_id="pet_1", data={"name": name}, columns={"owner": "0xabc"}, db_path=db_path
            )

        record = await db_client.get_record(collection="pets", record_id="pet_1", db_path=db_path)

        assert record["data"]["name"] == "Draco II"

    async def test_get_missing(self, db_path):
        with pytest.raises(db_client.RecordNotFoundError, match="Record not found"):
            await db_client.get_record(collection="pets", record_id="missing", db_path=db_path)

    async def test_list_with_filter_and_paging(self, db_path):
        for index in range(5):
            await db_client.upsert_record(
                collection="pets",
                record_id=f"pet_{index}",
                data={"index": index},
                columns={"owner": "0xabc" if index % 2 == 0 else "0xdef"},
                db_path=db_path,
            )

        first = await db_client.list_records(
            collection="pets", page=1, per_page=2, filter_query='owner = "0xabc"', db_path=db_path
        )
        second = await db_client.list_records(
            collection="pets", page=2, per_page=2, filter_query='owner = "0xabc"', db_path=db_path
        )

        assert [record["id"] for record in first] == ["pet_0", "pet_2"]
        assert [record["id"] for record in second] == ["pet_4"]

    async def test_invalid_collection_name(self, db_path):
        with pytest.raises(db_client.DatabaseError, match="Invalid collection name"):
            await db_client.get_record(collection="pets; DROP TABLE pets", record_id="x", db_path=db_path)

    async def test_missing_table(self, tmp_path):
        path = str(tmp_path / "empty.db")
        try:
            with pytest.raises(db_client.DatabaseError, match="init_db"):
                await db_client.upsert_record(collection="pets", record_id="x", data={}, db_path=path)
        finally:
            await db_client.close_connection(db_path=path)
