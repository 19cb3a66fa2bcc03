"""Unit tests for the SQLite-backed repositories."""

import pytest

from src.core import db_client, schema
from src.core.errors import StorageError
from src.domain.task import TaskProgress
from src.repositories.sqlite import SqlitePetRepository, SqliteTaskRepository
from src.services.pet_service import PetStore
from tests.unit.conftest import OWNER, USER
from tests.unit.mocks import FixedChoiceRandom


@pytest.fixture
async def db_path(tmp_path):
    path = str(tmp_path / "petquest.db")
    await schema.init_db(db_path=path)
    yield path
    await db_client.close_connection(db_path=path)


@pytest.mark.unit
class TestSqlitePetRepository:
    """Tests for SqlitePetRepository."""

    async def test_round_trip(self, db_path, make_pet):
        repository = SqlitePetRepository(db_path=db_path)
        pet = make_pet(skills=["Fire Breath"], achievements=["First Flight"])

        await repository.add(pet)

        assert await repository.get("pet_001") == pet

    async def test_missing_pet_is_none(self, db_path):
        assert await SqlitePetRepository(db_path=db_path).get("nope") is None

    async def test_duplicate_add_rejected(self, db_path, make_pet):
        repository = SqlitePetRepository(db_path=db_path)
        await repository.add(make_pet())

        with pytest.raises(ValueError, match="already exists"):
            await repository.add(make_pet())

    async def test_list_by_owner_ignores_case(self, db_path, make_pet):
        repository = SqlitePetRepository(db_path=db_path)
        await repository.add(make_pet(token_id="pet_a"))
        await repository.add(make_pet(token_id="pet_b", owner=OWNER.upper()))
        await repository.add(make_pet(token_id="pet_c", owner="0xOther"))

        pets = await repository.list_by_owner(OWNER.lower())

        assert sorted(pet.token_id for pet in pets) == ["pet_a", "pet_b"]

    async def test_owner_with_quotes(self, db_path, make_pet):
        repository = SqlitePetRepository(db_path=db_path)
        await repository.add(make_pet(owner='0x"quoted" && owner'))

        pets = await repository.list_by_owner('0x"quoted" && owner')

        assert [pet.token_id for pet in pets] == ["pet_001"]

    @pytest.mark.parametrize("owner", ["007", "true", "1.50"])
    async def test_numeric_looking_owner(self, db_path, make_pet, owner):
        repository = SqlitePetRepository(db_path=db_path)
        await repository.add(make_pet(owner=owner))

        pets = await repository.list_by_owner(owner)

        assert [pet.token_id for pet in pets] == ["pet_001"]

    async def test_corrupt_row_raises_storage_error(self, db_path):
        await db_client.upsert_record(
            collection="pets",
            record_id="pet_bad",
            data={"token_id": "pet_bad"},
            columns={"owner": "0xabc"},
            db_path=db_path,
        )

        with pytest.raises(StorageError):
            await SqlitePetRepository(db_path=db_path).get("pet_bad")

    async def test_store_over_sqlite(self, db_path, make_pet, clock):
        repository = SqlitePetRepository(db_path=db_path)
        await repository.add(make_pet(level=4, experience=1600))
        store = PetStore(repository, rng=FixedChoiceRandom(), clock=clock)

        await store.apply_experience("pet_001", 1000)

        stored = await repository.get("pet_001")
        assert stored.level == 5
        assert stored.skills == ["Fire Breath"]


@pytest.mark.unit
class TestSqliteTaskRepository:
    """Tests for SqliteTaskRepository."""

    async def test_round_trip(self, db_path, now):
        repository = SqliteTaskRepository(db_path=db_path)
        record = TaskProgress(started_at=now, progress=40, requirements={"level_met": True})

        await repository.save(USER, "task_002", record)

        assert await repository.get(USER, "task_002") == record

    async def test_missing_record_is_none(self, db_path):
        assert await SqliteTaskRepository(db_path=db_path).get(USER, "task_001") is None

    async def test_list_for_user(self, db_path):
        repository = SqliteTaskRepository(db_path=db_path)
        await repository.save(USER, "task_001", TaskProgress(completed=True, progress=100))
        await repository.save(USER, "task_002", TaskProgress(progress=10))
        await repository.save("0xUserB", "task_001", TaskProgress(progress=20))

        records = await repository.list_for_user(USER)

        assert set(records) == {"task_001", "task_002"}
        assert records["task_002"].progress == 10

    async def test_numeric_looking_user(self, db_path):
        repository = SqliteTaskRepository(db_path=db_path)
        await repository.save("0042", "task_001", TaskProgress(progress=30))

        records = await repository.list_for_user("0042")

        assert list(records) == ["task_001"]
        assert records["task_001"].progress == 30

    async def test_ids_containing_separators_stay_distinct(self, db_path):
        repository = SqliteTaskRepository(db_path=db_path)
        await repository.save("a:task_001", "task_002", TaskProgress(progress=10))
        await repository.save("a", "task_001:task_002", TaskProgress(progress=90))

        assert (await repository.get("a:task_001", "task_002")).progress == 10
        assert (await repository.get("a", "task_001:task_002")).progress == 90
        assert list(await repository.list_for_user("a")) == ["task_001:task_002"]
