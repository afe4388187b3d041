"""
Unit tests for the in-memory run repository.
"""

from urbanplan.repository import InMemoryRunRepository, RunFilter


class TestInMemoryRunRepository:
    def test_save_assigns_id(self, make_run):
        repository = InMemoryRunRepository()
        run = make_run()

        run_id = repository.save(run)

        assert run_id
        assert run.id is None
        assert repository.get(run_id).id == run_id
        assert repository.get(run_id).parameters == run.parameters

    def test_save_keeps_existing_id(self, make_run):
        repository = InMemoryRunRepository()
        assert repository.save(make_run(run_id="fixed")) == "fixed"

    def test_get_unknown(self):
        assert InMemoryRunRepository().get("missing") is None

    def test_list_newest_first(self, make_run, later):
        repository = InMemoryRunRepository()
        for minutes in (5, 0, 10):
            repository.save(make_run(created_at=later(minutes), minute=minutes))

        runs = repository.list()

        assert [run.metadata["minute"] for run in runs] == [10, 5, 0]
        assert len(repository) == 3

    def test_filters(self, make_run, later):
        repository = InMemoryRunRepository()
        repository.save(make_run(created_at=later(0), project="a"))
        repository.save(make_run(created_at=later(5), project="b"))
        repository.save(make_run(created_at=later(10), project="a"))

        by_project = repository.list(RunFilter(metadata={"project": "a"}))
        recent = repository.list(RunFilter(created_after=later(0)))
        limited = repository.list(RunFilter(limit=1))

        assert len(by_project) == 2
        assert len(recent) == 2
        assert limited[0].created_at == later(10)
